"""
Services for the billing system.

This package provides:
- TimebillApiClient: HTTP client for the web API
- DataCache / WorkspaceDataService: TTL-cached workspace collections
- InvoiceService / SalaryCreditService: invoice lifecycle and salary credits
- ErrorClassifier: mapping failures to user-facing categories
"""

from .api_client import TimebillApiClient
from .data_cache_service import DataCache
from .error_classifier import ErrorCategory, ErrorClassifier
from .errors import (
    ApiError,
    DatabaseError,
    DuplicatePeriodError,
    DuplicateRecordError,
    InvalidRequestError,
    NetworkError,
    NotFoundError,
    StateError,
    TimebillError,
    UnauthorizedError,
)
from .invoice_service import InvoiceService
from .salary_credit_service import SalaryCreditService
from .workspace_data_service import WorkspaceDataService

__all__ = [
    "ApiError",
    "DataCache",
    "DatabaseError",
    "DuplicatePeriodError",
    "DuplicateRecordError",
    "ErrorCategory",
    "ErrorClassifier",
    "InvalidRequestError",
    "InvoiceService",
    "NetworkError",
    "NotFoundError",
    "SalaryCreditService",
    "StateError",
    "TimebillApiClient",
    "TimebillError",
    "UnauthorizedError",
    "WorkspaceDataService",
]
