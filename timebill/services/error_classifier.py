"""
Error classification utilities for mapping failures onto user-facing categories.
"""

import logging
import socket
from enum import Enum
from typing import Any, Dict, List

import requests.exceptions
from pydantic import ValidationError

from timebill.services.errors import (
    ApiError,
    DatabaseError,
    InvalidRequestError,
    NetworkError,
    NotFoundError,
    StateError,
    TimebillError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)


class ErrorCategory(Enum):
    """Classification of error categories."""

    VALIDATION = "validation"  # Missing or malformed input (400)
    AUTHORIZATION = "authorization"  # No session (401/403)
    STATE = "state"  # Conflicts such as duplicate credits
    NOT_FOUND = "not_found"  # Entity does not exist (404)
    SERVER = "server"  # 5xx and database failures
    NETWORK = "network"  # API unreachable
    UNKNOWN = "unknown"  # Anything else


def _empty_stats() -> Dict[str, int]:
    stats = {category.value: 0 for category in ErrorCategory}
    stats["total"] = 0
    return stats


class ErrorClassifier:
    """
    Classifies errors into categories and builds user-facing messages.

    Features:
    - Service error classification by type
    - HTTP status classification for API errors
    - Network error detection
    - Error banner generation
    - Statistics tracking
    """

    def __init__(self):
        """Initialize error classifier with statistics tracking."""
        self._stats: Dict[str, int] = _empty_stats()

    def classify(self, exception: BaseException) -> ErrorCategory:
        """
        Classify an exception into an error category.

        Args:
            exception: The exception to classify

        Returns:
            ErrorCategory classification
        """
        category = self._categorize(exception)
        self._stats["total"] += 1
        self._stats[category.value] += 1
        return category

    def _categorize(self, exception: BaseException) -> ErrorCategory:
        # Order matters: StateError is a 400 but is not a validation failure
        if isinstance(exception, StateError):
            return ErrorCategory.STATE

        if isinstance(exception, (InvalidRequestError, ValidationError)):
            return ErrorCategory.VALIDATION

        if isinstance(exception, UnauthorizedError):
            return ErrorCategory.AUTHORIZATION

        if isinstance(exception, NotFoundError):
            return ErrorCategory.NOT_FOUND

        if isinstance(exception, DatabaseError):
            return ErrorCategory.SERVER

        if isinstance(
            exception,
            (
                NetworkError,
                socket.timeout,
                requests.exceptions.ConnectionError,
                requests.exceptions.Timeout,
            ),
        ):
            return ErrorCategory.NETWORK

        if isinstance(exception, ApiError):
            return self._categorize_status(exception.status_code)

        return ErrorCategory.UNKNOWN

    @staticmethod
    def _categorize_status(status_code: int) -> ErrorCategory:
        if status_code in (401, 403):
            return ErrorCategory.AUTHORIZATION
        if status_code == 404:
            return ErrorCategory.NOT_FOUND
        if status_code == 409:
            return ErrorCategory.STATE
        if 400 <= status_code < 500:
            return ErrorCategory.VALIDATION
        if 500 <= status_code < 600:
            return ErrorCategory.SERVER
        return ErrorCategory.UNKNOWN

    def get_error_description(self, exception: BaseException) -> str:
        """
        Get the banner string shown to the user for an error.

        Service and API errors show their own message; network failures show
        a fixed retry hint; anything unexpected is described by type.

        Args:
            exception: The exception to describe

        Returns:
            Error description string
        """
        category = self._categorize(exception)

        if category == ErrorCategory.NETWORK:
            return NetworkError.default_message

        if isinstance(exception, TimebillError):
            return exception.message

        if isinstance(exception, ValidationError):
            first = exception.errors()[0] if exception.errors() else {}
            location = ".".join(str(part) for part in first.get("loc", ()))
            message = first.get("msg", str(exception))
            return f"Invalid {location}: {message}" if location else message

        return f"{type(exception).__name__}: {str(exception)}"

    def get_category_name(self, category: ErrorCategory) -> str:
        """
        Get human-readable name for an error category.

        Args:
            category: The error category

        Returns:
            Human-readable name
        """
        return category.value.replace("_", " ").capitalize()

    def classify_batch(self, exceptions: List[BaseException]) -> List[ErrorCategory]:
        """
        Classify multiple exceptions.

        Args:
            exceptions: List of exceptions to classify

        Returns:
            List of error categories
        """
        return [self.classify(exc) for exc in exceptions]

    def get_statistics(self) -> Dict[str, Any]:
        """
        Get error classification statistics.

        Returns:
            Dictionary with error counts per category
        """
        return self._stats.copy()

    def reset_statistics(self):
        """Reset error statistics."""
        self._stats = _empty_stats()
