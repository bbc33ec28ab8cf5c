"""Persistence layer for the billing database."""

from timebill.repositories.billing_repository import BillingRepository
from timebill.repositories.database import (
    Base,
    get_engine,
    get_session_factory,
    init_db,
    session_scope,
)

__all__ = [
    "Base",
    "BillingRepository",
    "get_engine",
    "get_session_factory",
    "init_db",
    "session_scope",
]
