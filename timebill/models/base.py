"""Base model for all data models in the billing system.

This module provides a base Pydantic model with common configuration
for reading the camelCase JSON payloads returned by the web API while
exposing snake_case attributes in Python.
"""

from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseDataModel(BaseModel):
    """Base class for all data models.

    Provides common configuration for:
    - Accepting camelCase API keys and snake_case Python names
    - Validation on assignment
    - Ignoring server-side fields the models do not track
      (createdAt, updatedAt, computed counters)

    Example:
        >>> class Client(BaseDataModel):
        ...     client_id: str
        >>> Client(clientId="c-1").client_id
        'c-1'
        >>> Client(client_id="c-1").model_dump(by_alias=True)
        {'clientId': 'c-1'}
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        validate_assignment=True,
        strict=False,
        # API payloads carry audit fields we do not model
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=False,
    )


def to_decimal(v: Any) -> Optional[Decimal]:
    """Convert a numeric JSON value to Decimal.

    None passes through unchanged. Floats are routed through ``str`` so
    that ``0.1`` becomes ``Decimal("0.1")`` rather than its binary
    approximation.

    Raises:
        ValueError: If the value cannot be converted to Decimal
    """
    if v is None or isinstance(v, Decimal):
        return v
    try:
        return Decimal(str(v))
    except (ArithmeticError, ValueError, TypeError) as e:
        raise ValueError(f"Cannot convert {v} to Decimal: {e}")


def strip_not_empty(v: str, field_name: str) -> str:
    """Return ``v`` stripped, raising ValueError when it is blank."""
    if not v or not v.strip():
        raise ValueError(f"{field_name} cannot be empty or whitespace")
    return v.strip()
