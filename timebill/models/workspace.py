"""Workspace and workspace settings models.

A workspace is the tenant boundary: every client, project, timesheet and
invoice belongs to exactly one. Settings are stored server-side as a flat
string key/value map which :class:`WorkspaceSettings` exposes as typed
attributes with defaults.
"""

from decimal import Decimal
from typing import Dict, Optional

from pydantic import Field, field_validator

from timebill.models.base import BaseDataModel, strip_not_empty, to_decimal

DEFAULT_CURRENCY = "MYR"
DEFAULT_TAX_RATE = Decimal("6")
DEFAULT_PAYMENT_TERMS = "Net 30"
DEFAULT_DATE_FORMAT = "DD MMMM YYYY"
DEFAULT_TIME_FORMAT = "12-hour"


class Workspace(BaseDataModel):
    """A tenant workspace.

    Attributes:
        id: Workspace identifier
        name: Display name
        slug: Short code used as the invoice number prefix (may be missing)
    """

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    slug: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_not_empty(cls, v: str, info) -> str:
        return strip_not_empty(v, info.field_name)


class WorkspaceSettings(BaseDataModel):
    """Typed view over the workspace settings key/value map.

    Known keys are exposed as attributes with the defaults the web
    application applies. Keys this model does not know about are kept in
    ``additional`` and written back unchanged by :meth:`to_mapping`.

    Example:
        >>> settings = WorkspaceSettings.from_mapping(
        ...     {"currency": "USD", "taxRate": "8", "theme": "dark"}
        ... )
        >>> settings.currency, settings.tax_rate
        ('USD', Decimal('8'))
        >>> settings.additional
        {'theme': 'dark'}
    """

    currency: str = DEFAULT_CURRENCY
    tax_rate: Decimal = DEFAULT_TAX_RATE
    invoice_prefix: Optional[str] = None
    payment_terms: str = DEFAULT_PAYMENT_TERMS
    date_format: str = DEFAULT_DATE_FORMAT
    time_format: str = DEFAULT_TIME_FORMAT
    company_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    website: Optional[str] = None
    auto_save: bool = False
    additional: Dict[str, str] = Field(default_factory=dict, exclude=True)

    @field_validator("tax_rate", mode="before")
    @classmethod
    def convert_to_decimal(cls, v):
        return to_decimal(v)

    @field_validator("auto_save", mode="before")
    @classmethod
    def parse_bool(cls, v):
        if isinstance(v, str):
            return v.strip().lower() in ("true", "1", "yes", "on")
        return v

    @classmethod
    def from_mapping(cls, mapping: Optional[Dict[str, object]]) -> "WorkspaceSettings":
        """Build settings from the flat map returned by the settings endpoint.

        Empty string values are treated as unset so the defaults apply.
        """
        known = set()
        for name, field in cls.model_fields.items():
            if name != "additional":
                known.update((name, field.alias or name))
        values = {}
        additional = {}
        for key, value in (mapping or {}).items():
            if value is None or value == "":
                continue
            if key in known:
                values[key] = value
            else:
                additional[key] = str(value)
        return cls(**values, additional=additional)

    def to_mapping(self) -> Dict[str, str]:
        """Serialize back to the flat string map, unknown keys included."""
        result: Dict[str, str] = {}
        for key, value in self.model_dump(by_alias=True).items():
            if value is None:
                continue
            if isinstance(value, bool):
                result[key] = "true" if value else "false"
            else:
                result[key] = str(value)
        result.update(self.additional)
        return result
