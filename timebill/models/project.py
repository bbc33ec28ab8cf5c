"""Project data model for billing system.

This module defines the Project model. A project belongs to one client and
is billed either per hour (``hourly``) or as a flat monthly fee (``fixed``).
"""
from decimal import Decimal
from typing import Literal, Optional

from pydantic import Field, field_validator

from timebill.models.base import BaseDataModel, strip_not_empty, to_decimal

BillingType = Literal["hourly", "fixed"]
ProjectStatus = Literal["active", "completed", "on-hold"]


class Project(BaseDataModel):
    """Represents a project.

    Attributes:
        id: Project identifier
        workspace_id: Owning workspace
        name: Project name
        code: Short project code (optional)
        client_id: Client the project is billed to
        client: Client display name as returned by the API
        billing_type: ``hourly`` or ``fixed``
        hourly_rate: Rate per hour for hourly projects (0 when unset)
        fixed_amount: Monthly fee for fixed projects
        status: One of active, completed, on-hold
        notes: Free-form notes

    Example:
        >>> project = Project(
        ...     id="p-1",
        ...     name="Website Redesign",
        ...     clientId="c-1",
        ...     billingType="fixed",
        ...     fixedAmount=3000,
        ... )
        >>> project.is_fixed
        True
        >>> project.fixed_amount
        Decimal('3000')
    """

    id: Optional[str] = None
    workspace_id: Optional[str] = None
    name: str = Field(..., min_length=1, description="Project name")
    code: Optional[str] = None
    client_id: Optional[str] = None
    client: Optional[str] = Field(None, description="Client display name")
    billing_type: BillingType = "hourly"
    hourly_rate: Decimal = Field(Decimal("0"), ge=0, description="Hourly rate")
    fixed_amount: Optional[Decimal] = Field(None, ge=0, description="Monthly fee")
    status: ProjectStatus = "active"
    notes: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_not_empty(cls, v: str, info) -> str:
        """Validate that the project name is not empty or whitespace only.

        Raises:
            ValueError: If the value is empty or whitespace only
        """
        return strip_not_empty(v, info.field_name)

    @field_validator("billing_type", mode="before")
    @classmethod
    def default_billing_type(cls, v):
        # Older rows have no billing type and are hourly
        return v or "hourly"

    @field_validator("hourly_rate", mode="before")
    @classmethod
    def convert_rate(cls, v) -> Decimal:
        if v is None:
            return Decimal("0")
        return to_decimal(v)

    @field_validator("fixed_amount", mode="before")
    @classmethod
    def convert_amount(cls, v) -> Optional[Decimal]:
        return to_decimal(v)

    @property
    def is_fixed(self) -> bool:
        """True for projects billed as a flat monthly fee."""
        return self.billing_type == "fixed"

    @property
    def is_active(self) -> bool:
        return self.status == "active"
