"""Timesheet data model for billing system.

This module defines the TimesheetEntry model which represents hours logged
against a project on a specific date.
"""

import datetime as dt
from decimal import Decimal
from typing import Optional

from pydantic import Field, computed_field, field_validator

from timebill.models.base import BaseDataModel, strip_not_empty, to_decimal


class TimesheetEntry(BaseDataModel):
    """Represents a single timesheet entry.

    The hourly rate is the rate of the entry's project, denormalized by the
    API so that entries can be totalled without a project lookup.

    Attributes:
        id: Entry identifier
        workspace_id: Owning workspace
        date: Date of the work
        project_id: Project the hours were logged against
        project: Project display name
        client: Client display name
        hours: Hours worked (positive)
        description: What was done
        billable: Whether the hours are chargeable to the client
        hourly_rate: The project's hourly rate
        total: Computed field - hours × hourly_rate when billable, else 0

    Example:
        >>> entry = TimesheetEntry(
        ...     date=dt.date(2024, 3, 15),
        ...     projectId="p-1",
        ...     hours=2.5,
        ...     description="Design review",
        ...     hourlyRate=100,
        ... )
        >>> entry.total
        Decimal('250.0')
    """

    id: Optional[str] = None
    workspace_id: Optional[str] = None
    date: dt.date = Field(..., description="Date of work")
    project_id: str = Field(..., min_length=1, description="Project identifier")
    project: Optional[str] = None
    client: Optional[str] = None
    hours: Decimal = Field(..., gt=0, description="Hours worked")
    description: str = Field("", description="Work description")
    billable: bool = True
    hourly_rate: Decimal = Field(Decimal("0"), ge=0)

    @field_validator("project_id")
    @classmethod
    def validate_not_empty(cls, v: str, info) -> str:
        return strip_not_empty(v, info.field_name)

    @field_validator("hours", mode="before")
    @classmethod
    def convert_hours(cls, v) -> Decimal:
        return to_decimal(v)

    @field_validator("hourly_rate", mode="before")
    @classmethod
    def convert_rate(cls, v) -> Decimal:
        if v is None:
            return Decimal("0")
        return to_decimal(v)

    @field_validator("description", mode="before")
    @classmethod
    def default_description(cls, v) -> str:
        return v or ""

    @computed_field  # type: ignore[misc]
    @property
    def total(self) -> Decimal:
        """Billed amount for this entry (0 for non-billable entries)."""
        if not self.billable:
            return Decimal("0")
        return self.hours * self.hourly_rate
