"""Salary credit data model.

A salary credit records that the monthly fee of a fixed-billing project was
received for a given work month. There is at most one credit per project
and work month.
"""

import datetime as dt
from decimal import Decimal
from typing import Optional

from pydantic import Field, field_validator

from timebill.models.base import BaseDataModel, to_decimal


class SalaryCredit(BaseDataModel):
    """Represents a salary credit for a fixed-billing project.

    Attributes:
        id: Credit identifier
        project_id: Credited project
        work_month: First day of the month the work was done in
        credited_date: Date the payment was recorded
        amount: Credited amount
        notes: How the credit was recorded

    Example:
        >>> credit = SalaryCredit(
        ...     projectId="p-1",
        ...     workMonth="2024-02-01",
        ...     creditedDate="2024-03-05",
        ...     amount="3000.00",
        ... )
        >>> credit.work_month
        datetime.date(2024, 2, 1)
    """

    id: Optional[str] = None
    project_id: str = Field(..., min_length=1)
    work_month: dt.date
    credited_date: dt.date
    amount: Decimal = Decimal("0")
    notes: Optional[str] = None

    @field_validator("work_month")
    @classmethod
    def validate_month_start(cls, v: dt.date) -> dt.date:
        if v.day != 1:
            raise ValueError(f"work_month must be the first day of a month, got {v}")
        return v

    @field_validator("amount", mode="before")
    @classmethod
    def convert_to_decimal(cls, v) -> Decimal:
        if v is None:
            return Decimal("0")
        return to_decimal(v)
