"""Invoice, invoice line item and invoice template models."""

import datetime as dt
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import Field, field_validator

from timebill.models.base import BaseDataModel, strip_not_empty, to_decimal

InvoiceStatus = Literal["draft", "sent", "paid", "overdue"]

PENDING_STATUSES = ("draft", "sent")


class InvoiceLineItem(BaseDataModel):
    """A single line on an invoice.

    Attributes:
        description: Line description, e.g. "Website - Monthly Fee"
        quantity: Hours for timesheet lines, 1 for fixed fees
        unit_price: Hourly rate or fixed amount
        total: quantity × unit_price
    """

    description: str
    quantity: Decimal = Decimal("1")
    unit_price: Decimal = Decimal("0")
    total: Decimal = Decimal("0")

    @field_validator("quantity", "unit_price", "total", mode="before")
    @classmethod
    def convert_to_decimal(cls, v) -> Decimal:
        return to_decimal(v)


class Invoice(BaseDataModel):
    """Represents an invoice issued to a client.

    Attributes:
        id: Invoice identifier
        workspace_id: Owning workspace
        invoice_number: Human-readable number, ``{slug}-{YYYYMM}-{seq}``
        client_id: Billed client
        client: Client display name
        template_id: Invoice template used for rendering
        date_issued: Issue date, which also selects the billed month
        due_date: Payment due date
        status: One of draft, sent, paid, overdue
        subtotal: Sum of line items before tax
        tax: Tax amount
        total: subtotal + tax
        notes: Notes printed on the invoice
        items: Line items
    """

    id: Optional[str] = None
    workspace_id: Optional[str] = None
    invoice_number: Optional[str] = None
    client_id: Optional[str] = None
    client: Optional[str] = None
    template_id: Optional[str] = None
    date_issued: dt.date
    due_date: Optional[dt.date] = None
    status: InvoiceStatus = "draft"
    subtotal: Decimal = Decimal("0")
    tax: Decimal = Decimal("0")
    total: Decimal = Decimal("0")
    notes: Optional[str] = None
    items: List[InvoiceLineItem] = Field(default_factory=list)

    @field_validator("subtotal", "tax", "total", mode="before")
    @classmethod
    def convert_to_decimal(cls, v) -> Decimal:
        if v is None:
            return Decimal("0")
        return to_decimal(v)

    @field_validator("due_date", mode="before")
    @classmethod
    def empty_due_date(cls, v):
        return v or None

    @property
    def is_pending(self) -> bool:
        return self.status in PENDING_STATUSES


class InvoiceTemplate(BaseDataModel):
    """An HTML invoice template with ``{{placeholder}}`` fields."""

    id: Optional[str] = None
    workspace_id: Optional[str] = None
    name: str
    html_template: str
    is_default: bool = False

    @field_validator("name")
    @classmethod
    def validate_not_empty(cls, v: str, info) -> str:
        return strip_not_empty(v, info.field_name)
