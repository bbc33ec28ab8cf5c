"""Invoice aggregator for building invoice drafts from workspace data.

This module turns a client's timesheet entries for one month and the
monthly fees of the client's fixed-billing projects into invoice line
items and totals. It works on collections that were already fetched for
a workspace and has no side effects.
"""

import datetime as dt
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from timebill.calculators.billing_calculator import (
    InvoiceTotals,
    calculate_invoice_totals,
    quantize_money,
)
from timebill.calculators.time_utils import same_month
from timebill.models.invoice import InvoiceLineItem
from timebill.models.project import Project
from timebill.models.timesheet import TimesheetEntry

logger = logging.getLogger(__name__)


@dataclass
class InvoiceDraft:
    """Container for an aggregated, not yet persisted invoice.

    Attributes:
        client_id: Billed client (None when no client was selected)
        date_issued: Issue date selecting the billed month
        items: Timesheet lines followed by fixed-fee lines
        totals: Subtotal, tax and total
        timesheet_ids: Ids of the timesheet entries that were billed
        project_ids: Ids of the fixed projects that contributed a fee

    Example:
        >>> draft = InvoiceAggregator().aggregate(
        ...     client_id="c-1",
        ...     date_issued=dt.date(2024, 3, 31),
        ...     timesheets=entries,
        ...     projects=projects,
        ...     tax_rate=Decimal("6"),
        ... )
        >>> draft.totals.total
        Decimal('1060.00')
    """

    client_id: Optional[str]
    date_issued: Optional[dt.date]
    items: List[InvoiceLineItem] = field(default_factory=list)
    totals: InvoiceTotals = field(default_factory=InvoiceTotals.zero)
    timesheet_ids: List[str] = field(default_factory=list)
    project_ids: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.items


class InvoiceAggregator:
    """Aggregates timesheets and fixed fees into an invoice draft.

    For a client and an issue date the aggregator:
    1. Keeps timesheet entries of the client's projects dated in the same
       calendar month as the issue date
    2. Adds one line per kept entry (billable hours × project rate,
       0 for non-billable entries)
    3. Adds one "Monthly Fee" line per fixed-billing project of the client,
       regardless of the month
    4. Computes subtotal, tax and total
    """

    def aggregate(
        self,
        client_id: Optional[str],
        date_issued: Optional[dt.date],
        timesheets: Iterable[TimesheetEntry],
        projects: Iterable[Project],
        tax_rate: Decimal,
    ) -> InvoiceDraft:
        """Build an invoice draft for a client and month.

        Args:
            client_id: Client to invoice
            date_issued: Issue date; its month selects the timesheet entries
            timesheets: All timesheet entries of the workspace
            projects: All projects of the workspace
            tax_rate: Tax rate as a percentage

        Returns:
            InvoiceDraft with line items and totals. Without a client or an
            issue date the draft is empty and every total is zero.
        """
        tax_rate = Decimal(tax_rate)
        if not client_id or date_issued is None:
            logger.debug("No client or issue date selected, returning empty draft")
            return InvoiceDraft(
                client_id=client_id,
                date_issued=date_issued,
                totals=InvoiceTotals.zero(tax_rate),
            )

        client_projects: Dict[str, Project] = {
            p.id: p for p in projects if p.id and p.client_id == client_id
        }

        matched = [
            entry
            for entry in timesheets
            if entry.project_id in client_projects
            and same_month(entry.date, date_issued)
        ]
        fixed_projects = [p for p in client_projects.values() if p.is_fixed]

        items: List[InvoiceLineItem] = []
        amounts: List[Decimal] = []

        for entry in matched:
            project_name = entry.project or client_projects[entry.project_id].name
            items.append(
                InvoiceLineItem(
                    description=f"{project_name} - {entry.description}",
                    quantity=entry.hours,
                    unit_price=entry.hourly_rate,
                    total=quantize_money(entry.total),
                )
            )
            amounts.append(entry.total)

        for project in fixed_projects:
            fee = project.fixed_amount or Decimal("0")
            items.append(
                InvoiceLineItem(
                    description=f"{project.name} - Monthly Fee",
                    quantity=Decimal("1"),
                    unit_price=fee,
                    total=fee,
                )
            )
            amounts.append(fee)

        totals = calculate_invoice_totals(amounts, tax_rate)

        logger.info(
            f"Aggregated invoice for client {client_id} ({date_issued:%Y-%m}): "
            f"{len(matched)} timesheet lines, {len(fixed_projects)} fixed fees, "
            f"total {totals.total}"
        )

        return InvoiceDraft(
            client_id=client_id,
            date_issued=date_issued,
            items=items,
            totals=totals,
            timesheet_ids=[e.id for e in matched if e.id],
            project_ids=[p.id for p in fixed_projects],
        )
