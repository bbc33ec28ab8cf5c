"""Dashboard summary aggregation."""

import datetime as dt
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List

from timebill.calculators.billing_calculator import quantize_money
from timebill.calculators.time_utils import same_month
from timebill.models.invoice import Invoice
from timebill.models.project import Project
from timebill.models.salary_credit import SalaryCredit
from timebill.models.timesheet import TimesheetEntry

logger = logging.getLogger(__name__)


@dataclass
class DashboardSummary:
    """Headline figures for a workspace.

    Attributes:
        total_hours: Sum of hours over all timesheet entries
        active_projects: Number of projects with status ``active``
        pending_invoices: Number of draft or sent invoices
        monthly_revenue: Billable timesheet totals, plus this month's salary
            credits of active fixed projects, plus totals of paid invoices
    """

    total_hours: Decimal
    active_projects: int
    pending_invoices: int
    monthly_revenue: Decimal


def summarize_dashboard(
    timesheets: Iterable[TimesheetEntry],
    projects: Iterable[Project],
    invoices: Iterable[Invoice],
    credits: Iterable[SalaryCredit],
    today: dt.date,
) -> DashboardSummary:
    """Compute the dashboard summary.

    Salary credits count towards revenue only when their project is an
    active fixed-billing project and they were credited in the same month
    and year as ``today``.
    """
    timesheets = list(timesheets)
    projects: List[Project] = list(projects)
    invoices = list(invoices)

    total_hours = sum((t.hours for t in timesheets), Decimal("0"))
    active_projects = sum(1 for p in projects if p.is_active)
    pending_invoices = sum(1 for i in invoices if i.is_pending)

    timesheet_revenue = sum((t.total for t in timesheets), Decimal("0"))

    active_fixed_ids = {p.id for p in projects if p.is_active and p.is_fixed}
    credit_revenue = sum(
        (
            c.amount
            for c in credits
            if c.project_id in active_fixed_ids and same_month(c.credited_date, today)
        ),
        Decimal("0"),
    )

    invoice_revenue = sum(
        (i.total for i in invoices if i.status == "paid"), Decimal("0")
    )

    monthly_revenue = quantize_money(timesheet_revenue + credit_revenue + invoice_revenue)
    logger.debug(
        f"Dashboard revenue: timesheets={timesheet_revenue} "
        f"credits={credit_revenue} invoices={invoice_revenue}"
    )

    return DashboardSummary(
        total_hours=total_hours,
        active_projects=active_projects,
        pending_invoices=pending_invoices,
        monthly_revenue=monthly_revenue,
    )
