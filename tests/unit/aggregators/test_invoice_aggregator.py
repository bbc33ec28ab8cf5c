"""Unit tests for the invoice aggregator."""
import datetime as dt
from decimal import Decimal

import pytest

from timebill.aggregators import InvoiceAggregator
from timebill.models import Project


@pytest.fixture
def aggregator():
    return InvoiceAggregator()


@pytest.fixture
def projects(hourly_project, fixed_project):
    other_client = Project(
        id="proj-other", name="Other", clientId="client-2", billingType="fixed", fixedAmount=999
    )
    return [hourly_project, fixed_project, other_client]


class TestInvoiceAggregator:
    """Test aggregation of timesheets and fixed fees into a draft."""

    def test_march_invoice(self, aggregator, projects, sample_timesheets):
        """Test lines and totals for a client's month."""
        draft = aggregator.aggregate(
            client_id="client-1",
            date_issued=dt.date(2024, 3, 31),
            timesheets=sample_timesheets,
            projects=projects,
            tax_rate=Decimal("6"),
        )

        descriptions = [item.description for item in draft.items]
        assert descriptions == [
            "Website - Landing page",
            "Website - Internal sync",
            "Retainer - Monthly Fee",
        ]
        assert draft.totals.subtotal == Decimal("5250.00")
        assert draft.totals.tax == Decimal("315.00")
        assert draft.totals.total == Decimal("5565.00")
        assert draft.timesheet_ids == ["ts-1", "ts-2"]
        assert draft.project_ids == ["proj-fixed"]

    def test_non_billable_line_totals_zero(self, aggregator, projects, sample_timesheets):
        """Test non-billable entries appear with a zero amount."""
        draft = aggregator.aggregate(
            "client-1", dt.date(2024, 3, 1), sample_timesheets, projects, Decimal("6")
        )

        sync = next(i for i in draft.items if "Internal sync" in i.description)
        assert sync.quantity == Decimal("1")
        assert sync.total == Decimal("0")

    def test_fixed_fee_billed_every_month(self, aggregator, projects):
        """Test fixed projects contribute even without timesheets."""
        draft = aggregator.aggregate(
            "client-1", dt.date(2025, 7, 15), [], projects, Decimal("0")
        )

        assert [i.description for i in draft.items] == ["Retainer - Monthly Fee"]
        assert draft.totals.total == Decimal("5000.00")

    def test_other_client_excluded(self, aggregator, projects, sample_timesheets):
        """Test only the selected client's projects are billed."""
        draft = aggregator.aggregate(
            "client-2", dt.date(2024, 3, 31), sample_timesheets, projects, Decimal("0")
        )

        assert [i.description for i in draft.items] == ["Other - Monthly Fee"]
        assert draft.timesheet_ids == []

    @pytest.mark.parametrize(
        "client_id,date_issued", [(None, dt.date(2024, 3, 31)), ("client-1", None), ("", None)]
    )
    def test_missing_selection_returns_empty_draft(
        self, aggregator, projects, sample_timesheets, client_id, date_issued
    ):
        """Test that without client or date every total is zero."""
        draft = aggregator.aggregate(
            client_id, date_issued, sample_timesheets, projects, Decimal("6")
        )

        assert draft.is_empty
        assert draft.totals.total == Decimal("0")
        assert draft.totals.tax_rate == Decimal("6")

    def test_fixed_project_without_amount(self, aggregator):
        """Test a fixed project with no amount bills zero."""
        project = Project(id="p", name="Unpriced", clientId="c", billingType="fixed")

        draft = aggregator.aggregate("c", dt.date(2024, 3, 1), [], [project], Decimal("6"))

        assert draft.items[0].total == Decimal("0")
        assert draft.totals.total == Decimal("0.00")
