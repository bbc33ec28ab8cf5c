"""
Unit tests for SalaryCreditService.
"""

import datetime as dt
from decimal import Decimal
from unittest.mock import Mock

import pytest

from timebill.models import Invoice
from timebill.services.errors import (
    DuplicatePeriodError,
    InvalidRequestError,
    NotFoundError,
)
from timebill.services.salary_credit_service import SalaryCreditService


@pytest.fixture
def service(seeded_repository):
    return SalaryCreditService(seeded_repository, today=lambda: dt.date(2024, 4, 2))


def paid_invoice(**kwargs) -> Invoice:
    values = dict(
        invoice_number="acme-202403-001",
        client_id="client-1",
        date_issued=dt.date(2024, 3, 31),
        status="paid",
        total="5565",
    )
    values.update(kwargs)
    return Invoice(**values)


class TestMarkCredited:
    """Test cases for manual crediting."""

    def test_credits_previous_month(self, service):
        """Test that crediting in March credits February."""
        credit = service.mark_credited("proj-fixed", dt.date(2024, 3, 5))

        assert credit.id
        assert credit.work_month == dt.date(2024, 2, 1)
        assert credit.credited_date == dt.date(2024, 3, 5)
        assert credit.amount == Decimal("5000")
        assert credit.notes == (
            "Marked as credited on 2024-03-05 for work done in 2024-02-01"
        )

    def test_january_credits_december(self, service):
        credit = service.mark_credited("proj-fixed", dt.date(2024, 1, 31))

        assert credit.work_month == dt.date(2023, 12, 1)

    def test_duplicate_month_rejected(self, service):
        """Test that a second credit for the same month is refused."""
        service.mark_credited("proj-fixed", dt.date(2024, 3, 5))

        with pytest.raises(DuplicatePeriodError) as exc_info:
            service.mark_credited("proj-fixed", dt.date(2024, 3, 28))

        assert exc_info.value.status_code == 400
        assert len(service.list_credits(["proj-fixed"])) == 1

    @pytest.mark.parametrize("project_id,credited", [(None, dt.date(2024, 3, 5)), ("proj-fixed", None)])
    def test_required_fields(self, service, project_id, credited):
        with pytest.raises(InvalidRequestError, match="Project ID and credited date are required"):
            service.mark_credited(project_id, credited)

    def test_unknown_project(self, service):
        with pytest.raises(NotFoundError):
            service.mark_credited("nope", dt.date(2024, 3, 5))

    def test_hourly_project_rejected(self, service):
        with pytest.raises(InvalidRequestError, match="Only fixed billing projects"):
            service.mark_credited("proj-hourly", dt.date(2024, 3, 5))


class TestRecordForPaidInvoice:
    """Test cases for automatic crediting on payment."""

    def test_credits_invoice_month(self, service):
        """Test that the invoice's own month is credited."""
        credit = service.record_for_paid_invoice(paid_invoice())

        assert credit.project_id == "proj-fixed"
        assert credit.work_month == dt.date(2024, 3, 1)
        assert credit.credited_date == dt.date(2024, 4, 2)
        assert credit.amount == Decimal("5000")
        assert "acme-202403-001" in credit.notes

    def test_existing_credit_skipped(self, service):
        """Test that an existing credit is left alone without raising."""
        service.mark_credited("proj-fixed", dt.date(2024, 4, 1))

        assert service.record_for_paid_invoice(paid_invoice()) is None
        assert len(service.list_credits(["proj-fixed"])) == 1

    def test_no_fixed_project(self, service):
        assert service.record_for_paid_invoice(paid_invoice(client_id="client-2")) is None

    def test_no_client(self, service):
        assert service.record_for_paid_invoice(paid_invoice(client_id=None)) is None

    def test_failures_swallowed(self):
        """Test that repository failures never escape."""
        repository = Mock()
        repository.first_fixed_project.side_effect = RuntimeError("db down")
        service = SalaryCreditService(repository)

        assert service.record_for_paid_invoice(paid_invoice()) is None


class TestListCredits:
    """Test cases for listing credits."""

    def test_requires_ids(self, service):
        with pytest.raises(InvalidRequestError):
            service.list_credits([])

    def test_lists_credits(self, service):
        service.mark_credited("proj-fixed", dt.date(2024, 2, 5))
        service.mark_credited("proj-fixed", dt.date(2024, 3, 5))

        credits = service.list_credits(["proj-fixed", ""])

        assert [c.credited_date for c in credits] == [dt.date(2024, 3, 5), dt.date(2024, 2, 5)]
