"""
Unit tests for InvoiceService.
"""

import datetime as dt
from decimal import Decimal
from unittest.mock import Mock

import pytest

from timebill.aggregators.invoice_aggregator import InvoiceDraft
from timebill.services.errors import InvalidRequestError, NotFoundError
from timebill.services.invoice_service import InvoiceService
from timebill.services.salary_credit_service import SalaryCreditService

TODAY = dt.date(2024, 3, 31)


@pytest.fixture
def credits(seeded_repository):
    return SalaryCreditService(seeded_repository, today=lambda: TODAY)


@pytest.fixture
def service(seeded_repository, credits):
    return InvoiceService(seeded_repository, credits, today=lambda: TODAY)


class TestInvoiceNumbers:
    """Test cases for invoice number generation."""

    def test_first_of_month(self, service):
        assert service.generate_invoice_number("ws-1") == "acme-202403-001"

    def test_sequence_follows_existing(self, service):
        """Test that each created invoice advances the sequence."""
        draft = service.build_draft("ws-1", "client-1", TODAY)
        service.create_invoice("ws-1", draft)
        service.create_invoice("ws-1", draft)

        assert service.generate_invoice_number("ws-1") == "acme-202403-003"

    def test_workspace_without_slug(self, repository):
        service = InvoiceService(repository, Mock(), today=lambda: TODAY)

        assert service.generate_invoice_number("ws-unknown") == "INV-202403-001"

    def test_fallback_on_failure(self):
        """Test the timestamp fallback when the lookup fails."""
        repository = Mock()
        repository.get_workspace.side_effect = RuntimeError("db down")
        service = InvoiceService(repository, Mock(), today=lambda: TODAY)

        number = service.generate_invoice_number("ws-1")

        assert number.startswith("INV-")
        assert number[4:].isdigit()


class TestCreateInvoice:
    """Test cases for building and creating invoices."""

    def test_build_draft_uses_workspace_tax(self, service):
        """Test March drafting for the client with the default 6% tax."""
        draft = service.build_draft("ws-1", "client-1", TODAY)

        assert draft.timesheet_ids == ["ts-2", "ts-1"]
        assert draft.totals.subtotal == Decimal("5250.00")
        assert draft.totals.tax == Decimal("315.00")
        assert draft.totals.total == Decimal("5565.00")

    def test_build_draft_tax_override(self, service):
        draft = service.build_draft("ws-1", "client-1", TODAY, tax_rate=Decimal("0"))

        assert draft.totals.total == Decimal("5250.00")

    def test_create_persists_draft(self, service):
        draft = service.build_draft("ws-1", "client-1", TODAY)

        invoice = service.create_invoice("ws-1", draft, due_date=dt.date(2024, 4, 30))

        assert invoice.id
        assert invoice.invoice_number == "acme-202403-001"
        assert invoice.status == "draft"
        assert invoice.total == Decimal("5565.00")
        assert len(invoice.items) == 3
        assert service.list_invoices("ws-1")[0].id == invoice.id

    def test_create_requires_client(self, service):
        with pytest.raises(InvalidRequestError):
            service.create_invoice("ws-1", InvoiceDraft(client_id=None, date_issued=TODAY))


class TestUpdateInvoice:
    """Test cases for invoice updates and payment crediting."""

    @pytest.fixture
    def invoice(self, service):
        return service.create_invoice("ws-1", service.build_draft("ws-1", "client-1", TODAY))

    def test_paid_records_credit(self, service, credits, invoice):
        """Test that moving to paid credits the invoice month."""
        service.mark_status(invoice.id, "paid")

        stored = credits.list_credits(["proj-fixed"])
        assert [c.work_month for c in stored] == [dt.date(2024, 3, 1)]

    def test_already_paid_does_not_credit_again(self, service, seeded_repository, invoice):
        service.mark_status(invoice.id, "paid")
        credits = Mock()
        service.credits = credits

        service.mark_status(invoice.id, "paid")

        credits.record_for_paid_invoice.assert_not_called()

    def test_other_status_no_credit(self, service, credits, invoice):
        updated = service.mark_status(invoice.id, "sent")

        assert updated.status == "sent"
        assert credits.repository.list_salary_credits(["proj-fixed"]) == []

    def test_update_requires_id(self, service, invoice):
        invoice.id = None

        with pytest.raises(InvalidRequestError):
            service.update_invoice(invoice)

    def test_unknown_invoice(self, service):
        with pytest.raises(NotFoundError):
            service.mark_status("missing", "paid")

    def test_delete(self, service, invoice):
        service.delete_invoice(invoice.id)

        with pytest.raises(NotFoundError):
            service.delete_invoice(invoice.id)
