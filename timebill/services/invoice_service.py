"""
Invoice lifecycle over the billing database.

Creates invoices from aggregated drafts with a sequential number, updates
them, and hands paid invoices to the salary credit recorder.
"""

import datetime as dt
import logging
from decimal import Decimal
from typing import TYPE_CHECKING, Callable, List, Optional

from timebill.aggregators.invoice_aggregator import InvoiceAggregator, InvoiceDraft
from timebill.calculators.invoice_number import (
    fallback_invoice_number,
    invoice_number_prefix,
    next_invoice_number,
)
from timebill.models import Invoice
from timebill.services.errors import InvalidRequestError, NotFoundError
from timebill.services.salary_credit_service import SalaryCreditService
from timebill.utils.logging_utils import LogContext, log_function_call

if TYPE_CHECKING:
    from timebill.repositories.billing_repository import BillingRepository

logger = logging.getLogger(__name__)


class InvoiceService:
    """
    Invoice creation, update and deletion.

    Example:
        >>> service = InvoiceService(repository, SalaryCreditService(repository))
        >>> draft = service.build_draft("ws-1", "client-1", dt.date(2024, 3, 31))
        >>> invoice = service.create_invoice("ws-1", draft, template_id="tpl-1")
        >>> invoice.invoice_number
        'acme-202403-001'
    """

    def __init__(
        self,
        repository: "BillingRepository",
        credits: SalaryCreditService,
        aggregator: Optional[InvoiceAggregator] = None,
        today: Callable[[], dt.date] = dt.date.today,
    ):
        self.repository = repository
        self.credits = credits
        self.aggregator = aggregator or InvoiceAggregator()
        self._today = today

    @log_function_call
    def generate_invoice_number(self, workspace_id: str) -> str:
        """
        Next invoice number for the workspace in the current month.

        Falls back to ``INV-{unix millis}`` if the lookup fails.
        """
        try:
            workspace = self.repository.get_workspace(workspace_id)
            slug = workspace.slug if workspace else None
            period = self._today()
            existing = self.repository.list_invoice_numbers(
                workspace_id, invoice_number_prefix(slug, period)
            )
            return next_invoice_number(slug, period, existing)
        except Exception as e:
            number = fallback_invoice_number()
            logger.error(
                f"Error generating invoice number for workspace {workspace_id}: "
                f"{type(e).__name__}: {e}. Using {number}"
            )
            return number

    def build_draft(
        self,
        workspace_id: str,
        client_id: Optional[str],
        date_issued: Optional[dt.date],
        tax_rate: Optional[Decimal] = None,
    ) -> InvoiceDraft:
        """Aggregate the workspace's data into a draft for a client and month."""
        if tax_rate is None:
            tax_rate = self.repository.get_settings(workspace_id).tax_rate
        return self.aggregator.aggregate(
            client_id=client_id,
            date_issued=date_issued,
            timesheets=self.repository.list_timesheets(workspace_id),
            projects=self.repository.list_projects(workspace_id),
            tax_rate=tax_rate,
        )

    def create_invoice(
        self,
        workspace_id: str,
        draft: InvoiceDraft,
        template_id: Optional[str] = None,
        due_date: Optional[dt.date] = None,
        notes: Optional[str] = None,
    ) -> Invoice:
        """
        Persist a draft as a new ``draft`` invoice.

        Raises:
            InvalidRequestError: The draft has no client or issue date
        """
        if not workspace_id or not draft.client_id or draft.date_issued is None:
            raise InvalidRequestError("Workspace ID, client ID and issue date are required")

        invoice = Invoice(
            workspace_id=workspace_id,
            invoice_number=self.generate_invoice_number(workspace_id),
            client_id=draft.client_id,
            template_id=template_id,
            date_issued=draft.date_issued,
            due_date=due_date,
            status="draft",
            subtotal=draft.totals.subtotal,
            tax=draft.totals.tax,
            total=draft.totals.total,
            notes=notes,
            items=draft.items,
        )

        with LogContext(workspace_id=workspace_id, invoice_number=invoice.invoice_number):
            stored = self.repository.create_invoice(workspace_id, invoice)
            logger.info(
                f"Created invoice {stored.invoice_number} for client {draft.client_id} "
                f"({len(draft.items)} items, total {stored.total})"
            )
        return stored

    def update_invoice(self, invoice: Invoice) -> Invoice:
        """
        Update an invoice.

        When the status moves to ``paid`` from any other status, a salary
        credit is recorded for the client's fixed project. A failure there is
        logged and does not affect the update.

        Raises:
            InvalidRequestError: The invoice has no id
            NotFoundError: The invoice does not exist
        """
        if not invoice.id:
            raise InvalidRequestError("Invoice ID is required")

        existing = self.repository.get_invoice(invoice.id)
        if existing is None:
            raise NotFoundError(f"Invoice {invoice.id} not found")

        updated = self.repository.update_invoice(invoice)
        if updated is None:
            raise NotFoundError(f"Invoice {invoice.id} not found")

        with LogContext(invoice_number=updated.invoice_number):
            if updated.status == "paid" and existing.status != "paid":
                logger.info(f"Invoice {updated.invoice_number} marked as paid")
                self.credits.record_for_paid_invoice(updated)
        return updated

    def mark_status(self, invoice_id: str, status: str) -> Invoice:
        """Change only the status of an invoice."""
        existing = self.repository.get_invoice(invoice_id)
        if existing is None:
            raise NotFoundError(f"Invoice {invoice_id} not found")
        invoice = existing.model_copy()
        invoice.status = status
        return self.update_invoice(invoice)

    def delete_invoice(self, invoice_id: str) -> None:
        if not invoice_id:
            raise InvalidRequestError("Invoice ID is required")
        if not self.repository.delete_invoice(invoice_id):
            raise NotFoundError(f"Invoice {invoice_id} not found")
        logger.info(f"Deleted invoice {invoice_id}")

    def list_invoices(self, workspace_id: str) -> List[Invoice]:
        return self.repository.list_invoices(workspace_id)
