"""
Salary credit recording for fixed-billing projects.

A credit attributes a received monthly fee to a work month. Two paths
create credits:

- ``mark_credited``: a manual action. Crediting on day D credits the
  month before D, and a second credit for the same month is rejected.
- ``record_for_paid_invoice``: runs when an invoice becomes paid. It credits
  the invoice's own month, silently skips an existing credit, and never
  raises.

Uniqueness is enforced by the database constraint on
(project_id, work_month), not by a lookup before the insert.
"""

import datetime as dt
import logging
import threading
from decimal import Decimal
from typing import TYPE_CHECKING, Callable, List, Optional, Sequence

from timebill.calculators.time_utils import month_start, previous_month_start
from timebill.models import Invoice, SalaryCredit
from timebill.services.errors import (
    DuplicatePeriodError,
    DuplicateRecordError,
    InvalidRequestError,
    NotFoundError,
)
from timebill.utils.logging_utils import LogContext, log_function_call

if TYPE_CHECKING:
    from timebill.repositories.billing_repository import BillingRepository

logger = logging.getLogger(__name__)


class SalaryCreditService:
    """Records and lists salary credits."""

    def __init__(
        self,
        repository: "BillingRepository",
        today: Callable[[], dt.date] = dt.date.today,
    ):
        """
        Args:
            repository: Billing database access
            today: Returns the current date (injected for tests)
        """
        self.repository = repository
        self._today = today
        self._lock = threading.Lock()

    @log_function_call(include_args=True, level="INFO")
    def mark_credited(
        self, project_id: Optional[str], credited_date: Optional[dt.date]
    ) -> SalaryCredit:
        """
        Manually record that a fixed project's fee was received.

        Args:
            project_id: Project to credit
            credited_date: Date the payment arrived

        Returns:
            The stored SalaryCredit

        Raises:
            InvalidRequestError: A field is missing or the project is not fixed
            NotFoundError: The project does not exist
            DuplicatePeriodError: The work month is already credited
        """
        if not project_id or not credited_date:
            raise InvalidRequestError("Project ID and credited date are required")

        project = self.repository.get_project(project_id)
        if project is None:
            raise NotFoundError(f"Project {project_id} not found")

        if not project.is_fixed:
            raise InvalidRequestError(
                "Only fixed billing projects can have salary tracking"
            )

        work_month = previous_month_start(credited_date)
        credit = SalaryCredit(
            project_id=project_id,
            work_month=work_month,
            credited_date=credited_date,
            amount=project.fixed_amount or Decimal("0"),
            notes=(
                f"Marked as credited on {credited_date.isoformat()} "
                f"for work done in {work_month.isoformat()}"
            ),
        )

        with LogContext(project_id=project_id, work_month=work_month.isoformat()):
            try:
                with self._lock:
                    stored = self.repository.insert_salary_credit(credit)
            except DuplicateRecordError as e:
                logger.warning(
                    f"Project {project_id} already credited for {work_month:%Y-%m}"
                )
                raise DuplicatePeriodError() from e

            logger.info(
                f"Credited {stored.amount} to project {project.name} "
                f"for {work_month:%Y-%m}"
            )
        return stored

    def record_for_paid_invoice(self, invoice: Invoice) -> Optional[SalaryCredit]:
        """
        Credit the client's fixed project when an invoice is paid.

        The first fixed-billing project of the invoice's client is credited
        for the month of the invoice's issue date. Existing credits for that
        month are left alone. Every failure is logged and swallowed so that
        the invoice update itself always succeeds.

        Returns:
            The new credit, or None when nothing was recorded
        """
        try:
            return self._record_for_paid_invoice(invoice)
        except Exception as e:
            logger.error(
                f"Failed to create salary credit for invoice "
                f"{invoice.invoice_number}: {type(e).__name__}: {e}",
                exc_info=True,
            )
            return None

    def _record_for_paid_invoice(self, invoice: Invoice) -> Optional[SalaryCredit]:
        if not invoice.client_id:
            logger.debug(f"Invoice {invoice.invoice_number} has no client, no credit")
            return None

        project = self.repository.first_fixed_project(invoice.client_id)
        if project is None:
            logger.debug(f"Client {invoice.client_id} has no fixed project, no credit")
            return None

        work_month = month_start(invoice.date_issued)
        credit = SalaryCredit(
            project_id=project.id,
            work_month=work_month,
            credited_date=self._today(),
            amount=project.fixed_amount or invoice.total,
            notes=(
                f"Automatically credited when invoice {invoice.invoice_number} "
                f"was marked as paid"
            ),
        )

        try:
            with self._lock:
                stored = self.repository.insert_salary_credit(credit)
        except DuplicateRecordError:
            logger.info(
                f"Project {project.id} already credited for {work_month:%Y-%m}, skipping"
            )
            return None

        logger.info(
            f"Invoice {invoice.invoice_number} paid: credited {stored.amount} "
            f"to project {project.name} for {work_month:%Y-%m}"
        )
        return stored

    def list_credits(self, project_ids: Sequence[str]) -> List[SalaryCredit]:
        """
        List credits for projects, newest credited date first.

        Raises:
            InvalidRequestError: No project ids were given
        """
        ids = [p for p in project_ids if p]
        if not ids:
            raise InvalidRequestError("Project IDs are required")
        return self.repository.list_salary_credits(ids)
