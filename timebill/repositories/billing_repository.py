"""Query layer over the billing database.

The repository converts between ORM rows and the pydantic models used by
the services. Integrity violations of unique constraints are raised as
``DuplicateRecordError``; any other SQLAlchemy failure becomes
``DatabaseError`` with the cause chained.
"""
import logging
from contextlib import contextmanager
from typing import Dict, Generator, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload, sessionmaker

from timebill.models import (
    Client,
    Invoice,
    InvoiceLineItem,
    Project,
    SalaryCredit,
    TimesheetEntry,
    Workspace,
    WorkspaceSettings,
)
from timebill.repositories.database import (
    ClientRow,
    InvoiceItemRow,
    InvoiceRow,
    ProjectRow,
    SalaryCreditRow,
    TimesheetRow,
    WorkspaceRow,
    WorkspaceSettingRow,
    session_scope,
)
from timebill.services.errors import DatabaseError, DuplicateRecordError

logger = logging.getLogger(__name__)


def _is_unique_violation(error: IntegrityError) -> bool:
    message = str(error.orig).lower()
    return "unique" in message or "duplicate" in message


def _workspace(row: WorkspaceRow) -> Workspace:
    return Workspace(id=row.id, name=row.name, slug=row.slug)


def _client(row: ClientRow) -> Client:
    return Client(
        id=row.id,
        workspace_id=row.workspace_id,
        name=row.name,
        email=row.email,
        phone=row.phone,
        address=row.address,
        status=row.status,
    )


def _project(row: ProjectRow) -> Project:
    return Project(
        id=row.id,
        workspace_id=row.workspace_id,
        name=row.name,
        code=row.code,
        client_id=row.client_id,
        client=row.client.name if row.client else None,
        billing_type=row.billing_type,
        hourly_rate=row.hourly_rate,
        fixed_amount=row.fixed_amount,
        status=row.status,
        notes=row.notes,
    )


def _timesheet(row: TimesheetRow) -> TimesheetEntry:
    project = row.project
    return TimesheetEntry(
        id=row.id,
        workspace_id=row.workspace_id,
        date=row.date,
        project_id=row.project_id,
        project=project.name if project else None,
        client=project.client.name if project and project.client else None,
        hours=row.hours,
        description=row.description,
        billable=row.billable,
        hourly_rate=project.hourly_rate if project else None,
    )


def _invoice(row: InvoiceRow) -> Invoice:
    return Invoice(
        id=row.id,
        workspace_id=row.workspace_id,
        invoice_number=row.invoice_number,
        client_id=row.client_id,
        client=row.client.name if row.client else None,
        template_id=row.template_id,
        date_issued=row.date_issued,
        due_date=row.due_date,
        status=row.status,
        subtotal=row.subtotal,
        tax=row.tax,
        total=row.total,
        notes=row.notes,
        items=[
            InvoiceLineItem(
                description=item.description,
                quantity=item.quantity,
                unit_price=item.unit_price,
                total=item.total,
            )
            for item in row.items
        ],
    )


def _credit(row: SalaryCreditRow) -> SalaryCredit:
    return SalaryCredit(
        id=row.id,
        project_id=row.project_id,
        work_month=row.work_month,
        credited_date=row.credited_date,
        amount=row.amount,
        notes=row.notes,
    )


class BillingRepository:
    """Reads and writes billing entities through SQLAlchemy sessions."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    @contextmanager
    def _session(self, action: str) -> Generator[Session, None, None]:
        try:
            with session_scope(self.session_factory) as session:
                yield session
        except IntegrityError as e:
            if _is_unique_violation(e):
                logger.info(f"Unique constraint rejected {action}")
                raise DuplicateRecordError(str(e.orig)) from e
            logger.error(f"Integrity error during {action}: {e.orig}")
            raise DatabaseError(str(e.orig)) from e
        except SQLAlchemyError as e:
            logger.error(f"Database error during {action}: {e}")
            raise DatabaseError(str(e)) from e

    # ------------------------------------------------------------------
    # Workspaces, clients, projects, timesheets
    # ------------------------------------------------------------------

    def add_workspace(self, workspace: Workspace) -> Workspace:
        with self._session("add workspace") as session:
            row = WorkspaceRow(id=workspace.id, name=workspace.name, slug=workspace.slug)
            session.add(row)
        return workspace

    def get_workspace(self, workspace_id: str) -> Optional[Workspace]:
        with self._session("get workspace") as session:
            row = session.get(WorkspaceRow, workspace_id)
            return _workspace(row) if row else None

    def get_settings(self, workspace_id: str) -> WorkspaceSettings:
        with self._session("get settings") as session:
            rows = session.scalars(
                select(WorkspaceSettingRow).where(
                    WorkspaceSettingRow.workspace_id == workspace_id
                )
            ).all()
            return WorkspaceSettings.from_mapping({r.key: r.value for r in rows})

    def save_settings(self, workspace_id: str, settings: WorkspaceSettings) -> None:
        """Upsert every key of the settings map."""
        mapping = settings.to_mapping()
        with self._session("save settings") as session:
            existing: Dict[str, WorkspaceSettingRow] = {
                r.key: r
                for r in session.scalars(
                    select(WorkspaceSettingRow).where(
                        WorkspaceSettingRow.workspace_id == workspace_id
                    )
                )
            }
            for key, value in mapping.items():
                if key in existing:
                    existing[key].value = value
                else:
                    session.add(
                        WorkspaceSettingRow(workspace_id=workspace_id, key=key, value=value)
                    )

    def add_client(self, workspace_id: str, client: Client) -> Client:
        with self._session("add client") as session:
            row = ClientRow(
                workspace_id=workspace_id,
                name=client.name,
                email=client.email,
                phone=client.phone,
                address=client.address,
                status=client.status,
            )
            if client.id:
                row.id = client.id
            session.add(row)
            session.flush()
            return _client(row)

    def get_client(self, client_id: str) -> Optional[Client]:
        with self._session("get client") as session:
            row = session.get(ClientRow, client_id)
            return _client(row) if row else None

    def add_project(self, workspace_id: str, project: Project) -> Project:
        with self._session("add project") as session:
            row = ProjectRow(
                workspace_id=workspace_id,
                client_id=project.client_id,
                name=project.name,
                code=project.code,
                billing_type=project.billing_type,
                hourly_rate=project.hourly_rate,
                fixed_amount=project.fixed_amount,
                status=project.status,
                notes=project.notes,
            )
            if project.id:
                row.id = project.id
            session.add(row)
            session.flush()
            session.refresh(row)
            return _project(row)

    def get_project(self, project_id: str) -> Optional[Project]:
        with self._session("get project") as session:
            row = session.get(ProjectRow, project_id)
            return _project(row) if row else None

    def list_projects(self, workspace_id: str) -> List[Project]:
        with self._session("list projects") as session:
            rows = session.scalars(
                select(ProjectRow)
                .options(selectinload(ProjectRow.client))
                .where(ProjectRow.workspace_id == workspace_id)
                .order_by(ProjectRow.created_at.desc())
            ).all()
            return [_project(r) for r in rows]

    def first_fixed_project(self, client_id: str) -> Optional[Project]:
        """Oldest fixed-billing project of a client, if any."""
        with self._session("find fixed project") as session:
            row = session.scalars(
                select(ProjectRow)
                .where(ProjectRow.client_id == client_id)
                .where(ProjectRow.billing_type == "fixed")
                .order_by(ProjectRow.created_at, ProjectRow.id)
                .limit(1)
            ).first()
            return _project(row) if row else None

    def add_timesheet(self, workspace_id: str, entry: TimesheetEntry) -> TimesheetEntry:
        with self._session("add timesheet") as session:
            row = TimesheetRow(
                workspace_id=workspace_id,
                project_id=entry.project_id,
                date=entry.date,
                hours=entry.hours,
                description=entry.description,
                billable=entry.billable,
            )
            if entry.id:
                row.id = entry.id
            session.add(row)
            session.flush()
            session.refresh(row)
            return _timesheet(row)

    def list_timesheets(self, workspace_id: str) -> List[TimesheetEntry]:
        with self._session("list timesheets") as session:
            rows = session.scalars(
                select(TimesheetRow)
                .options(selectinload(TimesheetRow.project).selectinload(ProjectRow.client))
                .where(TimesheetRow.workspace_id == workspace_id)
                .order_by(TimesheetRow.date.desc())
            ).all()
            return [_timesheet(r) for r in rows]

    # ------------------------------------------------------------------
    # Invoices
    # ------------------------------------------------------------------

    def list_invoice_numbers(self, workspace_id: str, prefix: str) -> List[str]:
        """Invoice numbers of a workspace starting with ``prefix``."""
        with self._session("list invoice numbers") as session:
            return list(
                session.scalars(
                    select(InvoiceRow.invoice_number)
                    .where(InvoiceRow.workspace_id == workspace_id)
                    .where(InvoiceRow.invoice_number.startswith(prefix, autoescape=True))
                ).all()
            )

    def create_invoice(self, workspace_id: str, invoice: Invoice) -> Invoice:
        with self._session("create invoice") as session:
            row = InvoiceRow(
                workspace_id=workspace_id,
                client_id=invoice.client_id,
                template_id=invoice.template_id,
                invoice_number=invoice.invoice_number,
                date_issued=invoice.date_issued,
                due_date=invoice.due_date,
                status=invoice.status,
                subtotal=invoice.subtotal,
                tax=invoice.tax,
                total=invoice.total,
                notes=invoice.notes,
                items=[
                    InvoiceItemRow(
                        position=position,
                        description=item.description,
                        quantity=item.quantity,
                        unit_price=item.unit_price,
                        total=item.total,
                    )
                    for position, item in enumerate(invoice.items)
                ],
            )
            session.add(row)
            session.flush()
            session.refresh(row)
            return _invoice(row)

    def get_invoice(self, invoice_id: str) -> Optional[Invoice]:
        with self._session("get invoice") as session:
            row = session.get(InvoiceRow, invoice_id)
            return _invoice(row) if row else None

    def list_invoices(self, workspace_id: str) -> List[Invoice]:
        with self._session("list invoices") as session:
            rows = session.scalars(
                select(InvoiceRow)
                .options(selectinload(InvoiceRow.items), selectinload(InvoiceRow.client))
                .where(InvoiceRow.workspace_id == workspace_id)
                .order_by(InvoiceRow.created_at.desc())
            ).all()
            return [_invoice(r) for r in rows]

    def update_invoice(self, invoice: Invoice) -> Optional[Invoice]:
        """Update invoice header fields; line items are left untouched."""
        with self._session("update invoice") as session:
            row = session.get(InvoiceRow, invoice.id)
            if row is None:
                return None
            row.status = invoice.status
            row.notes = invoice.notes
            row.client_id = invoice.client_id
            row.template_id = invoice.template_id
            row.date_issued = invoice.date_issued
            row.due_date = invoice.due_date
            row.subtotal = invoice.subtotal
            row.tax = invoice.tax
            row.total = invoice.total
            session.flush()
            return _invoice(row)

    def delete_invoice(self, invoice_id: str) -> bool:
        with self._session("delete invoice") as session:
            row = session.get(InvoiceRow, invoice_id)
            if row is None:
                return False
            session.delete(row)
            return True

    # ------------------------------------------------------------------
    # Salary credits
    # ------------------------------------------------------------------

    def insert_salary_credit(self, credit: SalaryCredit) -> SalaryCredit:
        """
        Insert a credit.

        Raises:
            DuplicateRecordError: A credit exists for the project and work month
        """
        with self._session("insert salary credit") as session:
            row = SalaryCreditRow(
                project_id=credit.project_id,
                work_month=credit.work_month,
                credited_date=credit.credited_date,
                amount=credit.amount,
                notes=credit.notes,
            )
            session.add(row)
            session.flush()
            return _credit(row)

    def list_salary_credits(self, project_ids: Iterable[str]) -> List[SalaryCredit]:
        """Credits for the projects, newest credited date first."""
        ids = list(project_ids)
        with self._session("list salary credits") as session:
            rows = session.scalars(
                select(SalaryCreditRow)
                .where(SalaryCreditRow.project_id.in_(ids))
                .order_by(SalaryCreditRow.credited_date.desc(), SalaryCreditRow.created_at.desc())
            ).all()
            return [_credit(r) for r in rows]
