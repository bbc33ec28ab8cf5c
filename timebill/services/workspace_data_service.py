"""
Cached read access to workspace collections.

Reads go through the ``DataCache`` keyed by resource and workspace; writes
go straight to the API and then drop the workspace's cached entries so the
next read sees the change.
"""

import datetime as dt
import logging
from concurrent.futures import Future
from typing import Dict, List, Optional

from timebill.models import (
    Client,
    Invoice,
    InvoiceTemplate,
    Project,
    SalaryCredit,
    TimesheetEntry,
    WorkspaceSettings,
)
from timebill.services.api_client import TimebillApiClient
from timebill.services.data_cache_service import DataCache

logger = logging.getLogger(__name__)


class WorkspaceDataService:
    """
    Workspace data access with TTL caching.

    Example:
        >>> with DataCache() as cache:
        ...     data = WorkspaceDataService(api, cache)
        ...     data.preload_workspace("ws-1")
        ...     projects = data.get_projects("ws-1")
    """

    def __init__(self, api: TimebillApiClient, cache: DataCache):
        self.api = api
        self.cache = cache

    def get_projects(self, workspace_id: str, force_refresh: bool = False) -> List[Project]:
        return self.cache.get_or_fetch(
            "projects",
            workspace_id,
            lambda: self.api.list_projects(workspace_id),
            force_refresh=force_refresh,
        )

    def get_clients(self, workspace_id: str, force_refresh: bool = False) -> List[Client]:
        return self.cache.get_or_fetch(
            "clients",
            workspace_id,
            lambda: self.api.list_clients(workspace_id),
            force_refresh=force_refresh,
        )

    def get_timesheets(
        self, workspace_id: str, force_refresh: bool = False
    ) -> List[TimesheetEntry]:
        return self.cache.get_or_fetch(
            "timesheets",
            workspace_id,
            lambda: self.api.list_timesheets(workspace_id),
            force_refresh=force_refresh,
        )

    def get_invoices(self, workspace_id: str, force_refresh: bool = False) -> List[Invoice]:
        return self.cache.get_or_fetch(
            "invoices",
            workspace_id,
            lambda: self.api.list_invoices(workspace_id),
            force_refresh=force_refresh,
        )

    def get_settings(
        self, workspace_id: str, force_refresh: bool = False
    ) -> WorkspaceSettings:
        return self.cache.get_or_fetch(
            "workspaceSettings",
            workspace_id,
            lambda: self.api.get_workspace_settings(workspace_id),
            force_refresh=force_refresh,
        )

    def get_templates(
        self, workspace_id: str, force_refresh: bool = False
    ) -> List[InvoiceTemplate]:
        return self.cache.get_or_fetch(
            "invoiceTemplates",
            workspace_id,
            lambda: self.api.list_templates(workspace_id),
            force_refresh=force_refresh,
        )

    def get_salary_credits(self, workspace_id: str) -> List[SalaryCredit]:
        """Credits of the workspace's fixed-billing projects (empty when none)."""
        fixed_ids = [p.id for p in self.get_projects(workspace_id) if p.is_fixed and p.id]
        if not fixed_ids:
            return []
        return self.cache.get_or_fetch(
            "salaryCredits",
            workspace_id,
            lambda: self.api.list_salary_credits(fixed_ids),
        )

    def find_project(self, workspace_id: str, project_id: str) -> Optional[Project]:
        for project in self.get_projects(workspace_id):
            if project.id == project_id:
                return project
        return None

    def preload_workspace(self, workspace_id: str) -> Dict[str, Optional[Future]]:
        """
        Warm the cache for the collections most commands need.

        Returns:
            Mapping of resource to its preload Future (None when already fresh)
        """
        fetchers = {
            "projects": lambda: self.api.list_projects(workspace_id),
            "clients": lambda: self.api.list_clients(workspace_id),
            "timesheets": lambda: self.api.list_timesheets(workspace_id),
            "workspaceSettings": lambda: self.api.get_workspace_settings(workspace_id),
        }
        return {
            resource: self.cache.preload(resource, workspace_id, fetcher)
            for resource, fetcher in fetchers.items()
        }

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_timesheet(self, workspace_id: str, entry: TimesheetEntry) -> TimesheetEntry:
        created = self.api.create_timesheet(workspace_id, entry)
        self.cache.invalidate_workspace(workspace_id)
        logger.info(
            f"Logged {entry.hours}h on project {entry.project_id} for {entry.date}"
        )
        return created

    def mark_credited(
        self, workspace_id: str, project_id: str, credited_date: dt.date
    ) -> SalaryCredit:
        credit = self.api.mark_credited(project_id, credited_date)
        self.cache.invalidate_workspace(workspace_id)
        return credit

    def update_invoice(self, workspace_id: str, invoice: Invoice) -> dict:
        result = self.api.update_invoice(invoice)
        self.cache.invalidate_workspace(workspace_id)
        return result

    def create_invoice(
        self, workspace_id: str, invoice: Invoice, timesheet_ids: Optional[List[str]] = None
    ) -> dict:
        result = self.api.create_invoice(workspace_id, invoice, timesheet_ids)
        self.cache.invalidate_workspace(workspace_id)
        return result
