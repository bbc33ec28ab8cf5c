"""
HTTP client for the timebill web API.

Every request carries the configured session cookie. Non-2xx responses are
raised as ``ApiError`` with the server's ``error`` message; transport
failures are raised as ``NetworkError``. Nothing is retried.
"""

import datetime as dt
import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

import requests

from timebill.config.settings import TimebillConfig
from timebill.models import (
    Client,
    Invoice,
    InvoiceTemplate,
    Project,
    SalaryCredit,
    TimesheetEntry,
    Workspace,
    WorkspaceSettings,
)
from timebill.services.errors import ApiError, InvalidRequestError, NetworkError
from timebill.utils.logging_utils import sanitize_sensitive_data

logger = logging.getLogger(__name__)


def encode_payload(value: Any) -> Any:
    """Make a payload JSON-serializable (Decimal to float, dates to ISO)."""
    if isinstance(value, dict):
        return {k: encode_payload(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [encode_payload(v) for v in value]
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (dt.date, dt.datetime)):
        return value.isoformat()
    return value


class TimebillApiClient:
    """
    Client for the workspace-scoped JSON endpoints.

    Example:
        >>> client = TimebillApiClient.from_config(get_config())
        >>> projects = client.list_projects("ws-1")
    """

    def __init__(
        self,
        base_url: str,
        session_cookie: Optional[str] = None,
        cookie_name: str = "session",
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Root URL of the deployment, e.g. https://bill.example.com
            session_cookie: Opaque session cookie value
            cookie_name: Name of the session cookie
            timeout: Per-request timeout in seconds
            session: Pre-built requests session (for tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        if session_cookie:
            self.session.cookies.set(cookie_name, session_cookie)

    @classmethod
    def from_config(cls, config: TimebillConfig) -> "TimebillApiClient":
        return cls(
            base_url=config.api_url,
            session_cookie=config.session_cookie,
            cookie_name=config.session_cookie_name,
            timeout=config.request_timeout,
        )

    def close(self) -> None:
        self.session.close()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        body = encode_payload(json) if json is not None else None
        logger.debug(
            f"{method} {path} params={params} body={sanitize_sensitive_data(body)}"
        )

        try:
            response = self.session.request(
                method, url, params=params, json=body, timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"{method} {path} failed: {type(e).__name__}: {e}")
            raise NetworkError() from e

        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if not response.ok:
            message = payload.get("error") if isinstance(payload, dict) else None
            logger.warning(f"{method} {path} returned {response.status_code}: {message}")
            raise ApiError(response.status_code, message or response.reason)

        return payload if isinstance(payload, dict) else {}

    def _list(self, path: str, key: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        return self._request("GET", path, params=params).get(key) or []

    @staticmethod
    def _require_workspace(workspace_id: Optional[str]) -> str:
        if not workspace_id:
            raise InvalidRequestError("Workspace ID is required")
        return workspace_id

    # ------------------------------------------------------------------
    # Workspaces and settings
    # ------------------------------------------------------------------

    def list_workspaces(self) -> List[Workspace]:
        return [Workspace.model_validate(w) for w in self._list("/api/workspaces", "workspaces", {})]

    def get_workspace_settings(self, workspace_id: str) -> WorkspaceSettings:
        params = {"workspaceId": self._require_workspace(workspace_id)}
        settings = self._request("GET", "/api/workspace-settings", params=params)
        return WorkspaceSettings.from_mapping(settings.get("settings"))

    def save_workspace_settings(
        self, workspace_id: str, settings: WorkspaceSettings
    ) -> None:
        self._request(
            "POST",
            "/api/workspace-settings",
            json={
                "workspaceId": self._require_workspace(workspace_id),
                "settings": settings.to_mapping(),
            },
        )

    # ------------------------------------------------------------------
    # Clients
    # ------------------------------------------------------------------

    def list_clients(self, workspace_id: str) -> List[Client]:
        params = {"workspaceId": self._require_workspace(workspace_id)}
        return [Client.model_validate(c) for c in self._list("/api/clients", "clients", params)]

    def create_client(self, workspace_id: str, client: Client) -> Dict[str, Any]:
        body = client.model_dump(by_alias=True, exclude={"id"}, exclude_none=True)
        body["workspaceId"] = self._require_workspace(workspace_id)
        return self._request("POST", "/api/clients", json=body)

    def update_client(self, client: Client) -> Dict[str, Any]:
        return self._request("PUT", "/api/clients", json=client.model_dump(by_alias=True))

    def delete_client(self, client_id: str) -> None:
        self._request("DELETE", "/api/clients", params={"id": client_id})

    # ------------------------------------------------------------------
    # Projects and salary credits
    # ------------------------------------------------------------------

    def list_projects(self, workspace_id: str) -> List[Project]:
        params = {"workspaceId": self._require_workspace(workspace_id)}
        return [Project.model_validate(p) for p in self._list("/api/projects", "projects", params)]

    def create_project(self, workspace_id: str, project: Project) -> Dict[str, Any]:
        body = project.model_dump(
            by_alias=True, exclude={"id", "client"}, exclude_none=True
        )
        body["workspaceId"] = self._require_workspace(workspace_id)
        return self._request("POST", "/api/projects", json=body)

    def update_project(self, project: Project) -> Dict[str, Any]:
        body = project.model_dump(by_alias=True, exclude={"client"})
        return self._request("PUT", "/api/projects", json=body)

    def delete_project(self, project_id: str) -> None:
        self._request("DELETE", "/api/projects", params={"id": project_id})

    def mark_credited(self, project_id: str, credited_date: dt.date) -> SalaryCredit:
        response = self._request(
            "POST",
            "/api/projects/mark-credited",
            json={"projectId": project_id, "creditedDate": credited_date},
        )
        return SalaryCredit.model_validate(response.get("salaryCredit") or {})

    def list_salary_credits(self, project_ids: Iterable[str]) -> List[SalaryCredit]:
        ids = [p for p in project_ids if p]
        if not ids:
            raise InvalidRequestError("Project IDs are required")
        credits = self._list("/api/salary-credits", "credits", {"projectIds": ",".join(ids)})
        return [SalaryCredit.model_validate(c) for c in credits]

    # ------------------------------------------------------------------
    # Timesheets
    # ------------------------------------------------------------------

    def list_timesheets(self, workspace_id: str) -> List[TimesheetEntry]:
        params = {"workspaceId": self._require_workspace(workspace_id)}
        return [
            TimesheetEntry.model_validate(t)
            for t in self._list("/api/timesheets", "timesheets", params)
        ]

    def create_timesheet(self, workspace_id: str, entry: TimesheetEntry) -> TimesheetEntry:
        body = {
            "workspaceId": self._require_workspace(workspace_id),
            "date": entry.date,
            "projectId": entry.project_id,
            "hours": entry.hours,
            "description": entry.description,
            "billable": entry.billable,
        }
        response = self._request("POST", "/api/timesheets", json=body)
        return TimesheetEntry.model_validate(response.get("timesheet") or body)

    def update_timesheet(self, entry: TimesheetEntry) -> Dict[str, Any]:
        body = {
            "id": entry.id,
            "date": entry.date,
            "projectId": entry.project_id,
            "hours": entry.hours,
            "description": entry.description,
            "billable": entry.billable,
        }
        return self._request("PUT", "/api/timesheets", json=body)

    def delete_timesheet(self, timesheet_id: str) -> None:
        self._request("DELETE", "/api/timesheets", params={"id": timesheet_id})

    # ------------------------------------------------------------------
    # Invoices and templates
    # ------------------------------------------------------------------

    def list_invoices(self, workspace_id: str) -> List[Invoice]:
        params = {"workspaceId": self._require_workspace(workspace_id)}
        return [Invoice.model_validate(i) for i in self._list("/api/invoices", "invoices", params)]

    def create_invoice(
        self,
        workspace_id: str,
        invoice: Invoice,
        timesheet_ids: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        """Create an invoice; the server assigns the invoice number."""
        body = invoice.model_dump(
            by_alias=True,
            exclude={"id", "invoice_number", "client", "status"},
            exclude_none=True,
        )
        body["workspaceId"] = self._require_workspace(workspace_id)
        body["timesheetIds"] = timesheet_ids or []
        return self._request("POST", "/api/invoices", json=body).get("invoice") or {}

    def update_invoice(self, invoice: Invoice) -> Dict[str, Any]:
        """Update an invoice; moving it to ``paid`` records a salary credit server-side."""
        body = invoice.model_dump(by_alias=True, exclude={"items", "client"})
        return self._request("PUT", "/api/invoices", json=body).get("invoice") or {}

    def delete_invoice(self, invoice_id: str) -> None:
        self._request("DELETE", "/api/invoices", params={"id": invoice_id})

    def list_templates(self, workspace_id: str) -> List[InvoiceTemplate]:
        params = {"workspaceId": self._require_workspace(workspace_id)}
        return [
            InvoiceTemplate.model_validate(t)
            for t in self._list("/api/invoice-templates", "templates", params)
        ]

    def create_template(self, workspace_id: str, template: InvoiceTemplate) -> Dict[str, Any]:
        body = template.model_dump(by_alias=True, exclude={"id"}, exclude_none=True)
        body["workspaceId"] = self._require_workspace(workspace_id)
        return self._request("POST", "/api/invoice-templates", json=body)

    def update_template(self, template: InvoiceTemplate) -> Dict[str, Any]:
        return self._request(
            "PUT", "/api/invoice-templates", json=template.model_dump(by_alias=True)
        )

    def delete_template(self, template_id: str) -> None:
        self._request("DELETE", "/api/invoice-templates", params={"id": template_id})
