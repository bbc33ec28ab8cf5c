"""Data models for the billing system.

This package contains Pydantic models for all business entities:
- BaseDataModel: Base class with common configuration
- Workspace, WorkspaceSettings: Tenant and its settings
- Client, Project: Who is billed and for what
- TimesheetEntry: Hours logged against a project
- Invoice, InvoiceLineItem, InvoiceTemplate: Invoicing
- SalaryCredit: Received monthly fees of fixed projects
"""

from timebill.models.base import BaseDataModel
from timebill.models.client import Client
from timebill.models.invoice import Invoice, InvoiceLineItem, InvoiceTemplate
from timebill.models.project import Project
from timebill.models.salary_credit import SalaryCredit
from timebill.models.timesheet import TimesheetEntry
from timebill.models.workspace import Workspace, WorkspaceSettings

__all__ = [
    "BaseDataModel",
    "Client",
    "Invoice",
    "InvoiceLineItem",
    "InvoiceTemplate",
    "Project",
    "SalaryCredit",
    "TimesheetEntry",
    "Workspace",
    "WorkspaceSettings",
]
