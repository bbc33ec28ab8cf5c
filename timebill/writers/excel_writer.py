"""Excel exports for timesheets, projects and clients.

This module builds one DataFrame per export kind and writes it to a
single-sheet ``.xlsx`` workbook with fixed column widths. Money columns are
rendered as strings prefixed with the workspace currency symbol.
"""

import datetime as dt
import logging
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import pandas as pd
from openpyxl.utils import get_column_letter

from timebill.models.client import Client
from timebill.models.project import Project
from timebill.models.timesheet import TimesheetEntry

logger = logging.getLogger(__name__)

CURRENCY_SYMBOLS: Dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "CAD": "C$",
    "MYR": "RM",
    "SGD": "S$",
    "AUD": "A$",
    "JPY": "¥",
}
FALLBACK_CURRENCY_SYMBOL = "RM"


def get_currency_symbol(currency: Optional[str]) -> str:
    """Symbol for an ISO currency code, ``RM`` when unknown.

    Example:
        >>> get_currency_symbol("USD")
        '$'
        >>> get_currency_symbol("XYZ")
        'RM'
    """
    return CURRENCY_SYMBOLS.get((currency or "").upper(), FALLBACK_CURRENCY_SYMBOL)


def format_money(amount: Union[Decimal, int, float], symbol: str) -> str:
    return f"{symbol}{Decimal(str(amount)):.2f}"


@dataclass
class ExcelSheet:
    """A single export sheet.

    Attributes:
        name: Worksheet title
        frame: Rows to write
        widths: Column widths in characters, in column order
    """

    name: str
    frame: pd.DataFrame
    widths: List[int]


TIMESHEET_COLUMNS = [
    ("Date", 12),
    ("Project", 20),
    ("Client", 20),
    ("Hours", 8),
    ("Description", 40),
    ("Billable", 10),
    ("Hourly Rate", 12),
    ("Total", 12),
]

PROJECT_COLUMNS = [
    ("Project Name", 25),
    ("Project Code", 15),
    ("Client", 20),
    ("Billing Type", 12),
    ("Hourly Rate", 12),
    ("Fixed Amount", 14),
    ("Status", 12),
    ("Total Hours", 12),
    ("Total Revenue", 15),
]

CLIENT_COLUMNS = [
    ("Client Name", 25),
    ("Email", 30),
    ("Phone", 15),
    ("Address", 40),
    ("Status", 12),
    ("Total Projects", 15),
    ("Total Revenue", 15),
]


class ExcelExportGenerator:
    """Build export DataFrames from workspace data.

    Example:
        >>> generator = ExcelExportGenerator(currency="USD")
        >>> sheet = generator.timesheets_sheet(entries)
        >>> sheet.name
        'Timesheets'
    """

    def __init__(self, currency: str = "MYR"):
        self.symbol = get_currency_symbol(currency)

    def timesheets_sheet(self, timesheets: Sequence[TimesheetEntry]) -> ExcelSheet:
        rows = [
            {
                "Date": t.date.strftime("%Y-%m-%d"),
                "Project": t.project or "",
                "Client": t.client or "",
                "Hours": float(t.hours),
                "Description": t.description,
                "Billable": "Yes" if t.billable else "No",
                "Hourly Rate": format_money(t.hourly_rate, self.symbol),
                "Total": format_money(t.total, self.symbol),
            }
            for t in timesheets
        ]
        return self._sheet("Timesheets", rows, TIMESHEET_COLUMNS)

    def projects_sheet(
        self,
        projects: Sequence[Project],
        timesheets: Sequence[TimesheetEntry] = (),
    ) -> ExcelSheet:
        """Project list with hours and revenue totalled from ``timesheets``."""
        hours: Dict[str, Decimal] = {}
        revenue: Dict[str, Decimal] = {}
        for t in timesheets:
            hours[t.project_id] = hours.get(t.project_id, Decimal("0")) + t.hours
            revenue[t.project_id] = revenue.get(t.project_id, Decimal("0")) + t.total

        rows = [
            {
                "Project Name": p.name,
                "Project Code": p.code or "",
                "Client": p.client or "",
                "Billing Type": p.billing_type,
                "Hourly Rate": format_money(p.hourly_rate, self.symbol),
                "Fixed Amount": (
                    format_money(p.fixed_amount, self.symbol)
                    if p.fixed_amount is not None
                    else ""
                ),
                "Status": p.status,
                "Total Hours": float(hours.get(p.id, Decimal("0"))),
                "Total Revenue": format_money(
                    revenue.get(p.id, Decimal("0")), self.symbol
                ),
            }
            for p in projects
        ]
        return self._sheet("Projects", rows, PROJECT_COLUMNS)

    def clients_sheet(
        self,
        clients: Sequence[Client],
        projects: Sequence[Project] = (),
        timesheets: Sequence[TimesheetEntry] = (),
    ) -> ExcelSheet:
        """Client list with project counts and timesheet revenue per client."""
        project_client = {p.id: p.client_id for p in projects}
        project_count: Dict[str, int] = {}
        for p in projects:
            project_count[p.client_id] = project_count.get(p.client_id, 0) + 1
        revenue: Dict[str, Decimal] = {}
        for t in timesheets:
            client_id = project_client.get(t.project_id)
            if client_id:
                revenue[client_id] = revenue.get(client_id, Decimal("0")) + t.total

        rows = [
            {
                "Client Name": c.name,
                "Email": c.email or "",
                "Phone": c.phone or "",
                "Address": c.address or "",
                "Status": c.status,
                "Total Projects": project_count.get(c.id, 0),
                "Total Revenue": format_money(
                    revenue.get(c.id, Decimal("0")), self.symbol
                ),
            }
            for c in clients
        ]
        return self._sheet("Clients", rows, CLIENT_COLUMNS)

    def _sheet(self, name: str, rows: List[Dict], columns) -> ExcelSheet:
        names = [column for column, _ in columns]
        widths = [width for _, width in columns]
        return ExcelSheet(name=name, frame=pd.DataFrame(rows, columns=names), widths=widths)


def default_export_filename(kind: str, today: Optional[dt.date] = None) -> str:
    """``{kind}_{YYYY-MM-DD}.xlsx``"""
    today = today or dt.date.today()
    return f"{kind}_{today.isoformat()}.xlsx"


def write_excel(sheet: ExcelSheet, path: Union[str, Path]) -> Path:
    """Write ``sheet`` to ``path`` as a single-sheet workbook.

    Returns:
        The path written
    """
    path = Path(path)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        sheet.frame.to_excel(writer, index=False, sheet_name=sheet.name)
        worksheet = writer.sheets[sheet.name]
        for index, width in enumerate(sheet.widths, start=1):
            worksheet.column_dimensions[get_column_letter(index)].width = width

    logger.info(f"Exported {len(sheet.frame)} rows to {path} ({sheet.name})")
    return path
