"""
Unit tests for the Excel exports.
"""

import datetime as dt
from decimal import Decimal

import pandas as pd
import pytest
from openpyxl import load_workbook

from timebill.writers.excel_writer import (
    ExcelExportGenerator,
    default_export_filename,
    format_money,
    get_currency_symbol,
    write_excel,
)


@pytest.fixture
def generator():
    return ExcelExportGenerator(currency="USD")


class TestCurrency:
    """Test cases for currency formatting."""

    @pytest.mark.parametrize(
        "code,symbol",
        [("USD", "$"), ("eur", "€"), ("MYR", "RM"), ("XYZ", "RM"), (None, "RM")],
    )
    def test_symbols(self, code, symbol):
        assert get_currency_symbol(code) == symbol

    def test_format_money(self):
        assert format_money(Decimal("250"), "$") == "$250.00"
        assert format_money(0.1, "RM") == "RM0.10"


class TestSheets:
    """Test cases for export DataFrames."""

    def test_timesheets_sheet(self, generator, sample_timesheets):
        """Test one row per entry with formatted money columns."""
        sheet = generator.timesheets_sheet(sample_timesheets)
        first = sheet.frame.iloc[0]

        assert sheet.name == "Timesheets"
        assert list(sheet.frame.columns) == [
            "Date", "Project", "Client", "Hours", "Description", "Billable", "Hourly Rate", "Total",
        ]
        assert first["Date"] == "2024-03-04"
        assert first["Hours"] == 2.5
        assert first["Total"] == "$250.00"
        assert sheet.frame.iloc[1]["Billable"] == "No"
        assert sheet.frame.iloc[1]["Total"] == "$0.00"

    def test_projects_sheet_totals(self, generator, hourly_project, fixed_project, sample_timesheets):
        """Test that hours and revenue are totalled per project."""
        sheet = generator.projects_sheet([hourly_project, fixed_project], sample_timesheets)
        hourly, fixed = sheet.frame.iloc[0], sheet.frame.iloc[1]

        assert hourly["Total Hours"] == 6.5
        assert hourly["Total Revenue"] == "$550.00"
        assert hourly["Fixed Amount"] == ""
        assert fixed["Fixed Amount"] == "$5000.00"
        assert fixed["Total Hours"] == 0.0

    def test_clients_sheet(self, generator, sample_client, hourly_project, fixed_project, sample_timesheets):
        sheet = generator.clients_sheet(
            [sample_client], [hourly_project, fixed_project], sample_timesheets
        )
        row = sheet.frame.iloc[0]

        assert row["Client Name"] == "Acme Corp"
        assert row["Total Projects"] == 2
        assert row["Total Revenue"] == "$550.00"

    def test_empty_sheet_keeps_columns(self, generator):
        sheet = generator.clients_sheet([])

        assert sheet.frame.empty
        assert len(sheet.frame.columns) == len(sheet.widths)


class TestWriteExcel:
    """Test cases for writing workbooks."""

    def test_write_and_read_back(self, generator, sample_timesheets, tmp_path):
        """Test the workbook has the sheet, rows and column widths."""
        path = write_excel(generator.timesheets_sheet(sample_timesheets), tmp_path / "out.xlsx")

        frame = pd.read_excel(path, sheet_name="Timesheets")
        assert len(frame) == 3
        assert frame["Description"].tolist() == ["Landing page", "Internal sync", "Wireframes"]

        worksheet = load_workbook(path)["Timesheets"]
        assert worksheet.column_dimensions["A"].width == 12
        assert worksheet.column_dimensions["E"].width == 40

    def test_default_filename(self):
        assert default_export_filename("timesheets", dt.date(2024, 3, 31)) == "timesheets_2024-03-31.xlsx"
