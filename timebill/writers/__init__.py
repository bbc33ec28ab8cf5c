"""Writers module for exporting workspace data and rendering invoices.

This module provides Excel exports of timesheets, projects and clients,
and HTML and PDF rendering of invoices.
"""

from timebill.writers.excel_writer import (
    ExcelExportGenerator,
    ExcelSheet,
    default_export_filename,
    get_currency_symbol,
    write_excel,
)
from timebill.writers.invoice_pdf_writer import InvoicePdfWriter, default_pdf_filename
from timebill.writers.invoice_renderer import (
    DEFAULT_INVOICE_TEMPLATE,
    InvoiceDocument,
    render_invoice_html,
)

__all__ = [
    "DEFAULT_INVOICE_TEMPLATE",
    "ExcelExportGenerator",
    "ExcelSheet",
    "InvoiceDocument",
    "InvoicePdfWriter",
    "default_export_filename",
    "default_pdf_filename",
    "get_currency_symbol",
    "write_excel",
]
