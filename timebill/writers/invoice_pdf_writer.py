"""A4 PDF rendering of an invoice with the reportlab canvas."""

import datetime as dt
import logging
import re
from pathlib import Path
from typing import BinaryIO, Optional, Union

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from timebill.writers.excel_writer import format_money
from timebill.writers.invoice_renderer import InvoiceDocument

logger = logging.getLogger(__name__)

LEFT = 20 * mm
RIGHT = A4[0] - 20 * mm
RIGHT_BLOCK = 120 * mm
LINE = 5 * mm
BOTTOM_MARGIN = 25 * mm

_UNSAFE_FILENAME = re.compile(r"[^\w.-]+")


def default_pdf_filename(invoice_number: Optional[str], today: Optional[dt.date] = None) -> str:
    """``invoice_{number}_{YYYY-MM-DD}.pdf``"""
    today = today or dt.date.today()
    number = _UNSAFE_FILENAME.sub("-", invoice_number or "draft")
    return f"invoice_{number}_{today.isoformat()}.pdf"


class InvoicePdfWriter:
    """Draw an invoice onto an A4 page.

    Layout: title top right, issuer block left, "Bill To" block and invoice
    number/dates right, then the items table and totals. Long item lists
    continue on further pages.

    Example:
        >>> writer = InvoicePdfWriter(document)
        >>> writer.write("invoice.pdf")
    """

    def __init__(self, document: InvoiceDocument):
        self.document = document

    def write(self, target: Union[str, Path, BinaryIO]) -> None:
        """Render the PDF to a path or a binary file object."""
        if isinstance(target, Path):
            target = str(target)
        pdf = canvas.Canvas(target, pagesize=A4)
        pdf.setTitle(f"Invoice {self.document.invoice.invoice_number or ''}".strip())

        y = self._draw_header(pdf)
        y = self._draw_items(pdf, y)
        self._draw_totals(pdf, y)

        pdf.showPage()
        pdf.save()
        logger.info(
            f"Rendered invoice PDF {self.document.invoice.invoice_number} "
            f"with {len(self.document.invoice.items)} items"
        )

    def _draw_header(self, pdf: canvas.Canvas) -> float:
        invoice = self.document.invoice
        settings = self.document.settings
        height = A4[1]

        pdf.setFont("Helvetica-Bold", 24)
        pdf.drawRightString(RIGHT, height - 25 * mm, "INVOICE")

        y = height - 40 * mm
        pdf.setFont("Helvetica-Bold", 12)
        pdf.drawString(LEFT, y, self.document.issuer_name)
        pdf.setFont("Helvetica", 10)
        lines = (settings.address or "").splitlines()
        if settings.phone:
            lines.append(f"Phone: {settings.phone}")
        if settings.email:
            lines.append(f"Email: {settings.email}")
        if settings.website:
            lines.append(settings.website)
        left_y = y - LINE
        for line in lines:
            if line.strip():
                pdf.drawString(LEFT, left_y, line.strip())
                left_y -= LINE

        pdf.setFont("Helvetica-Bold", 12)
        pdf.drawString(RIGHT_BLOCK, y, "Bill To:")
        pdf.setFont("Helvetica", 10)
        right_y = y - LINE
        pdf.drawString(RIGHT_BLOCK, right_y, invoice.client or "")
        right_y -= 2 * LINE

        pdf.drawString(RIGHT_BLOCK, right_y, f"Number: {invoice.invoice_number or ''}")
        right_y -= LINE
        pdf.drawString(RIGHT_BLOCK, right_y, f"Date: {invoice.date_issued.isoformat()}")
        right_y -= LINE
        if invoice.due_date:
            pdf.drawString(RIGHT_BLOCK, right_y, f"Due: {invoice.due_date.isoformat()}")
            right_y -= LINE

        return min(left_y, right_y) - 2 * LINE

    def _table_heading(self, pdf: canvas.Canvas, y: float) -> float:
        pdf.setFont("Helvetica-Bold", 10)
        pdf.drawString(LEFT, y, "No")
        pdf.drawString(LEFT + 12 * mm, y, "Description")
        pdf.drawRightString(RIGHT - 50 * mm, y, "Qty")
        pdf.drawRightString(RIGHT - 28 * mm, y, "Rate")
        pdf.drawRightString(RIGHT, y, "Amount")
        y -= 2
        pdf.line(LEFT, y, RIGHT, y)
        pdf.setFont("Helvetica", 10)
        return y - LINE

    def _draw_items(self, pdf: canvas.Canvas, y: float) -> float:
        symbol = self.document.currency_symbol
        y = self._table_heading(pdf, y)
        for index, item in enumerate(self.document.invoice.items, start=1):
            if y < BOTTOM_MARGIN:
                pdf.showPage()
                y = self._table_heading(pdf, A4[1] - 25 * mm)
            pdf.drawString(LEFT, y, str(index))
            pdf.drawString(LEFT + 12 * mm, y, item.description[:60])
            pdf.drawRightString(RIGHT - 50 * mm, y, f"{item.quantity:.2f}")
            pdf.drawRightString(RIGHT - 28 * mm, y, format_money(item.unit_price, symbol))
            pdf.drawRightString(RIGHT, y, format_money(item.total, symbol))
            y -= LINE
        pdf.line(LEFT, y + LINE - 2, RIGHT, y + LINE - 2)
        return y - LINE

    def _draw_totals(self, pdf: canvas.Canvas, y: float) -> None:
        invoice = self.document.invoice
        symbol = self.document.currency_symbol
        if y < BOTTOM_MARGIN + 3 * LINE:
            pdf.showPage()
            y = A4[1] - 25 * mm

        pdf.setFont("Helvetica", 10)
        pdf.drawRightString(RIGHT - 28 * mm, y, "Subtotal")
        pdf.drawRightString(RIGHT, y, format_money(invoice.subtotal, symbol))
        y -= LINE
        pdf.drawRightString(RIGHT - 28 * mm, y, "Tax")
        pdf.drawRightString(RIGHT, y, format_money(invoice.tax, symbol))
        y -= LINE
        pdf.setFont("Helvetica-Bold", 11)
        pdf.drawRightString(RIGHT - 28 * mm, y, "Total")
        pdf.drawRightString(RIGHT, y, format_money(invoice.total, symbol))

        if invoice.notes:
            pdf.setFont("Helvetica", 9)
            y -= 2 * LINE
            for line in invoice.notes.splitlines():
                pdf.drawString(LEFT, y, line)
                y -= LINE
