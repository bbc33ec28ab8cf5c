"""HTML rendering of invoices from ``{{placeholder}}`` templates.

Supported placeholders:

- ``{{workspace.name}}``, ``{{workspace.address}}``, ``{{workspace.email}}``,
  ``{{workspace.phone}}``, ``{{workspace.website}}``
- ``{{invoice.number}}``, ``{{invoice.date}}``, ``{{invoice.dueDate}}``,
  ``{{invoice.description}}``
- ``{{client.name}}``
- ``{{subtotal}}``, ``{{tax}}``, ``{{total}}``
- ``{{items_table}}``, the line items as HTML table rows
"""

import html
import re
from dataclasses import dataclass
from typing import Dict, Optional

from timebill.models.invoice import Invoice
from timebill.models.workspace import WorkspaceSettings
from timebill.writers.excel_writer import format_money, get_currency_symbol

PLACEHOLDER = re.compile(r"\{\{\s*([\w.]+)\s*\}\}")

_CELL = 'style="border: 1px solid #000; padding: 12px; font-size: 14px; color: #000;'

DEFAULT_INVOICE_TEMPLATE = """\
<div style="padding: 40px; max-width: 800px; margin: 0 auto; font-family: Arial, sans-serif; color: #000; background: #fff;">
  <div style="text-align: right; margin-bottom: 15px;">
    <h1 style="margin: 0; font-size: 32px; font-weight: bold;">INVOICE</h1>
  </div>
  <div style="display: flex; justify-content: space-between; align-items: flex-start; margin-bottom: 30px;">
    <div>
      <h3 style="margin: 0; font-size: 14px;">From:</h3>
      <p style="margin: 0 0 3px 0; font-weight: bold;">{{workspace.name}}</p>
      <p style="margin: 0 0 3px 0; font-size: 12px;">{{workspace.address}}</p>
      <p style="margin: 0 0 3px 0; font-size: 12px;">Phone: {{workspace.phone}}</p>
      <p style="margin: 0; font-size: 12px;">Email: {{workspace.email}}</p>
    </div>
    <div>
      <h3 style="margin: 0; font-size: 14px;">Bill To:</h3>
      <p style="margin: 0; font-weight: bold;">{{client.name}}</p>
    </div>
    <div style="text-align: right;">
      <p style="margin: 0; font-size: 12px;">Invoice: {{invoice.number}}</p>
      <p style="margin: 0; font-size: 12px;">Date: {{invoice.date}}</p>
      <p style="margin: 0; font-size: 12px;">Due: {{invoice.dueDate}}</p>
    </div>
  </div>
  <table style="width: 100%; border-collapse: collapse; margin-bottom: 25px; border: 1px solid #000;">
    <thead>
      <tr style="background-color: #000; color: #fff;">
        <th style="padding: 12px; text-align: left;">No</th>
        <th style="padding: 12px; text-align: left;">Description</th>
        <th style="padding: 12px; text-align: right;">Amount</th>
      </tr>
    </thead>
    <tbody>
      {{items_table}}
      <tr><td></td><td style="padding: 12px; text-align: right;">Subtotal</td><td style="padding: 12px; text-align: right;">{{subtotal}}</td></tr>
      <tr><td></td><td style="padding: 12px; text-align: right;">Tax</td><td style="padding: 12px; text-align: right;">{{tax}}</td></tr>
      <tr><td></td><td style="padding: 12px; text-align: right; font-weight: bold;">Total</td><td style="padding: 12px; text-align: right; font-weight: bold;">{{total}}</td></tr>
    </tbody>
  </table>
  <p style="font-size: 12px;">{{invoice.description}}</p>
  <p style="margin-top: 30px; font-size: 12px;">Thank you! Please let me know if you need additional details.</p>
</div>
"""


@dataclass
class InvoiceDocument:
    """Everything needed to render one invoice.

    Attributes:
        invoice: The invoice with its line items
        workspace_name: Fallback issuer name when settings carry no company name
        settings: Workspace settings (currency, contact details)
    """

    invoice: Invoice
    workspace_name: str
    settings: WorkspaceSettings

    @property
    def issuer_name(self) -> str:
        return self.settings.company_name or self.workspace_name

    @property
    def currency_symbol(self) -> str:
        return get_currency_symbol(self.settings.currency)


def render_items_table(document: InvoiceDocument) -> str:
    """Numbered ``<tr>`` rows, one per line item."""
    rows = []
    for index, item in enumerate(document.invoice.items, start=1):
        rows.append(
            "<tr>"
            f'<td {_CELL} text-align: left;">{index}</td>'
            f'<td {_CELL}"><div style="font-weight: bold;">{html.escape(item.description)}</div></td>'
            f'<td {_CELL} text-align: right;">'
            f"{format_money(item.total, document.currency_symbol)}</td>"
            "</tr>"
        )
    return "\n".join(rows)


def placeholder_values(document: InvoiceDocument) -> Dict[str, str]:
    invoice = document.invoice
    settings = document.settings
    symbol = document.currency_symbol
    values = {
        "workspace.name": document.issuer_name,
        "workspace.address": settings.address or "",
        "workspace.email": settings.email or "",
        "workspace.phone": settings.phone or "",
        "workspace.website": settings.website or "",
        "invoice.number": invoice.invoice_number or "",
        "invoice.date": invoice.date_issued.isoformat(),
        "invoice.dueDate": invoice.due_date.isoformat() if invoice.due_date else "",
        "invoice.description": invoice.notes or "",
        "client.name": invoice.client or "",
    }
    values = {key: html.escape(value) for key, value in values.items()}
    values["subtotal"] = html.escape(format_money(invoice.subtotal, symbol))
    values["tax"] = html.escape(format_money(invoice.tax, symbol))
    values["total"] = html.escape(format_money(invoice.total, symbol))
    values["items_table"] = render_items_table(document)
    return values


def render_invoice_html(
    document: InvoiceDocument, template_html: Optional[str] = None
) -> str:
    """Fill ``template_html`` (or the built-in template) for ``document``.

    Unknown placeholders are left in place.
    """
    template = template_html or DEFAULT_INVOICE_TEMPLATE
    values = placeholder_values(document)
    return PLACEHOLDER.sub(lambda m: values.get(m.group(1), m.group(0)), template)
