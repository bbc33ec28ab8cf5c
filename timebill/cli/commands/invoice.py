"""Invoice commands.

By default every command talks to the web API. ``--local`` commands run
against the local database configured by TIMEBILL_DATABASE_URL instead.
"""

import datetime as dt
from decimal import Decimal
from pathlib import Path
from typing import Optional

import click

from timebill.aggregators import InvoiceAggregator, InvoiceDraft
from timebill.calculators import next_invoice_number
from timebill.cli.context import CliContext
from timebill.cli.error_handlers import with_error_handling
from timebill.cli.utils.formatters import (
    format_currency,
    format_info,
    format_success,
    format_table,
    format_warning,
)
from timebill.models import Invoice
from timebill.services.errors import NotFoundError
from timebill.writers import (
    InvoiceDocument,
    InvoicePdfWriter,
    default_pdf_filename,
    render_invoice_html,
)

INVOICE_STATUSES = ["draft", "sent", "paid", "overdue"]

workspace_option = click.option(
    "--workspace", "workspace_id", default=None, help="Workspace ID (defaults to the remembered one)"
)
local_option = click.option(
    "--local", is_flag=True, default=False, help="Use the local database instead of the API"
)
date_type = click.DateTime(formats=["%Y-%m-%d"])


@click.group(name="invoice")
def invoice():
    """Preview, number, create and render invoices."""


def _api_draft(
    obj: CliContext,
    workspace_id: str,
    client_id: str,
    date_issued: dt.date,
    tax_rate: Optional[Decimal],
) -> InvoiceDraft:
    if tax_rate is None:
        tax_rate = obj.data.get_settings(workspace_id).tax_rate
    return InvoiceAggregator().aggregate(
        client_id=client_id,
        date_issued=date_issued,
        timesheets=obj.data.get_timesheets(workspace_id),
        projects=obj.data.get_projects(workspace_id),
        tax_rate=tax_rate,
    )


def _echo_draft(draft: InvoiceDraft, currency: str) -> None:
    if draft.is_empty:
        click.echo(format_warning("No billable work or monthly fees for this client and month."))
        return

    rows = [
        [
            item.description,
            f"{item.quantity}",
            format_currency(item.unit_price, currency),
            format_currency(item.total, currency),
        ]
        for item in draft.items
    ]
    click.echo(format_table(["Description", "Qty", "Rate", "Amount"], rows))
    click.echo(f"Subtotal: {format_currency(draft.totals.subtotal, currency)}")
    click.echo(f"Tax ({draft.totals.tax_rate}%): {format_currency(draft.totals.tax, currency)}")
    click.echo(f"Total: {format_currency(draft.totals.total, currency)}")


def _find_invoice(obj: CliContext, workspace_id: str, reference: str) -> Invoice:
    for candidate in obj.data.get_invoices(workspace_id):
        if reference in (candidate.id, candidate.invoice_number):
            return candidate
    raise NotFoundError(f"Invoice {reference} not found")


def _document(obj: CliContext, workspace_id: str, invoice: Invoice) -> InvoiceDocument:
    workspace = next(
        (w for w in obj.api.list_workspaces() if w.id == workspace_id), None
    )
    return InvoiceDocument(
        invoice=invoice,
        workspace_name=workspace.name if workspace else workspace_id,
        settings=obj.data.get_settings(workspace_id),
    )


@invoice.command(name="preview")
@click.option("--client", "client_id", required=True, help="Client to invoice")
@click.option("--date", "date_issued", type=date_type, default=None, help="Issue date (YYYY-MM-DD, default today)")
@click.option("--tax-rate", type=Decimal, default=None, help="Tax rate in percent (default from workspace settings)")
@workspace_option
@local_option
@click.pass_obj
def preview_invoice(obj, client_id, date_issued, tax_rate, workspace_id, local):
    """Show the line items and totals an invoice would get.

    Example:
        timebill invoice preview --client c_1 --date 2024-03-31
    """
    with with_error_handling(obj.debug):
        ws = obj.workspace_id(workspace_id)
        issued = date_issued.date() if date_issued else obj.today()
        if local:
            draft = obj.invoice_service.build_draft(ws, client_id, issued, tax_rate)
            currency = obj.repository.get_settings(ws).currency
        else:
            draft = _api_draft(obj, ws, client_id, issued, tax_rate)
            currency = obj.data.get_settings(ws).currency
        _echo_draft(draft, currency)


@invoice.command(name="next-number")
@workspace_option
@local_option
@click.pass_obj
def next_number(obj, workspace_id, local):
    """Print the next invoice number for this month.

    Example:
        timebill invoice next-number
    """
    with with_error_handling(obj.debug):
        ws = obj.workspace_id(workspace_id)
        if local:
            click.echo(obj.invoice_service.generate_invoice_number(ws))
            return

        workspace = next((w for w in obj.api.list_workspaces() if w.id == ws), None)
        if workspace is None:
            raise NotFoundError(f"Workspace {ws} not found")
        numbers = [i.invoice_number for i in obj.data.get_invoices(ws) if i.invoice_number]
        click.echo(next_invoice_number(workspace.slug, obj.today(), numbers))


@invoice.command(name="create")
@click.option("--client", "client_id", required=True, help="Client to invoice")
@click.option("--date", "date_issued", type=date_type, default=None, help="Issue date (YYYY-MM-DD, default today)")
@click.option("--due-date", type=date_type, default=None, help="Payment due date (YYYY-MM-DD)")
@click.option("--template", "template_id", default=None, help="Invoice template ID")
@click.option("--notes", default=None, help="Notes printed on the invoice")
@workspace_option
@local_option
@click.pass_obj
def create_invoice(obj, client_id, date_issued, due_date, template_id, notes, workspace_id, local):
    """Create a draft invoice from a client's work in the issue month.

    Example:
        timebill invoice create --client c_1 --date 2024-03-31 --due-date 2024-04-30
    """
    with with_error_handling(obj.debug):
        ws = obj.workspace_id(workspace_id)
        issued = date_issued.date() if date_issued else obj.today()
        due = due_date.date() if due_date else None

        if local:
            draft = obj.invoice_service.build_draft(ws, client_id, issued)
            created = obj.invoice_service.create_invoice(
                ws, draft, template_id=template_id, due_date=due, notes=notes
            )
            number, total = created.invoice_number, created.total
        else:
            draft = _api_draft(obj, ws, client_id, issued, None)
            new_invoice = Invoice(
                workspace_id=ws,
                client_id=client_id,
                template_id=template_id,
                date_issued=issued,
                due_date=due,
                subtotal=draft.totals.subtotal,
                tax=draft.totals.tax,
                total=draft.totals.total,
                notes=notes,
                items=draft.items,
            )
            payload = obj.data.create_invoice(ws, new_invoice, draft.timesheet_ids)
            number, total = payload.get("invoiceNumber"), draft.totals.total

        if draft.is_empty:
            click.echo(format_warning("Invoice has no line items."))
        click.echo(format_success(f"Created invoice {number} (total {total})"))


@invoice.command(name="set-status")
@click.argument("invoice_ref")
@click.argument("status", type=click.Choice(INVOICE_STATUSES))
@workspace_option
@local_option
@click.pass_obj
def set_status(obj, invoice_ref, status, workspace_id, local):
    """Change the status of INVOICE_REF.

    INVOICE_REF is an invoice ID or number; with --local it must be the ID.

    Marking an invoice paid records the salary credit of the client's
    fixed-billing project for the invoice month.

    Example:
        timebill invoice set-status ACME-202403-001 paid
    """
    with with_error_handling(obj.debug):
        if local:
            updated = obj.invoice_service.mark_status(invoice_ref, status)
            click.echo(format_success(f"Invoice {updated.invoice_number} is now {status}"))
            return

        ws = obj.workspace_id(workspace_id)
        current = _find_invoice(obj, ws, invoice_ref)
        obj.data.update_invoice(ws, current.model_copy(update={"status": status}))
        click.echo(format_success(f"Invoice {current.invoice_number} is now {status}"))


@invoice.command(name="html")
@click.argument("invoice_ref")
@click.option("--template", "template_id", default=None, help="Template ID (default: the invoice's, then the workspace default)")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write to a file instead of stdout")
@workspace_option
@click.pass_obj
def invoice_html(obj, invoice_ref, template_id, output, workspace_id):
    """Render INVOICE_REF as HTML.

    Example:
        timebill invoice html ACME-202403-001 -o invoice.html
    """
    with with_error_handling(obj.debug):
        ws = obj.workspace_id(workspace_id)
        current = _find_invoice(obj, ws, invoice_ref)
        templates = obj.data.get_templates(ws)

        wanted = template_id or current.template_id
        template = next((t for t in templates if wanted and t.id == wanted), None)
        if template is None:
            template = next((t for t in templates if t.is_default), None)

        rendered = render_invoice_html(
            _document(obj, ws, current), template.html_template if template else None
        )
        if output is None:
            click.echo(rendered)
            return
        output.write_text(rendered, encoding="utf-8")
        click.echo(format_success(f"Wrote {output}"))


@invoice.command(name="pdf")
@click.argument("invoice_ref")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Output file (default invoice_{number}_{date}.pdf)")
@workspace_option
@click.pass_obj
def invoice_pdf(obj, invoice_ref, output, workspace_id):
    """Render INVOICE_REF as an A4 PDF.

    Example:
        timebill invoice pdf ACME-202403-001
    """
    with with_error_handling(obj.debug):
        ws = obj.workspace_id(workspace_id)
        current = _find_invoice(obj, ws, invoice_ref)
        target = output or Path(default_pdf_filename(current.invoice_number, obj.today()))
        click.echo(format_info(f"Rendering {current.invoice_number}..."))
        InvoicePdfWriter(_document(obj, ws, current)).write(target)
        click.echo(format_success(f"Wrote {target}"))
