"""Dashboard summary command."""

import click

from timebill.aggregators import summarize_dashboard
from timebill.cli.context import CliContext
from timebill.cli.error_handlers import with_error_handling
from timebill.cli.utils.formatters import format_currency, format_hours, format_table


@click.command(name="dashboard")
@click.option("--workspace", "workspace_id", default=None, help="Workspace ID (defaults to the remembered one)")
@click.option("--refresh", is_flag=True, default=False, help="Bypass cached data")
@click.pass_obj
def dashboard(obj: CliContext, workspace_id, refresh):
    """Show hours, active projects, pending invoices and revenue.

    Example:
        timebill dashboard
    """
    with with_error_handling(obj.debug):
        ws = obj.workspace_id(workspace_id)
        data = obj.data
        summary = summarize_dashboard(
            timesheets=data.get_timesheets(ws, force_refresh=refresh),
            projects=data.get_projects(ws, force_refresh=refresh),
            invoices=data.get_invoices(ws, force_refresh=refresh),
            credits=data.get_salary_credits(ws),
            today=obj.today(),
        )
        currency = data.get_settings(ws).currency
        rows = [
            ["Total hours", format_hours(summary.total_hours)],
            ["Active projects", summary.active_projects],
            ["Pending invoices", summary.pending_invoices],
            ["Revenue", format_currency(summary.monthly_revenue, currency)],
        ]
        click.echo(format_table(["Metric", "Value"], rows))
