"""Salary credit commands for fixed-billing projects."""

import click

from timebill.cli.context import CliContext
from timebill.cli.error_handlers import with_error_handling
from timebill.cli.utils.formatters import format_currency, format_info, format_success, format_table

workspace_option = click.option(
    "--workspace", "workspace_id", default=None, help="Workspace ID (defaults to the remembered one)"
)
local_option = click.option(
    "--local", is_flag=True, default=False, help="Use the local database instead of the API"
)


@click.group(name="credit")
def credit():
    """Record and list monthly fee payments of fixed projects."""


@credit.command(name="mark")
@click.argument("project_id")
@click.option("--date", "credited_date", type=click.DateTime(formats=["%Y-%m-%d"]), default=None, help="Date the payment arrived (default today)")
@workspace_option
@local_option
@click.pass_obj
def mark_credited(obj: CliContext, project_id, credited_date, workspace_id, local):
    """Mark PROJECT_ID's fee as received.

    The credit is attributed to the month before the credited date.

    Example:
        timebill credit mark p_42 --date 2024-04-03
    """
    with with_error_handling(obj.debug):
        day = credited_date.date() if credited_date else obj.today()
        if local:
            stored = obj.credit_service.mark_credited(project_id, day)
        else:
            stored = obj.data.mark_credited(obj.workspace_id(workspace_id), project_id, day)
        click.echo(
            format_success(
                f"Credited {stored.amount} for {stored.work_month:%B %Y} "
                f"(received {stored.credited_date.isoformat()})"
            )
        )


@credit.command(name="list")
@workspace_option
@local_option
@click.pass_obj
def list_credits(obj: CliContext, workspace_id, local):
    """List salary credits of the workspace's fixed projects.

    Example:
        timebill credit list
    """
    with with_error_handling(obj.debug):
        ws = obj.workspace_id(workspace_id)
        if local:
            projects = obj.repository.list_projects(ws)
            fixed_ids = [p.id for p in projects if p.is_fixed]
            credits = obj.credit_service.list_credits(fixed_ids) if fixed_ids else []
            currency = obj.repository.get_settings(ws).currency
        else:
            projects = obj.data.get_projects(ws)
            credits = obj.data.get_salary_credits(ws)
            currency = obj.data.get_settings(ws).currency

        if not credits:
            click.echo(format_info("No salary credits recorded."))
            return

        names = {p.id: p.name for p in projects}
        rows = [
            [
                names.get(c.project_id, c.project_id),
                f"{c.work_month:%Y-%m}",
                c.credited_date.isoformat(),
                format_currency(c.amount, currency),
            ]
            for c in credits
        ]
        click.echo(format_table(["Project", "Work Month", "Credited", "Amount"], rows))
