"""Excel export commands."""

from pathlib import Path
from typing import Optional

import click

from timebill.cli.context import CliContext
from timebill.cli.error_handlers import with_error_handling
from timebill.cli.utils.formatters import format_success
from timebill.writers import ExcelExportGenerator, default_export_filename, write_excel

workspace_option = click.option(
    "--workspace", "workspace_id", default=None, help="Workspace ID (defaults to the remembered one)"
)
output_option = click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Output file (default {kind}_{YYYY-MM-DD}.xlsx)",
)


@click.group(name="export")
def export():
    """Export workspace data to Excel."""


def _target(obj: CliContext, kind: str, output: Optional[Path]) -> Path:
    return output or Path(default_export_filename(kind, obj.today()))


@export.command(name="timesheets")
@workspace_option
@output_option
@click.pass_obj
def export_timesheets(obj: CliContext, workspace_id, output):
    """Export all timesheet entries.

    Example:
        timebill export timesheets -o march.xlsx
    """
    with with_error_handling(obj.debug):
        ws = obj.workspace_id(workspace_id)
        generator = ExcelExportGenerator(obj.data.get_settings(ws).currency)
        sheet = generator.timesheets_sheet(obj.data.get_timesheets(ws))
        path = write_excel(sheet, _target(obj, "timesheets", output))
        click.echo(format_success(f"Exported {len(sheet.frame)} timesheets to {path}"))


@export.command(name="projects")
@workspace_option
@output_option
@click.pass_obj
def export_projects(obj: CliContext, workspace_id, output):
    """Export projects with their logged hours and revenue."""
    with with_error_handling(obj.debug):
        ws = obj.workspace_id(workspace_id)
        generator = ExcelExportGenerator(obj.data.get_settings(ws).currency)
        sheet = generator.projects_sheet(
            obj.data.get_projects(ws), obj.data.get_timesheets(ws)
        )
        path = write_excel(sheet, _target(obj, "projects", output))
        click.echo(format_success(f"Exported {len(sheet.frame)} projects to {path}"))


@export.command(name="clients")
@workspace_option
@output_option
@click.pass_obj
def export_clients(obj: CliContext, workspace_id, output):
    """Export clients with project counts and revenue."""
    with with_error_handling(obj.debug):
        ws = obj.workspace_id(workspace_id)
        generator = ExcelExportGenerator(obj.data.get_settings(ws).currency)
        sheet = generator.clients_sheet(
            obj.data.get_clients(ws),
            obj.data.get_projects(ws),
            obj.data.get_timesheets(ws),
        )
        path = write_excel(sheet, _target(obj, "clients", output))
        click.echo(format_success(f"Exported {len(sheet.frame)} clients to {path}"))
