"""Workspace selection commands."""

import click

from timebill.cli.context import CliContext
from timebill.cli.error_handlers import with_error_handling
from timebill.cli.utils.formatters import format_info, format_success, format_table
from timebill.services.errors import NotFoundError
from timebill.tracking import get_current_workspace_id, set_current_workspace_id


@click.group(name="workspace")
def workspace():
    """List and select workspaces."""


@workspace.command(name="list")
@click.pass_obj
def list_workspaces(obj: CliContext):
    """List the workspaces the session can access.

    The remembered workspace is marked with *.

    Example:
        timebill workspace list
    """
    with with_error_handling(obj.debug):
        workspaces = obj.api.list_workspaces()
        if not workspaces:
            click.echo(format_info("No workspaces found."))
            return

        current = get_current_workspace_id(obj.store)
        rows = [
            ["*" if w.id == current else "", w.id, w.name, w.slug or ""]
            for w in workspaces
        ]
        click.echo(format_table(["", "ID", "Name", "Slug"], rows))


@workspace.command(name="use")
@click.argument("workspace_id")
@click.pass_obj
def use_workspace(obj: CliContext, workspace_id: str):
    """Remember WORKSPACE_ID for later commands.

    Example:
        timebill workspace use ws_123
    """
    with with_error_handling(obj.debug):
        match = next((w for w in obj.api.list_workspaces() if w.id == workspace_id), None)
        if match is None:
            raise NotFoundError(f"Workspace {workspace_id} not found")

        set_current_workspace_id(obj.store, workspace_id)
        obj.data.preload_workspace(workspace_id)
        click.echo(format_success(f"Using workspace {match.name} ({match.id})"))


@workspace.command(name="current")
@click.pass_obj
def current_workspace(obj: CliContext):
    """Show the remembered workspace."""
    with with_error_handling(obj.debug):
        current = get_current_workspace_id(obj.store)
        if current:
            click.echo(current)
        else:
            click.echo(format_info("No workspace selected."))
