"""Start/stop time tracking commands."""

import logging

import click

from timebill.calculators.time_utils import format_elapsed
from timebill.cli.context import CliContext
from timebill.cli.error_handlers import with_error_handling
from timebill.cli.utils.formatters import (
    format_hours,
    format_info,
    format_success,
    format_table,
    format_warning,
)
from timebill.models import TimesheetEntry
from timebill.services.errors import NotFoundError

logger = logging.getLogger(__name__)


@click.group(name="track")
def track():
    """Track time on a project with a start/stop timer."""


@track.command(name="start")
@click.argument("project_id")
@click.option("--description", "-d", default=None, help="What you are working on")
@click.option("--workspace", "workspace_id", default=None, help="Workspace ID (defaults to the remembered one)")
@click.pass_obj
def start(obj: CliContext, project_id, description, workspace_id):
    """Start tracking time on PROJECT_ID.

    Example:
        timebill track start p_42 -d "API integration"
    """
    with with_error_handling(obj.debug):
        ws = obj.workspace_id(workspace_id)
        project = obj.data.find_project(ws, project_id)
        if project is None:
            raise NotFoundError(f"Project {project_id} not found")

        session = obj.tracker.start(project, ws, description)
        click.echo(format_success(f"Tracking {session.project_name} since {session.started_at:%H:%M}"))


@track.command(name="stop")
@click.option("--description", "-d", default=None, help="What you worked on (default: the description given at start)")
@click.option("--no-log", is_flag=True, default=False, help="Do not create a timesheet entry")
@click.pass_obj
def stop(obj: CliContext, description, no_log):
    """Stop the active session and log it as a timesheet entry.

    Hours are rounded up to the 15 minute minimum. A session started
    without a description asks for one, since entries require it. If the
    entry cannot be created the session stays active.

    Example:
        timebill track stop -d "API integration"
    """
    with with_error_handling(obj.debug):
        tracker = obj.tracker
        active = tracker.active_session
        if active is None:
            click.echo(format_warning("No active session."))
            return

        if not no_log:
            description = description or active.description
            if not description:
                description = click.prompt("What did you work on?")
            project = obj.data.find_project(active.workspace_id, active.project_id)

        stopped = tracker.stop()
        session = stopped.session
        click.echo(
            format_success(
                f"Stopped {session.project_name} after {format_elapsed(stopped.elapsed)} "
                f"({format_hours(stopped.hours)} billable)"
            )
        )
        if no_log:
            return

        entry = TimesheetEntry(
            date=session.started_at.date(),
            project_id=session.project_id,
            hours=stopped.hours,
            description=description,
            billable=not (project is not None and project.is_fixed),
            hourly_rate=project.hourly_rate if project else 0,
        )
        try:
            obj.data.create_timesheet(session.workspace_id, entry)
        except Exception:
            tracker.resume(session.id)
            logger.warning(f"Timesheet entry for {session.id} failed, session resumed")
            click.echo(format_warning(f"{session.project_name} is still being tracked."))
            raise
        click.echo(format_success(f"Logged {format_hours(stopped.hours)} on {session.project_name}"))


@track.command(name="status")
@click.pass_obj
def status(obj: CliContext):
    """Show the active session."""
    with with_error_handling(obj.debug):
        session = obj.tracker.active_session
        if session is None:
            click.echo(format_info("Not tracking."))
            return
        click.echo(
            f"Tracking {session.project_name}"
            f"{f' ({session.client_name})' if session.client_name else ''}: "
            f"{obj.tracker.format_elapsed()}"
        )


@track.command(name="history")
@click.option("--limit", type=int, default=10, show_default=True, help="Sessions to show")
@click.pass_obj
def history(obj: CliContext, limit):
    """List recently stopped sessions, newest first."""
    with with_error_handling(obj.debug):
        sessions = obj.tracker.history()[:limit]
        if not sessions:
            click.echo(format_info("No tracked sessions yet."))
            return
        rows = [
            [s.id, s.project_name, s.client_name, f"{s.started_at:%Y-%m-%d %H:%M}", s.description or ""]
            for s in sessions
        ]
        click.echo(format_table(["ID", "Project", "Client", "Started", "Description"], rows))


@track.command(name="resume")
@click.argument("session_id")
@click.pass_obj
def resume(obj: CliContext, session_id):
    """Make SESSION_ID from the history active again."""
    with with_error_handling(obj.debug):
        if not obj.tracker.resume(session_id):
            raise NotFoundError(f"Session {session_id} not found in history")
        click.echo(format_success(f"Resumed {session_id}"))


@track.command(name="clear")
@click.confirmation_option(prompt="Clear the session history?")
@click.pass_obj
def clear(obj: CliContext):
    """Clear the session history."""
    with with_error_handling(obj.debug):
        obj.tracker.clear_history()
        click.echo(format_success("History cleared"))
