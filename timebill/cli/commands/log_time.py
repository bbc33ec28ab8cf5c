"""Interactive, guided timesheet entry."""

import click

from timebill.cli.context import CliContext
from timebill.cli.error_handlers import with_error_handling
from timebill.cli.utils.formatters import format_info, format_success
from timebill.models import TimesheetEntry
from timebill.tracking import ChatReply, ChatStep, advance, start_chat


def _echo_reply(reply: ChatReply) -> None:
    click.echo(reply.message)
    if reply.suggestions:
        click.echo(format_info("Suggestions: " + " | ".join(reply.suggestions)))


@click.command(name="log-time")
@click.option("--workspace", "workspace_id", default=None, help="Workspace ID (defaults to the remembered one)")
@click.pass_obj
def log_time(obj: CliContext, workspace_id):
    """Log a timesheet entry by answering a few questions.

    Example:
        timebill log-time
    """
    with with_error_handling(obj.debug):
        ws = obj.workspace_id(workspace_id)
        projects = [p for p in obj.data.get_projects(ws) if p.is_active]
        today = obj.today()

        state, reply = start_chat(projects, today)
        _echo_reply(reply)
        while state.step != ChatStep.DONE:
            answer = click.prompt(">", prompt_suffix=" ", default="", show_default=False)
            state, reply = advance(state, answer, today)
            _echo_reply(reply)

        draft = reply.entry
        project = state.project()
        entry = TimesheetEntry(
            date=draft.date,
            project_id=draft.project_id,
            hours=draft.hours,
            description=draft.description or "",
            billable=draft.billable,
            hourly_rate=project.hourly_rate if project else 0,
        )
        obj.data.create_timesheet(ws, entry)
        click.echo(format_success("Timesheet entry created successfully!"))
