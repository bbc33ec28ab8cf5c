"""CLI commands."""

from timebill.cli.commands.credit import credit
from timebill.cli.commands.dashboard import dashboard
from timebill.cli.commands.db import db
from timebill.cli.commands.export import export
from timebill.cli.commands.invoice import invoice
from timebill.cli.commands.log_time import log_time
from timebill.cli.commands.track import track
from timebill.cli.commands.workspace import workspace

__all__ = [
    "credit",
    "dashboard",
    "db",
    "export",
    "invoice",
    "log_time",
    "track",
    "workspace",
]
