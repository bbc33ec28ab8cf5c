"""Local database commands."""

import click

from timebill.cli.context import CliContext
from timebill.cli.error_handlers import with_error_handling
from timebill.cli.utils.formatters import format_success
from timebill.repositories import get_engine, init_db


@click.group(name="db")
def db():
    """Manage the local database used by --local commands."""


@db.command(name="init")
@click.pass_obj
def init_database(obj: CliContext):
    """Create the tables in TIMEBILL_DATABASE_URL if they do not exist."""
    with with_error_handling(obj.debug):
        engine = get_engine(obj.config.database_url)
        try:
            init_db(engine)
        finally:
            engine.dispose()
        click.echo(format_success(f"Database ready at {obj.config.database_url}"))
