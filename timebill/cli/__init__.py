"""timebill CLI.

Command-line interface for workspaces, invoices, salary credits, time
tracking and exports.
"""

from typing import Optional

import click
from dotenv import load_dotenv

from timebill.cli.commands import (
    credit,
    dashboard,
    db,
    export,
    invoice,
    log_time,
    track,
    workspace,
)
from timebill.cli.context import CliContext
from timebill.config.logging_config import LoggingConfig, configure_logging
from timebill.utils.logging_utils import LogContext, generate_correlation_id

__version__ = "0.1.0"


@click.group(help="timebill - timesheets, invoices and salary credits for freelancers")
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Debug logging")
@click.option("--debug", is_flag=True, default=False, help="Show stack traces on errors")
@click.option("--env-file", type=click.Path(exists=True, dir_okay=False), default=None, help="Load settings from this .env file")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, debug: bool, env_file: Optional[str]):
    """timebill main entry point."""
    configure_logging(LoggingConfig.from_env(verbose=verbose))
    ctx.with_resource(LogContext(correlation_id=generate_correlation_id()))
    if env_file:
        load_dotenv(env_file, override=True)

    if ctx.obj is None:
        ctx.obj = CliContext(debug=debug)
    else:
        ctx.obj.debug = ctx.obj.debug or debug
    ctx.call_on_close(ctx.obj.close)


cli.add_command(workspace)
cli.add_command(invoice)
cli.add_command(credit)
cli.add_command(track)
cli.add_command(log_time)
cli.add_command(export)
cli.add_command(dashboard)
cli.add_command(db)


def main():
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
