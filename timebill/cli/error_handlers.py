"""Error handling for CLI commands."""

import logging
import sys
import traceback
from typing import Dict, Optional

import click

from timebill.cli.utils.formatters import format_error, format_warning
from timebill.services.error_classifier import ErrorCategory, ErrorClassifier
from timebill.utils.logging_utils import get_log_context

logger = logging.getLogger(__name__)

EXIT_CONFIGURATION = 1
EXIT_UNEXPECTED = 255
EXIT_CANCELLED = 130

EXIT_CODES: Dict[ErrorCategory, int] = {
    ErrorCategory.NETWORK: 2,
    ErrorCategory.VALIDATION: 3,
    ErrorCategory.STATE: 4,
    ErrorCategory.AUTHORIZATION: 5,
    ErrorCategory.SERVER: 6,
    ErrorCategory.NOT_FOUND: 7,
    ErrorCategory.UNKNOWN: EXIT_UNEXPECTED,
}

HINTS: Dict[ErrorCategory, str] = {
    ErrorCategory.AUTHORIZATION: "Set TIMEBILL_SESSION_COOKIE to a valid session in your .env file",
    ErrorCategory.NETWORK: "Check TIMEBILL_API_URL and your network connection",
    ErrorCategory.NOT_FOUND: "Check the ID, or list the available records first",
}


class CLIError(Exception):
    """Base exception for CLI errors with user-friendly messages."""

    def __init__(self, message: str, recovery_hint: Optional[str] = None):
        self.message = message
        self.recovery_hint = recovery_hint
        super().__init__(message)


class ConfigurationError(CLIError):
    """Missing or invalid configuration."""


_classifier = ErrorClassifier()


def handle_cli_error(error: BaseException, debug: bool = False) -> int:
    """
    Print a banner for ``error`` and pick the exit code.

    Args:
        error: The exception that occurred
        debug: Whether to show the full stack trace

    Returns:
        Exit code for the error's category
    """
    if isinstance(error, ConfigurationError):
        click.echo(format_error(f"Configuration Error: {error.message}"), err=True)
        if error.recovery_hint:
            click.echo(format_warning(f"Hint: {error.recovery_hint}"), err=True)
        return EXIT_CONFIGURATION

    if isinstance(error, click.Abort):
        click.echo(format_warning("Operation cancelled by user"), err=True)
        return EXIT_CANCELLED

    category = _classifier.classify(error)
    click.echo(format_error(_classifier.get_error_description(error)), err=True)

    hint = HINTS.get(category)
    if hint:
        click.echo(format_warning(f"Hint: {hint}"), err=True)

    if category in (ErrorCategory.UNKNOWN, ErrorCategory.SERVER):
        logger.error(f"Command failed: {type(error).__name__}: {error}")
        correlation_id = get_log_context().get("correlation_id")
        if correlation_id:
            click.echo(format_warning(f"Reference: {correlation_id}"), err=True)
        if debug:
            click.echo("\nFull stack trace:", err=True)
            click.echo(
                "".join(
                    traceback.format_exception(type(error), error, error.__traceback__)
                ),
                err=True,
            )
        else:
            click.echo(format_warning("Run with --debug for the full stack trace"), err=True)

    return EXIT_CODES[category]


def with_error_handling(debug: bool = False):
    """
    Context manager that turns exceptions into a banner and an exit code.

    Example:
        @click.command()
        @click.pass_obj
        def my_command(obj):
            with with_error_handling(obj.debug):
                ...
    """

    class ErrorHandler:
        def __init__(self, show_debug: bool):
            self.show_debug = show_debug

        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc_val, exc_tb):
            if exc_val is None or isinstance(exc_val, (click.exceptions.Exit, SystemExit)):
                return False
            if isinstance(exc_val, click.UsageError):
                return False
            sys.exit(handle_cli_error(exc_val, self.show_debug))

    return ErrorHandler(debug)
