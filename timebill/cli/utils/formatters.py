"""Output formatting utilities for CLI."""

from decimal import Decimal
from typing import List, Optional, Sequence, Union

import click

from timebill.writers.excel_writer import get_currency_symbol


def format_success(message: str) -> str:
    return click.style(f"✓ {message}", fg="green", bold=True)


def format_error(message: str) -> str:
    """Red error banner."""
    return click.style(f"✗ {message}", fg="red", bold=True)


def format_warning(message: str) -> str:
    return click.style(f"⚠ {message}", fg="yellow", bold=True)


def format_info(message: str) -> str:
    return click.style(f"ℹ {message}", fg="blue")


def format_currency(
    amount: Union[Decimal, int, float, None], currency: Optional[str] = "MYR"
) -> str:
    """Amount with the currency symbol and two decimals.

    Example:
        >>> format_currency(Decimal("1234.5"), "USD")
        '$1,234.50'
    """
    value = Decimal(str(amount or 0))
    return f"{get_currency_symbol(currency)}{value:,.2f}"


def format_hours(hours: Union[Decimal, int, float, None]) -> str:
    value = Decimal(str(hours or 0))
    return f"{value.normalize():f}h" if value else "0h"


def format_table(
    headers: Sequence[str], rows: List[Sequence[object]], max_width: int = 60
) -> str:
    """Format rows as a boxed plain-text table.

    Args:
        headers: Column headers
        rows: Data rows; cells are converted with ``str``
        max_width: Maximum column width, longer cells are truncated

    Returns:
        The table, or an empty string when there are no headers
    """
    if not headers:
        return ""

    cells = [[str(cell) for cell in row[: len(headers)]] for row in rows]
    widths = [len(h) for h in headers]
    for row in cells:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))
    widths = [min(w, max_width) for w in widths]

    separator = "+" + "+".join("-" * (w + 2) for w in widths) + "+"

    def line(values: Sequence[str]) -> str:
        padded = [f" {v[: widths[i]]:<{widths[i]}} " for i, v in enumerate(values)]
        return "|" + "|".join(padded) + "|"

    lines = [separator, line(list(headers)), separator]
    if cells:
        lines.extend(line(row) for row in cells)
        lines.append(separator)
    return "\n".join(lines)
