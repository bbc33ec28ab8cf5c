"""Invoice number formatting and sequencing.

Invoice numbers have the form ``{slug}-{YYYYMM}-{seq:03d}``, for example
``ACME-202403-007``. The sequence restarts at 1 every month and is scoped to
a workspace. Workspaces without a slug use ``INV``.
"""

import datetime as dt
import time
from typing import Iterable, Optional

DEFAULT_PREFIX = "INV"


def invoice_number_prefix(slug: Optional[str], period: dt.date) -> str:
    """Return the ``{slug}-{YYYYMM}-`` prefix shared by a month's numbers.

    Example:
        >>> invoice_number_prefix("acme", dt.date(2024, 3, 15))
        'acme-202403-'
        >>> invoice_number_prefix(None, dt.date(2024, 3, 15))
        'INV-202403-'
    """
    return f"{slug or DEFAULT_PREFIX}-{period.year}{period.month:02d}-"


def format_invoice_number(slug: Optional[str], period: dt.date, sequence: int) -> str:
    """Format an invoice number.

    Example:
        >>> format_invoice_number("acme", dt.date(2024, 3, 1), 7)
        'acme-202403-007'
    """
    return f"{invoice_number_prefix(slug, period)}{sequence:03d}"


def parse_sequence(invoice_number: str) -> int:
    """Extract the trailing sequence of an invoice number.

    The sequence is the last dash-separated segment, so slugs containing
    dashes are handled. Unparseable numbers yield 0.

    Example:
        >>> parse_sequence("my-shop-202403-012")
        12
        >>> parse_sequence("garbage")
        0
    """
    tail = invoice_number.rsplit("-", 1)[-1]
    try:
        return int(tail)
    except ValueError:
        return 0


def next_invoice_number(
    slug: Optional[str], period: dt.date, existing_numbers: Iterable[str]
) -> str:
    """Compute the next invoice number for a workspace and month.

    The sequence follows the lexicographically greatest existing number
    with the period's prefix. Gaps left by deleted invoices are not reused.

    Args:
        slug: Workspace slug (``INV`` when empty)
        period: Any date within the invoice month
        existing_numbers: Invoice numbers already issued in the workspace

    Returns:
        The next invoice number

    Example:
        >>> next_invoice_number("acme", dt.date(2024, 3, 9),
        ...                     ["acme-202403-001", "acme-202403-004", "acme-202402-009"])
        'acme-202403-005'
        >>> next_invoice_number("acme", dt.date(2024, 4, 1), [])
        'acme-202404-001'
    """
    prefix = invoice_number_prefix(slug, period)
    matching = [n for n in existing_numbers if n and n.startswith(prefix)]
    sequence = 1
    if matching:
        sequence = parse_sequence(max(matching)) + 1
    return format_invoice_number(slug, period, sequence)


def fallback_invoice_number(now_millis: Optional[int] = None) -> str:
    """Timestamp-based number used when the sequence lookup fails."""
    if now_millis is None:
        now_millis = int(time.time() * 1000)
    return f"{DEFAULT_PREFIX}-{now_millis}"
