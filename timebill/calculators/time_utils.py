"""Time calculation utilities for the billing system.

This module provides low-level utilities for time calculations including:
- Converting elapsed durations to decimal hours
- Applying the minimum billing rule to tracked sessions
- Formatting elapsed time for display
- Calendar month arithmetic used by invoicing and salary credits

Durations are plain ``dt.timedelta`` values; months are represented by
their first day.
"""

import datetime as dt
from decimal import ROUND_HALF_UP, Decimal

MINIMUM_BILLABLE_HOURS = Decimal("0.25")
MINIMUM_BILLABLE_MINUTES = 15


def timedelta_to_decimal_hours(td: dt.timedelta) -> Decimal:
    """Convert a timedelta to decimal hours with 2 decimal precision.

    Args:
        td: Timedelta to convert

    Returns:
        Decimal hours (rounded to 2 decimal places)

    Example:
        >>> timedelta_to_decimal_hours(dt.timedelta(hours=8))
        Decimal('8.00')
        >>> timedelta_to_decimal_hours(dt.timedelta(hours=7, minutes=30))
        Decimal('7.50')
        >>> timedelta_to_decimal_hours(dt.timedelta(minutes=10))
        Decimal('0.17')

    Note:
        Rounds to 2 decimal places using ROUND_HALF_UP.
    """
    hours = Decimal(str(td.total_seconds())) / Decimal("3600")
    return hours.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def calculate_hours(elapsed: dt.timedelta) -> Decimal:
    """Billable hours for a tracked session.

    The elapsed time is rounded to hundredths of an hour and never billed
    below a quarter hour.

    Example:
        >>> calculate_hours(dt.timedelta(minutes=5))
        Decimal('0.25')
        >>> calculate_hours(dt.timedelta(minutes=90))
        Decimal('1.50')
    """
    return max(timedelta_to_decimal_hours(elapsed), MINIMUM_BILLABLE_HOURS)


def calculate_minutes(elapsed: dt.timedelta) -> int:
    """Billable minutes for a tracked session, never below 15.

    Example:
        >>> calculate_minutes(dt.timedelta(minutes=3))
        15
        >>> calculate_minutes(dt.timedelta(minutes=44, seconds=30))
        45
    """
    minutes = (Decimal(str(elapsed.total_seconds())) / Decimal("60")).quantize(
        Decimal("1"), rounding=ROUND_HALF_UP
    )
    return max(int(minutes), MINIMUM_BILLABLE_MINUTES)


def format_elapsed(elapsed: dt.timedelta) -> str:
    """Format an elapsed duration as ``"{h}h {m}m"`` or ``"{m}m"``.

    Seconds are truncated, not rounded.

    Example:
        >>> format_elapsed(dt.timedelta(minutes=75))
        '1h 15m'
        >>> format_elapsed(dt.timedelta(minutes=42, seconds=59))
        '42m'
    """
    minutes = int(elapsed.total_seconds() // 60)
    hours, remaining = divmod(minutes, 60)
    if hours > 0:
        return f"{hours}h {remaining}m"
    return f"{minutes}m"


def month_start(day: dt.date) -> dt.date:
    """Return the first day of the month containing ``day``."""
    return day.replace(day=1)


def previous_month_start(day: dt.date) -> dt.date:
    """Return the first day of the month before the one containing ``day``.

    Example:
        >>> previous_month_start(dt.date(2024, 1, 31))
        datetime.date(2023, 12, 1)
        >>> previous_month_start(dt.date(2024, 3, 31))
        datetime.date(2024, 2, 1)
    """
    return (month_start(day) - dt.timedelta(days=1)).replace(day=1)


def same_month(a: dt.date, b: dt.date) -> bool:
    """True when both dates fall in the same calendar month and year."""
    return a.year == b.year and a.month == b.month
