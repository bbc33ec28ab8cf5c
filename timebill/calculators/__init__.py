"""Calculator modules for billing system."""

from timebill.calculators.billing_calculator import (
    InvoiceTotals,
    calculate_invoice_totals,
    calculate_tax,
    quantize_money,
)
from timebill.calculators.invoice_number import (
    fallback_invoice_number,
    format_invoice_number,
    next_invoice_number,
    parse_sequence,
)
from timebill.calculators.time_utils import (
    calculate_hours,
    calculate_minutes,
    format_elapsed,
    month_start,
    previous_month_start,
    same_month,
    timedelta_to_decimal_hours,
)

__all__ = [
    # billing_calculator
    "InvoiceTotals",
    "calculate_invoice_totals",
    "calculate_tax",
    "quantize_money",
    # invoice_number
    "fallback_invoice_number",
    "format_invoice_number",
    "next_invoice_number",
    "parse_sequence",
    # time_utils
    "calculate_hours",
    "calculate_minutes",
    "format_elapsed",
    "month_start",
    "previous_month_start",
    "same_month",
    "timedelta_to_decimal_hours",
]
