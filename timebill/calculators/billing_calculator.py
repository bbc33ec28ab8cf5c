"""Billing calculator for invoice totals.

This module implements the money arithmetic shared by invoices and the
dashboard:
- Tax on a subtotal at a percentage rate
- Invoice totals (subtotal, tax, total) from line amounts
- Summing entry totals

All amounts are ``Decimal`` and results are quantized to cents with
ROUND_HALF_UP.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

CENTS = Decimal("0.01")


def quantize_money(amount: Decimal) -> Decimal:
    """Round an amount to cents using ROUND_HALF_UP.

    Example:
        >>> quantize_money(Decimal("10.005"))
        Decimal('10.01')
    """
    return Decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)


def calculate_tax(subtotal: Decimal, tax_rate: Decimal) -> Decimal:
    """Calculate tax for a subtotal.

    Args:
        subtotal: Amount before tax
        tax_rate: Tax rate as a percentage (6 means 6%)

    Returns:
        Tax amount rounded to cents

    Example:
        >>> calculate_tax(Decimal("1000"), Decimal("6"))
        Decimal('60.00')
        >>> calculate_tax(Decimal("99.99"), Decimal("6"))
        Decimal('6.00')
    """
    return quantize_money(Decimal(subtotal) * Decimal(tax_rate) / Decimal("100"))


@dataclass
class InvoiceTotals:
    """Subtotal, tax and total of an invoice.

    Attributes:
        subtotal: Sum of line amounts before tax
        tax: subtotal × tax_rate / 100
        total: subtotal + tax
        tax_rate: Percentage rate the tax was computed with

    Example:
        >>> totals = calculate_invoice_totals([Decimal("500"), Decimal("250")], Decimal("6"))
        >>> totals.subtotal, totals.tax, totals.total
        (Decimal('750.00'), Decimal('45.00'), Decimal('795.00'))
    """

    subtotal: Decimal
    tax: Decimal
    total: Decimal
    tax_rate: Decimal

    @classmethod
    def zero(cls, tax_rate: Decimal = Decimal("0")) -> "InvoiceTotals":
        return cls(
            subtotal=Decimal("0.00"),
            tax=Decimal("0.00"),
            total=Decimal("0.00"),
            tax_rate=Decimal(tax_rate),
        )


def calculate_invoice_totals(
    amounts: Iterable[Decimal], tax_rate: Decimal
) -> InvoiceTotals:
    """Calculate invoice totals from line amounts.

    The subtotal is summed unrounded and then quantized, so cent rounding
    happens once per invoice rather than once per line.

    Args:
        amounts: Line totals (timesheet totals and fixed fees)
        tax_rate: Tax rate as a percentage

    Returns:
        InvoiceTotals with every amount quantized to cents
    """
    subtotal = quantize_money(sum((Decimal(a) for a in amounts), Decimal("0")))
    tax = calculate_tax(subtotal, tax_rate)
    return InvoiceTotals(
        subtotal=subtotal,
        tax=tax,
        total=quantize_money(subtotal + tax),
        tax_rate=Decimal(tax_rate),
    )
