"""Money helpers using Decimal with BRL precision rules."""

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

MONEY_PRECISION = Decimal("0.01")
ZERO = Decimal("0.00")


def quantize_money(value: Decimal) -> Decimal:
    """Return value rounded to two decimal places with HALF_UP strategy."""

    return value.quantize(MONEY_PRECISION, rounding=ROUND_HALF_UP)


def parse_money(value: str) -> Decimal:
    """Parse and normalize input money string into Decimal."""

    return quantize_money(Decimal(value))


def format_money(value: Decimal) -> str:
    """Render money as string with exactly two decimal places."""

    return f"{quantize_money(value):.2f}"


def sum_money(values: Iterable[Decimal]) -> Decimal:
    """Sum amounts and quantize the result once."""

    return quantize_money(sum(values, ZERO))


def exceeds_tolerance(value: Decimal, tolerance: Decimal) -> bool:
    """Return whether the absolute amount is strictly above tolerance."""

    return abs(quantize_money(value)) > tolerance
