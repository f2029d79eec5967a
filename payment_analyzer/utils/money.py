"""Currency coercion and formatting helpers"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from payment_analyzer.domain.exceptions import InvalidEntryDataError

CURRENCY_SYMBOL = "£"

# Amounts are stored as NUMERIC(10,2)
CENTS = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    """
    Coerce a numeric input to a Decimal rounded half-up to whole pence,
    treating None/empty as zero.

    Floats go through str() so 2.1 becomes Decimal("2.10") rather than its
    binary expansion.
    """
    if value is None or value == "":
        return Decimal("0.00")
    if isinstance(value, float):
        value = str(value)
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise InvalidEntryDataError(f"Not a numeric amount: {value!r}") from e
    if not amount.is_finite():
        raise InvalidEntryDataError(f"Not a numeric amount: {value!r}")
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def to_int(value: Any) -> int:
    """Coerce a count (consignments, pickups) to int, treating None as zero"""
    if value is None or value == "":
        return 0
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise InvalidEntryDataError(f"Not a whole number: {value!r}") from e


def format_currency(amount: Decimal) -> str:
    """£12.50 / £-3.00 style used in reports and validation messages"""
    return f"{CURRENCY_SYMBOL}{to_decimal(amount):.2f}"
