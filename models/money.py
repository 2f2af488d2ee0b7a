"""
Money helpers.

All prices and totals are Decimal values quantized to cents. Summing
Decimals is exact, so a cart total never drifts with line order.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Iterable

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value: Any) -> Decimal:
    """
    Convert a number (int, float, str or Decimal) to a cent-quantized Decimal.

    Floats go through str() first so 19.99 stays 19.99.

    Raises:
        ValueError: If the value is not a finite number
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a monetary amount: {value!r}")
    if isinstance(value, float):
        value = str(value)
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError) as e:
        raise ValueError(f"Not a monetary amount: {value!r}") from e
    if not amount.is_finite():
        raise ValueError(f"Not a monetary amount: {value!r}")
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def sum_money(amounts: Iterable[Decimal]) -> Decimal:
    """Exact sum of monetary amounts."""
    return sum(amounts, ZERO).quantize(CENTS, rounding=ROUND_HALF_UP)
