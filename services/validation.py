"""
Input validation shared by the services.

Each helper returns the normalized value or raises InvalidInputError
before any storage is touched.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from core.exceptions import InvalidInputError
from models import to_money


def require_text(value: Any, field: str, message: str) -> str:
    """
    Require a non-blank string (integers are accepted and stringified).

    Args:
        value: Raw input
        field: Field name reported in the error details
        message: Error message when the value is absent
    """
    if value is None or isinstance(value, bool):
        raise InvalidInputError(message, field)
    if isinstance(value, int):
        value = str(value)
    if not isinstance(value, str):
        raise InvalidInputError(f"{field} must be a string", field)
    value = value.strip()
    if not value:
        raise InvalidInputError(message, field)
    return value


def require_positive_int(value: Any, field: str, message: str) -> int:
    """Require a strictly positive integer (bools and floats rejected)."""
    if value is None:
        raise InvalidInputError(message, field)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInputError(f"{field} must be a positive integer", field)
    if value <= 0:
        raise InvalidInputError(f"{field} must be a positive integer", field)
    return value


def require_non_negative_int(value: Any, field: str, message: str) -> int:
    """Require an integer >= 0; numeric strings like "20" are accepted."""
    if value is None or value == "" or isinstance(value, bool):
        raise InvalidInputError(message, field)
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        raise InvalidInputError(f"{field} must be a non-negative integer", field)
    if isinstance(value, float) and not value.is_integer():
        raise InvalidInputError(f"{field} must be a non-negative integer", field)
    if number < 0:
        raise InvalidInputError(f"{field} must be a non-negative integer", field)
    return number


def require_price(value: Any, field: str, message: str) -> Decimal:
    """Require a non-negative monetary amount; numeric strings accepted."""
    if value is None or value == "":
        raise InvalidInputError(message, field)
    try:
        price = to_money(value)
    except ValueError:
        raise InvalidInputError(f"{field} must be a number", field)
    if price < 0:
        raise InvalidInputError(f"{field} must not be negative", field)
    return price
