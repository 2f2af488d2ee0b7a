"""
Typed operation outcomes.

Every operation of the fulfillment surface returns an Outcome instead of
raising. The HTTP layer maps Outcome.error to a status code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class ErrorKind(Enum):
    """Failure categories reported by the fulfillment surface."""

    INVALID_INPUT = "InvalidInput"
    PRODUCT_NOT_FOUND = "ProductNotFound"
    ORDER_NOT_FOUND = "OrderNotFound"
    INSUFFICIENT_STOCK = "InsufficientStock"
    EMPTY_CART = "EmptyCart"
    DUPLICATE_ORDER = "DuplicateOrder"
    ILLEGAL_TRANSITION = "IllegalTransition"
    STORAGE_FAILURE = "StorageFailure"
    INTERNAL = "Internal"

    @property
    def is_not_found(self) -> bool:
        return self in (ErrorKind.PRODUCT_NOT_FOUND, ErrorKind.ORDER_NOT_FOUND)


@dataclass(frozen=True)
class Outcome:
    """
    Result of a fulfillment operation.

    Exactly one of `value` (on success) or `error` (on failure) is
    meaningful. `message` is always human readable.
    """

    value: Any = None
    error: Optional[ErrorKind] = None
    message: str = ""
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(cls, value: Any = None, message: str = "") -> "Outcome":
        return cls(value=value, message=message)

    @classmethod
    def failure(
        cls,
        error: ErrorKind,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> "Outcome":
        return cls(error=error, message=message, details=details or {})

    @property
    def ok(self) -> bool:
        return self.error is None

    def as_tuple(self) -> Tuple[Any, Optional[ErrorKind]]:
        """Return the `(result, errorKind)` pair."""
        return self.value, self.error
