"""
Custom exceptions for the order fulfillment backend.

Exception Hierarchy:
    FulfillmentError (base)
    ├── InvalidInputError        - Missing or malformed required field
    ├── ProductNotFoundError     - No product with the given id
    ├── OrderNotFoundError       - No order with the given id
    ├── InsufficientStockError   - Requested quantity exceeds available stock
    ├── EmptyCartError           - Order placement with nothing in the cart
    ├── DuplicateOrderError      - Order id already used
    ├── IllegalTransitionError   - Status change rejected in strict mode
    └── StorageFailureError      - Storage read/write/parse failure

Usage:
    Services raise these inside the core. FulfillmentService converts them
    into failed Outcome values, so nothing raises past the service boundary.
"""

from typing import Optional, Dict, Any

from .outcome import ErrorKind


class FulfillmentError(Exception):
    """
    Base exception for all fulfillment errors.

    Every subclass carries an ErrorKind so the service facade can report
    the failure as a typed outcome without inspecting the class.
    """

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional context for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# VALIDATION ERRORS - detected before storage is touched
# =============================================================================

class InvalidInputError(FulfillmentError):
    """A required field is absent or malformed."""

    kind = ErrorKind.INVALID_INPUT

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else None
        super().__init__(message, details)
        self.field = field


# =============================================================================
# LOOKUP ERRORS
# =============================================================================

class ProductNotFoundError(FulfillmentError):
    """The catalog has no product with the requested id."""

    kind = ErrorKind.PRODUCT_NOT_FOUND

    def __init__(self, product_id: str):
        super().__init__("Product not found", {"product_id": product_id})
        self.product_id = product_id


class OrderNotFoundError(FulfillmentError):
    """The order ledger has no order with the requested id."""

    kind = ErrorKind.ORDER_NOT_FOUND

    def __init__(self, order_id: str):
        super().__init__(
            f"Order with the specified ID ({order_id}) not found",
            {"order_id": order_id},
        )
        self.order_id = order_id


# =============================================================================
# BUSINESS RULE ERRORS
# =============================================================================

class InsufficientStockError(FulfillmentError):
    """
    Requested quantity exceeds the stock available for checkout.

    `available` is the catalog stock minus what the cart already holds
    for the product when reservations are enabled, otherwise the raw
    catalog stock.
    """

    kind = ErrorKind.INSUFFICIENT_STOCK

    def __init__(self, product_id: str, requested: int, available: int):
        details = {
            "product_id": product_id,
            "requested": requested,
            "available": available,
        }
        super().__init__("Requested quantity exceeds available stock", details)
        self.product_id = product_id
        self.requested = requested
        self.available = available


class EmptyCartError(FulfillmentError):
    """An order was requested while the cart holds no lines."""

    kind = ErrorKind.EMPTY_CART

    def __init__(self):
        super().__init__(
            "Cart is empty. Add items to the cart before placing an order."
        )


class DuplicateOrderError(FulfillmentError):
    """An order with the same caller-supplied id already exists."""

    kind = ErrorKind.DUPLICATE_ORDER

    def __init__(self, order_id: str):
        super().__init__(
            f"Order with the specified ID ({order_id}) already exists",
            {"order_id": order_id},
        )
        self.order_id = order_id


class IllegalTransitionError(FulfillmentError):
    """Status change not allowed by the strict order lifecycle."""

    kind = ErrorKind.ILLEGAL_TRANSITION

    def __init__(self, order_id: str, current: str, requested: str):
        details = {"order_id": order_id, "current": current, "requested": requested}
        super().__init__(
            f"Cannot change order status from {current} to {requested}", details
        )
        self.order_id = order_id
        self.current = current
        self.requested = requested


# =============================================================================
# STORAGE ERRORS
# =============================================================================

class StorageFailureError(FulfillmentError):
    """
    The storage collaborator failed to read, parse or write.

    Not retried. Partial effects are left for the caller to reconcile,
    except for order placement which is recovered from the placement
    journal.
    """

    kind = ErrorKind.STORAGE_FAILURE

    def __init__(self, operation: str, resource: str, reason: str = ""):
        message = f"Storage {operation} failed for {resource}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, {"operation": operation, "resource": resource})
        self.operation = operation
        self.resource = resource
