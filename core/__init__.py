"""
Core module for the order fulfillment backend.

Contains fundamental infrastructure components:
- exceptions: Custom exception hierarchy
- outcome: Typed outcomes returned by the fulfillment surface
- locks: Per-resource mutual exclusion
"""

from .outcome import ErrorKind, Outcome
from .exceptions import (
    FulfillmentError,
    InvalidInputError,
    ProductNotFoundError,
    OrderNotFoundError,
    InsufficientStockError,
    EmptyCartError,
    DuplicateOrderError,
    IllegalTransitionError,
    StorageFailureError,
)
from .locks import ResourceLocks, CATALOG, CART, ORDERS

__all__ = [
    "ErrorKind",
    "Outcome",
    "FulfillmentError",
    "InvalidInputError",
    "ProductNotFoundError",
    "OrderNotFoundError",
    "InsufficientStockError",
    "EmptyCartError",
    "DuplicateOrderError",
    "IllegalTransitionError",
    "StorageFailureError",
    "ResourceLocks",
    "CATALOG",
    "CART",
    "ORDERS",
]
