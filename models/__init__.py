"""
Data models for the order fulfillment backend.

This module contains immutable dataclasses for:
- Product: Catalog entry (price, stock)
- CartLine: Pending line in the cart
- Order: Frozen record of a consumed cart, with its status

All dataclasses are frozen, so records read under a storage lock can be
passed between request threads without copying.
"""

from .money import to_money, sum_money
from .product import Product
from .cart import CartLine
from .order import Order, OrderStatus, ALLOWED_TRANSITIONS, is_allowed_transition

__all__ = [
    "to_money",
    "sum_money",
    "Product",
    "CartLine",
    "Order",
    "OrderStatus",
    "ALLOWED_TRANSITIONS",
    "is_allowed_transition",
]
