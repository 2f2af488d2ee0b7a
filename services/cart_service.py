"""
Cart ledger.

Holds pending lines until an order consumes them. At most one line per
product: adding a product already in the cart grows its line.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Tuple

from core.locks import CART, ResourceLocks
from models import CartLine, sum_money
from logging_config import get_logger
from storage.base import CartStore


# Module logger
logger = get_logger(__name__)


@dataclass(frozen=True)
class CartView:
    """Read-only view of the cart."""

    lines: Tuple[CartLine, ...]
    total_cost: Decimal


class CartLedger:
    """
    Upsert/list/clear over a CartStore collaborator.

    Thread Safety:
        - upsert() reads the existing line and writes the grown line while
          holding the cart lock, so concurrent additions are not lost
    """

    def __init__(self, store: CartStore, locks: ResourceLocks):
        self._store = store
        self._locks = locks

    def upsert(self, product_id: str, quantity: int, unit_price: Decimal) -> CartLine:
        """
        Add `quantity` units of a product at `unit_price`.

        Args:
            product_id: Product being added
            quantity: Positive number of units
            unit_price: Catalog price at the time of addition

        Returns:
            The line as stored after the addition
        """
        with self._locks.hold(CART):
            existing = self._store.find_by_product(product_id)
            if existing is None:
                line = CartLine.create(product_id, quantity, unit_price)
            else:
                line = existing.add(quantity, unit_price)
            self._store.upsert(line)

        logger.debug(f"Cart line {product_id}: quantity={line.quantity} price={line.price}")
        return line

    def list_all(self) -> List[CartLine]:
        return self._store.list_all()

    def clear(self) -> None:
        """Remove every line."""
        with self._locks.hold(CART):
            self._store.clear()
        logger.debug("Cart cleared")

    def reserved_quantity(self, product_id: str) -> int:
        """Units of a product already held in the cart."""
        line = self._store.find_by_product(product_id)
        return line.quantity if line else 0

    def snapshot(self) -> "CartView":
        """Current lines with their exact total."""
        lines = tuple(self.list_all())
        return CartView(lines=lines, total_cost=sum_money(line.price for line in lines))
