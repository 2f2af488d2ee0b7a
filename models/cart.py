"""
Cart line model.

A cart holds at most one line per product. Repeated checkout of the same
product grows the existing line; the accumulated price is fixed at the
unit price in effect at each addition and is never recomputed.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict

from .money import to_money


@dataclass(frozen=True)
class CartLine:
    """
    One pending line in the cart.

    Stored as {"id": product_id, "quantity": n, "price": total}, where price
    is the line total, not the unit price.
    """

    product_id: str
    quantity: int
    price: Decimal
    """Cumulative quantity x unit price at the time of each addition."""

    @classmethod
    def create(cls, product_id: str, quantity: int, unit_price: Decimal) -> "CartLine":
        """Start a new line for `quantity` units at `unit_price`."""
        return cls(
            product_id=product_id,
            quantity=quantity,
            price=to_money(unit_price * quantity),
        )

    def add(self, quantity: int, unit_price: Decimal) -> "CartLine":
        """Return a copy grown by `quantity` units at `unit_price`."""
        return CartLine(
            product_id=self.product_id,
            quantity=self.quantity + quantity,
            price=to_money(self.price + unit_price * quantity),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.product_id,
            "quantity": self.quantity,
            "price": self.price,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CartLine":
        return cls(
            product_id=str(data["id"]),
            quantity=int(data["quantity"]),
            price=to_money(data["price"]),
        )
