"""
Order data models.

An Order is the frozen result of consuming the cart: its total and its
line snapshot never change after creation. Only `status` moves, through
the order lifecycle manager.

Status Lifecycle:
    Status is an open-ended string tag, initially "Pending". By default any
    tag may follow any other. In strict mode the known statuses below are
    the only accepted values and follow:

        Pending -> Shipped -> Delivered
        Pending -> Cancelled
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional, Tuple

from .cart import CartLine
from .money import sum_money, to_money


class OrderStatus(Enum):
    """Known order statuses used by the strict lifecycle."""

    PENDING = "Pending"
    """Order placed, not yet shipped."""

    SHIPPED = "Shipped"
    """Handed to the carrier."""

    DELIVERED = "Delivered"
    """Received by the customer. Terminal."""

    CANCELLED = "Cancelled"
    """Cancelled before shipping. Terminal."""

    @classmethod
    def parse(cls, value: str) -> Optional["OrderStatus"]:
        """Return the matching status, or None for an unknown tag."""
        for status in cls:
            if status.value == value:
                return status
        return None


ALLOWED_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


def is_allowed_transition(current: str, requested: str) -> bool:
    """Check a status change against the strict lifecycle."""
    source = OrderStatus.parse(current)
    target = OrderStatus.parse(requested)
    if source is None or target is None:
        return False
    return target in ALLOWED_TRANSITIONS[source]


@dataclass(frozen=True)
class Order:
    """
    A placed order.

    Frozen: a status change produces a new Order via with_status().
    Serialized with the order.json field names (`totalCost`,
    `products` for the line snapshot).
    """

    id: str
    """Caller-supplied unique identifier."""

    date: str
    """Order date string as supplied by the caller."""

    address: str
    """Delivery address."""

    total_cost: Decimal
    """Sum of line prices at assembly time."""

    lines: Tuple[CartLine, ...] = field(default_factory=tuple)
    """Snapshot of the cart lines consumed by this order."""

    status: str = OrderStatus.PENDING.value
    """Current status tag."""

    @classmethod
    def assemble(
        cls,
        order_id: str,
        date: str,
        address: str,
        lines: Tuple[CartLine, ...],
    ) -> "Order":
        """
        Freeze cart lines into a new pending order.

        Args:
            order_id: Caller-supplied order id
            date: Order date
            address: Delivery address
            lines: Cart lines being consumed

        Returns:
            Order with status "Pending" and total = exact sum of line prices
        """
        return cls(
            id=order_id,
            date=date,
            address=address,
            total_cost=sum_money(line.price for line in lines),
            lines=tuple(lines),
        )

    def with_status(self, status: str) -> "Order":
        """Return a copy carrying a new status."""
        return replace(self, status=status)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "address": self.address,
            "status": self.status,
            "totalCost": self.total_cost,
            "products": [line.to_dict() for line in self.lines],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Order":
        return cls(
            id=str(data["id"]),
            date=str(data.get("date", "")),
            address=data.get("address", ""),
            status=data.get("status", OrderStatus.PENDING.value),
            total_cost=to_money(data.get("totalCost", 0)),
            lines=tuple(CartLine.from_dict(line) for line in data.get("products", [])),
        )
