"""
Order assembly and order lifecycle.

OrderAssembler turns the cart into an Order; OrderLifecycleManager moves
and removes existing orders.

Placement Protocol:
    1. Journal the order id (write-ahead marker)
    2. Persist the order
    3. Clear the cart
    4. Drop the marker
    5. Report success

    If the process dies or storage fails between 1 and 4, recover() settles
    the placement on the next start, or before the next cart read, checkout
    or placement (see settled_cart): when the journaled order exists the
    cart is cleared (clearing twice is harmless), otherwise the marker is
    dropped and the cart is left for a new attempt. A cart is therefore
    consumed into at most one order.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, List, Optional

from core.exceptions import (
    DuplicateOrderError,
    EmptyCartError,
    IllegalTransitionError,
    OrderNotFoundError,
)
from core.locks import CART, ORDERS, ResourceLocks
from models import Order, is_allowed_transition
from logging_config import get_logger, get_order_logger
from storage.base import OrderStore, PlacementJournal

from .cart_service import CartLedger
from .validation import require_text


# Module logger
logger = get_logger(__name__)


class OrderAssembler:
    """
    Consumes the cart into a new pending Order.

    Args:
        cart: Cart ledger to read and clear
        orders: Order store to persist into
        journal: Placement journal for crash recovery
        locks: Shared resource locks
    """

    def __init__(
        self,
        cart: CartLedger,
        orders: OrderStore,
        journal: PlacementJournal,
        locks: ResourceLocks,
    ):
        self._cart = cart
        self._orders = orders
        self._journal = journal
        self._locks = locks

    def place_order(self, order_id, date, address) -> Order:
        """
        Place an order from everything in the cart.

        Args:
            order_id: Caller-supplied unique id
            date: Order date as supplied by the caller
            address: Delivery address

        Returns:
            The persisted Order (status "Pending")

        Raises:
            InvalidInputError: If a field is absent
            DuplicateOrderError: If the id is already used
            EmptyCartError: If the cart has no lines
            StorageFailureError: If storage fails at any step
        """
        message = "All parameters (id, date, address) are required in the request body"
        order_id = require_text(order_id, "id", message)
        date = require_text(date, "date", message)
        address = require_text(address, "address", message)

        order_logger = get_order_logger(order_id)

        with self._locks.hold(CART, ORDERS):
            self.recover()

            if self._orders.find_by_id(order_id) is not None:
                raise DuplicateOrderError(order_id)

            lines = self._cart.list_all()
            if not lines:
                raise EmptyCartError()

            order = Order.assemble(order_id, date, address, tuple(lines))
            order_logger.info(
                f"Assembling order from {len(lines)} lines, total {order.total_cost}"
            )

            self._journal.begin(order.id)
            self._orders.create(order)
            order_logger.info("Order persisted")

            self._cart.clear()
            self._journal.complete()

        order_logger.info("Order placed successfully")
        return order

    def recover(self) -> Optional[str]:
        """
        Finish or abandon an interrupted placement.

        Returns:
            The journaled order id if one was found, else None
        """
        with self._locks.hold(CART, ORDERS):
            order_id = self._journal.pending()
            if order_id is None:
                return None

            if self._orders.find_by_id(order_id) is not None:
                logger.warning(
                    f"Order {order_id} was persisted but its cart was not cleared; clearing now"
                )
                self._cart.clear()
            else:
                logger.warning(
                    f"Placement of order {order_id} never persisted; cart left intact"
                )
            self._journal.complete()
            return order_id

    @contextmanager
    def settled_cart(self, *names: str) -> Iterator[None]:
        """
        Hold the cart lock, plus the locks for `names`, after finishing any
        interrupted placement.

        Cart reads and additions run inside this block. A line consumed by
        a stored order is therefore gone before new lines arrive, and
        recovery can never clear lines added after the failure.

        Raises:
            StorageFailureError: If recovery cannot read or clear storage
        """
        with self._locks.hold(CART, ORDERS, *names):
            self.recover()
            yield


class OrderLifecycleManager:
    """
    Status changes, lookups and deletion of placed orders.

    Status is open-ended by default: any non-blank tag replaces the current
    one. With strict_transitions the tag must follow the lifecycle declared
    in models.order.
    """

    def __init__(
        self,
        orders: OrderStore,
        locks: ResourceLocks,
        strict_transitions: bool = False,
    ):
        self._orders = orders
        self._locks = locks
        self.strict_transitions = strict_transitions

    def update_status(self, order_id, status) -> Order:
        """
        Overwrite an order's status.

        Returns:
            The order carrying its new status

        Raises:
            InvalidInputError: If id or status is absent
            OrderNotFoundError: If no order has this id
            IllegalTransitionError: In strict mode, for a disallowed change
        """
        message = "Both order ID and status are required in the request body"
        order_id = require_text(order_id, "id", message)
        status = require_text(status, "status", message)

        with self._locks.hold(ORDERS):
            order = self._orders.find_by_id(order_id)
            if order is None:
                raise OrderNotFoundError(order_id)

            if self.strict_transitions and not is_allowed_transition(order.status, status):
                raise IllegalTransitionError(order_id, order.status, status)

            if not self._orders.update_status(order_id, status):
                # Deleted underneath us by another backend client
                raise OrderNotFoundError(order_id)

        get_order_logger(order_id).info(f"Status changed {order.status} -> {status}")
        return order.with_status(status)

    def delete_by_id(self, order_id) -> None:
        """
        Permanently remove an order.

        Raises:
            InvalidInputError: If id is absent
            OrderNotFoundError: If no order has this id
        """
        order_id = require_text(order_id, "id", "Order ID is required")
        with self._locks.hold(ORDERS):
            if not self._orders.delete_by_id(order_id):
                raise OrderNotFoundError(order_id)
        get_order_logger(order_id).info("Order deleted")

    def get_all(self) -> List[Order]:
        return self._orders.find_all()

    def get_by_id(self, order_id) -> Order:
        order_id = require_text(order_id, "id", "Order ID is required")
        order = self._orders.find_by_id(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order
