"""
Fulfillment service: the operation surface bound by the HTTP layer.

Every public method returns an Outcome. Errors raised by the services are
converted to failed outcomes carrying their ErrorKind and message; any
other exception is logged with its traceback and reported as Internal.
Nothing raises past this class.

Cart reads and checkouts run inside OrderAssembler.settled_cart(), so an
order placement interrupted after the order was stored is settled before
the cart is looked at.

Usage:
    # At app startup
    storage = open_storage(app.config)
    service = FulfillmentService.from_storage(storage)
    service.recover()

    # In routes
    outcome = service.checkout("1", 5)
    if outcome.ok:
        line = outcome.value
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from core.exceptions import FulfillmentError
from core.locks import CATALOG, ResourceLocks
from core.outcome import ErrorKind, Outcome
from logging_config import get_logger
from storage.base import Storage

from .cart_service import CartLedger
from .catalog_service import CatalogReader
from .checkout_service import CheckoutService
from .order_service import OrderAssembler, OrderLifecycleManager


# Module logger
logger = get_logger(__name__)


class FulfillmentService:
    """
    Facade over catalog, cart, checkout and order services.

    Attributes:
        catalog: CatalogReader
        cart: CartLedger
        checkout_service: CheckoutService
        assembler: OrderAssembler
        lifecycle: OrderLifecycleManager
    """

    def __init__(
        self,
        catalog: CatalogReader,
        cart: CartLedger,
        checkout_service: CheckoutService,
        assembler: OrderAssembler,
        lifecycle: OrderLifecycleManager,
    ):
        self.catalog = catalog
        self.cart = cart
        self.checkout_service = checkout_service
        self.assembler = assembler
        self.lifecycle = lifecycle

    @classmethod
    def from_storage(
        cls,
        storage: Storage,
        reserve_cart_stock: bool = True,
        strict_status_transitions: bool = False,
        locks: Optional[ResourceLocks] = None,
    ) -> "FulfillmentService":
        """
        Wire all services onto one storage backend.

        Args:
            storage: Opened backend
            reserve_cart_stock: Count cart contents against stock at checkout
            strict_status_transitions: Enforce the declared order lifecycle
            locks: Shared locks (a fresh registry if omitted)
        """
        locks = locks or ResourceLocks()
        catalog = CatalogReader(storage.catalog, locks)
        cart = CartLedger(storage.cart, locks)
        service = cls(
            catalog=catalog,
            cart=cart,
            checkout_service=CheckoutService(
                catalog, cart, locks, reserve_cart_stock=reserve_cart_stock
            ),
            assembler=OrderAssembler(cart, storage.orders, storage.journal, locks),
            lifecycle=OrderLifecycleManager(
                storage.orders, locks, strict_transitions=strict_status_transitions
            ),
        )
        logger.info(
            f"Fulfillment service ready on {storage.backend} storage "
            f"(reserve_cart_stock={reserve_cart_stock}, "
            f"strict_status_transitions={strict_status_transitions})"
        )
        return service

    def _run(self, operation: str, call: Callable[[], Any], message: str = "") -> Outcome:
        try:
            value = call()
        except FulfillmentError as e:
            if e.kind is ErrorKind.STORAGE_FAILURE:
                logger.error(f"Error during {operation}: {e}")
            else:
                logger.info(f"{operation} rejected: {e}")
            return Outcome.failure(e.kind, e.message, e.details)
        except Exception as e:
            logger.error(f"Unexpected error during {operation}: {e}", exc_info=True)
            return Outcome.failure(ErrorKind.INTERNAL, "Internal Server Error")
        return Outcome.success(value, message)

    # =========================================================================
    # PRODUCTS
    # =========================================================================

    def list_products(self) -> Outcome:
        """All products; an empty catalog succeeds with an empty list."""
        outcome = self._run("list_products", self.catalog.find_all)
        if outcome.ok and not outcome.value:
            return Outcome.success([], "No products found")
        return outcome

    def get_product(self, product_id) -> Outcome:
        return self._run("get_product", lambda: self.catalog.find_by_id(product_id))

    def add_product(self, name, description, price, stock, image_url) -> Outcome:
        return self._run(
            "add_product",
            lambda: self.catalog.add_product(name, description, price, stock, image_url),
            "Product added successfully",
        )

    def delete_product(self, product_id) -> Outcome:
        return self._run(
            "delete_product",
            lambda: self.catalog.delete_product(product_id),
            "Product deleted successfully",
        )

    def seed_catalog(self) -> Outcome:
        return self._run("seed_catalog", self.catalog.seed)

    # =========================================================================
    # CART
    # =========================================================================

    def checkout(self, product_id, quantity) -> Outcome:
        """Add a product to the cart; value is the resulting CartLine."""
        def call():
            with self.assembler.settled_cart(CATALOG):
                return self.checkout_service.checkout(product_id, quantity)

        return self._run(
            "checkout",
            call,
            "Item added to the cart successfully",
        )

    def view_cart(self) -> Outcome:
        """Value is a CartView (lines and exact total)."""
        def call():
            with self.assembler.settled_cart():
                return self.cart.snapshot()

        return self._run("view_cart", call)

    # =========================================================================
    # ORDERS
    # =========================================================================

    def place_order(self, order_id, date, address) -> Outcome:
        """Consume the cart into a new Order; value is the Order."""
        return self._run(
            "place_order",
            lambda: self.assembler.place_order(order_id, date, address),
            "Order placed successfully",
        )

    def update_order_status(self, order_id, status) -> Outcome:
        return self._run(
            "update_order_status",
            lambda: self.lifecycle.update_status(order_id, status),
            "Order status updated successfully",
        )

    def delete_order(self, order_id) -> Outcome:
        return self._run(
            "delete_order",
            lambda: self.lifecycle.delete_by_id(order_id),
            "Order deleted successfully",
        )

    def list_orders(self) -> Outcome:
        return self._run("list_orders", self.lifecycle.get_all)

    def get_order(self, order_id) -> Outcome:
        return self._run("get_order", lambda: self.lifecycle.get_by_id(order_id))

    def recover(self) -> Outcome:
        """Finish any interrupted placement; value is its order id or None."""
        return self._run("recover", self.assembler.recover)
