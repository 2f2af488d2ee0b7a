"""
Checkout operation.

Validates a requested quantity against catalog stock and adds it to the
cart. Stock itself is never written here.

Stock Check:
    With reservations enabled (the default) the request is compared with
    the stock still available, i.e. catalog stock minus what the cart
    already holds for that product. Repeated checkouts therefore can never
    reserve more than is in stock.

    With reservations disabled the request is compared with total catalog
    stock on each call, which lets repeated checkouts exceed stock in sum.
"""

from __future__ import annotations

from core.exceptions import InsufficientStockError
from core.locks import CART, CATALOG, ResourceLocks
from models import CartLine
from logging_config import get_logger

from .cart_service import CartLedger
from .catalog_service import CatalogReader
from .validation import require_positive_int, require_text


# Module logger
logger = get_logger(__name__)

MISSING_FIELDS = "Both product ID and quantity are required in the request body"


class CheckoutService:
    """
    Adds products to the cart after a stock check.

    Args:
        catalog: Catalog reader for product lookup
        cart: Cart ledger to add into
        locks: Shared resource locks
        reserve_cart_stock: Count cart contents against stock (see module doc)
    """

    def __init__(
        self,
        catalog: CatalogReader,
        cart: CartLedger,
        locks: ResourceLocks,
        reserve_cart_stock: bool = True,
    ):
        self._catalog = catalog
        self._cart = cart
        self._locks = locks
        self.reserve_cart_stock = reserve_cart_stock

    def checkout(self, product_id, quantity) -> CartLine:
        """
        Add `quantity` units of a product to the cart.

        Args:
            product_id: Catalog product id
            quantity: Positive integer number of units

        Returns:
            The cart line after the addition

        Raises:
            InvalidInputError: If either argument is absent or malformed
            ProductNotFoundError: If the product does not exist
            InsufficientStockError: If the request exceeds available stock
            StorageFailureError: If the catalog or cart cannot be accessed
        """
        product_id = require_text(product_id, "id", MISSING_FIELDS)
        quantity = require_positive_int(quantity, "quantity", MISSING_FIELDS)

        # Lookup, stock check and upsert form one read-then-write unit
        with self._locks.hold(CATALOG, CART):
            product = self._catalog.find_by_id(product_id)

            available = product.stock
            if self.reserve_cart_stock:
                available -= self._cart.reserved_quantity(product_id)

            if quantity > available:
                logger.info(
                    f"Rejected checkout of {quantity} x {product_id}: "
                    f"only {max(available, 0)} available"
                )
                raise InsufficientStockError(product_id, quantity, max(available, 0))

            line = self._cart.upsert(product_id, quantity, product.price)

        logger.info(f"Added {quantity} x {product_id} to cart")
        return line
