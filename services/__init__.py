"""
Services layer for the order fulfillment backend.

This module contains the business logic services:
- CatalogReader: Product lookups (and product management)
- CartLedger: Pending cart lines, upsert-by-product
- CheckoutService: Stock-checked additions to the cart
- OrderAssembler: Cart-to-order transition with crash recovery
- OrderLifecycleManager: Status changes, lookups and deletion
- FulfillmentService: Outcome-returning facade used by the routes

Concurrency Model:
    Flask worker threads call into one FulfillmentService. Every
    read-then-write sequence holds the ResourceLocks of the resources it
    touches (catalog, cart, orders).
"""

from .catalog_service import CatalogReader, DEFAULT_PRODUCTS
from .cart_service import CartLedger, CartView
from .checkout_service import CheckoutService
from .order_service import OrderAssembler, OrderLifecycleManager
from .fulfillment import FulfillmentService

__all__ = [
    "CatalogReader",
    "DEFAULT_PRODUCTS",
    "CartLedger",
    "CartView",
    "CheckoutService",
    "OrderAssembler",
    "OrderLifecycleManager",
    "FulfillmentService",
]
