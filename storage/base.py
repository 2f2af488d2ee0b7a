"""
Abstract persistence interfaces.

The fulfillment services depend only on these classes. Each backend
(JSON files, MongoDB documents) implements all four and must satisfy the
same pre/post-conditions; the shared test suite runs against both.

No interface promises multi-record transactions. Order placement gets
its exactly-once cart consumption from the PlacementJournal instead.

Every method may raise StorageFailureError.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, TypeVar

from core.exceptions import StorageFailureError
from models import CartLine, Order, Product

T = TypeVar("T")


class Catalog(ABC):
    """Product catalog."""

    @abstractmethod
    def find_by_id(self, product_id: str) -> Optional[Product]:
        """Return the product, or None if absent."""

    @abstractmethod
    def find_all(self) -> List[Product]:
        """Return every product in insertion order."""

    @abstractmethod
    def insert(self, product: Product) -> None:
        """Add a product. The caller guarantees the id is unused."""

    @abstractmethod
    def delete_by_id(self, product_id: str) -> bool:
        """Remove a product. Returns False if it did not exist."""


class CartStore(ABC):
    """Pending cart lines, at most one per product."""

    @abstractmethod
    def find_by_product(self, product_id: str) -> Optional[CartLine]:
        """Return the line for a product, or None."""

    @abstractmethod
    def upsert(self, line: CartLine) -> None:
        """Insert the line or replace the existing line for its product."""

    @abstractmethod
    def list_all(self) -> List[CartLine]:
        """Return every pending line."""

    @abstractmethod
    def clear(self) -> None:
        """Remove all lines. Idempotent."""


class OrderStore(ABC):
    """Placed orders."""

    @abstractmethod
    def create(self, order: Order) -> None:
        """
        Persist a new order.

        Raises:
            DuplicateOrderError: If an order with the same id exists
        """

    @abstractmethod
    def find_by_id(self, order_id: str) -> Optional[Order]:
        """Return the order, or None if absent."""

    @abstractmethod
    def update_status(self, order_id: str, status: str) -> bool:
        """Overwrite an order's status. Returns False if it did not exist."""

    @abstractmethod
    def delete_by_id(self, order_id: str) -> bool:
        """Remove an order. Returns False if it did not exist."""

    @abstractmethod
    def find_all(self) -> List[Order]:
        """Return every order."""


class PlacementJournal(ABC):
    """
    Write-ahead marker for order placement.

    Holds at most one order id: the placement that has started but whose
    cart clear is not yet confirmed.
    """

    @abstractmethod
    def begin(self, order_id: str) -> None:
        """Record that placement of `order_id` has started."""

    @abstractmethod
    def pending(self) -> Optional[str]:
        """Return the order id of an unfinished placement, if any."""

    @abstractmethod
    def complete(self) -> None:
        """Drop the marker. Idempotent."""


class Storage:
    """
    Bundle of the collaborators one backend provides.

    Built by storage.open_storage() and injected into the services.
    """

    backend = "abstract"

    def __init__(
        self,
        catalog: Catalog,
        cart: CartStore,
        orders: OrderStore,
        journal: PlacementJournal,
    ):
        self.catalog = catalog
        self.cart = cart
        self.orders = orders
        self.journal = journal

    def close(self) -> None:
        """Release backend resources (connections, handles)."""


def decode_record(factory: Callable[[Dict[str, Any]], T], record: Any, resource: str) -> T:
    """
    Build a model from a stored record.

    A record missing required fields or holding values of the wrong type
    is reported as a parse failure of `resource`.

    Raises:
        StorageFailureError: If `factory` cannot build the model
    """
    try:
        return factory(record)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise StorageFailureError("parse", resource, f"malformed record: {e!r}") from e
