"""
Document-database storage backend (MongoDB via pymongo).

Collections:
    products    one document per product, unique index on "id"
    carts       one document per cart line, unique index on "id" (product id)
    orders      one document per order, line snapshot embedded as "products"
    placements  at most one document, {"_id": "current", "orderId": ...}

Documents use the same field names as the JSON file backend. Money is
stored as Decimal128 so totals survive the round trip exactly.

Every pymongo failure is translated into StorageFailureError; a unique
index violation on orders becomes DuplicateOrderError.
"""

from __future__ import annotations

import functools
from decimal import Decimal
from typing import Any, Callable, List, Optional, TypeVar

from bson.decimal128 import Decimal128
from pymongo import ASCENDING, MongoClient
from pymongo.errors import DuplicateKeyError, PyMongoError

from core.exceptions import DuplicateOrderError, StorageFailureError
from models import CartLine, Order, Product
from logging_config import get_logger

from .base import (
    Catalog,
    CartStore,
    OrderStore,
    PlacementJournal,
    Storage,
    decode_record,
)


# Module logger
logger = get_logger(__name__)

PRODUCTS = "products"
CARTS = "carts"
ORDERS = "orders"
PLACEMENTS = "placements"

CURRENT_PLACEMENT = "current"
NO_ID = {"_id": False}

F = TypeVar("F", bound=Callable[..., Any])


def _to_bson(value: Any) -> Any:
    """Recursively convert Decimal values to Decimal128."""
    if isinstance(value, Decimal):
        return Decimal128(value)
    if isinstance(value, dict):
        return {key: _to_bson(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_to_bson(item) for item in value]
    return value


def _from_bson(value: Any) -> Any:
    """Recursively convert Decimal128 values back to Decimal."""
    if isinstance(value, Decimal128):
        return value.to_decimal()
    if isinstance(value, dict):
        return {key: _from_bson(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_from_bson(item) for item in value]
    return value


def translate_errors(operation: str) -> Callable[[F], F]:
    """
    Decorator turning pymongo errors into StorageFailureError.

    Args:
        operation: Short verb for the log and error message ("read", "write")
    """
    def decorator(method: F) -> F:
        @functools.wraps(method)
        def wrapper(self, *args, **kwargs):
            try:
                return method(self, *args, **kwargs)
            except PyMongoError as e:
                resource = self._collection.name
                logger.error(f"MongoDB {operation} on {resource} failed: {e}")
                raise StorageFailureError(operation, resource, str(e)) from e
        return wrapper  # type: ignore[return-value]
    return decorator


# =============================================================================
# COLLABORATORS
# =============================================================================

class _MongoCollaborator:
    """Holds one collection and decodes its documents into `model`."""

    model: Any = None

    def __init__(self, collection):
        self._collection = collection

    def _decode(self, doc: dict):
        return decode_record(self.model.from_dict, _from_bson(doc), self._collection.name)


class MongoCatalog(_MongoCollaborator, Catalog):
    """Catalog backed by the products collection."""

    model = Product

    @translate_errors("read")
    def find_by_id(self, product_id: str) -> Optional[Product]:
        doc = self._collection.find_one({"id": product_id}, NO_ID)
        return self._decode(doc) if doc else None

    @translate_errors("read")
    def find_all(self) -> List[Product]:
        return [self._decode(doc) for doc in self._collection.find({}, NO_ID)]

    @translate_errors("write")
    def insert(self, product: Product) -> None:
        self._collection.insert_one(_to_bson(product.to_dict()))

    @translate_errors("write")
    def delete_by_id(self, product_id: str) -> bool:
        return self._collection.delete_one({"id": product_id}).deleted_count == 1


class MongoCartStore(_MongoCollaborator, CartStore):
    """Cart backed by the carts collection."""

    model = CartLine

    @translate_errors("read")
    def find_by_product(self, product_id: str) -> Optional[CartLine]:
        doc = self._collection.find_one({"id": product_id}, NO_ID)
        return self._decode(doc) if doc else None

    @translate_errors("write")
    def upsert(self, line: CartLine) -> None:
        self._collection.replace_one(
            {"id": line.product_id}, _to_bson(line.to_dict()), upsert=True
        )

    @translate_errors("read")
    def list_all(self) -> List[CartLine]:
        return [self._decode(doc) for doc in self._collection.find({}, NO_ID)]

    @translate_errors("write")
    def clear(self) -> None:
        self._collection.delete_many({})


class MongoOrderStore(_MongoCollaborator, OrderStore):
    """Orders backed by the orders collection."""

    model = Order

    @translate_errors("write")
    def create(self, order: Order) -> None:
        try:
            self._collection.insert_one(_to_bson(order.to_dict()))
        except DuplicateKeyError as e:
            raise DuplicateOrderError(order.id) from e

    @translate_errors("read")
    def find_by_id(self, order_id: str) -> Optional[Order]:
        doc = self._collection.find_one({"id": order_id}, NO_ID)
        return self._decode(doc) if doc else None

    @translate_errors("write")
    def update_status(self, order_id: str, status: str) -> bool:
        result = self._collection.update_one({"id": order_id}, {"$set": {"status": status}})
        return result.matched_count == 1

    @translate_errors("write")
    def delete_by_id(self, order_id: str) -> bool:
        return self._collection.delete_one({"id": order_id}).deleted_count == 1

    @translate_errors("read")
    def find_all(self) -> List[Order]:
        return [self._decode(doc) for doc in self._collection.find({}, NO_ID)]


class MongoPlacementJournal(_MongoCollaborator, PlacementJournal):
    """Placement marker backed by a single document in placements."""

    @translate_errors("write")
    def begin(self, order_id: str) -> None:
        self._collection.replace_one(
            {"_id": CURRENT_PLACEMENT},
            {"_id": CURRENT_PLACEMENT, "orderId": order_id},
            upsert=True,
        )

    @translate_errors("read")
    def pending(self) -> Optional[str]:
        doc = self._collection.find_one({"_id": CURRENT_PLACEMENT})
        return doc.get("orderId") if doc else None

    @translate_errors("write")
    def complete(self) -> None:
        self._collection.delete_one({"_id": CURRENT_PLACEMENT})


# =============================================================================
# FACTORY
# =============================================================================

class DocumentStorage(Storage):
    """
    All collaborators backed by one MongoDB database.

    Args:
        database: pymongo Database (or an object with the same collection API)
        client: Owning MongoClient, closed by close(); None when injected
    """

    backend = "document"

    def __init__(self, database, client: Optional[MongoClient] = None):
        self.database = database
        self._client = client
        super().__init__(
            catalog=MongoCatalog(database[PRODUCTS]),
            cart=MongoCartStore(database[CARTS]),
            orders=MongoOrderStore(database[ORDERS]),
            journal=MongoPlacementJournal(database[PLACEMENTS]),
        )

    def ensure_indexes(self) -> None:
        """Create the unique id indexes the upsert and create rules rely on."""
        for name in (PRODUCTS, CARTS, ORDERS):
            try:
                self.database[name].create_index([("id", ASCENDING)], unique=True)
            except PyMongoError as e:
                logger.error(f"Creating index on {name} failed: {e}")
                raise StorageFailureError("open", name, str(e)) from e

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            logger.info("MongoDB connection closed")


def open_document_storage(
    uri: str,
    database_name: str,
    server_selection_timeout_ms: int = 5000,
) -> DocumentStorage:
    """
    Connect to MongoDB and prepare the collections.

    Args:
        uri: MongoDB connection string
        database_name: Database holding the four collections
        server_selection_timeout_ms: How long to wait for a reachable server

    Returns:
        DocumentStorage owning the client

    Raises:
        StorageFailureError: If the server cannot be reached
    """
    client = MongoClient(uri, serverSelectionTimeoutMS=server_selection_timeout_ms)
    storage = DocumentStorage(client[database_name], client)
    try:
        storage.ensure_indexes()
    except StorageFailureError:
        client.close()
        raise

    logger.info(f"Document storage ready in database '{database_name}'")
    return storage
