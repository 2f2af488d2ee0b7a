"""
Flat-file storage backend.

Keeps the catalog, cart, orders and placement marker as JSON documents in
one data directory:

    product.json    {"products": [ {...}, ... ]}
    cart.json       [ {"id": ..., "quantity": ..., "price": ...}, ... ]
    order.json      [ {"id": ..., "totalCost": ..., "products": [...]}, ... ]
    placement.json  {"orderId": ...} while a placement is in flight, else {}

Thread Safety:
    - Each JsonDocument has its own RLock; every read-modify-write holds it
    - Writes go to a sibling .tmp file and are moved into place with
      os.replace, so a reader never sees a half-written document

Prices are parsed as Decimal (parse_float=Decimal) and written back as
JSON numbers.
"""

from __future__ import annotations

import copy
import json
import os
import threading
from decimal import Decimal
from pathlib import Path
from typing import Any, List, Optional

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

PRODUCT_FILE = "product.json"
CART_FILE = "cart.json"
ORDER_FILE = "order.json"
PLACEMENT_FILE = "placement.json"


def _encode(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class JsonDocument:
    """
    One JSON file with locked, atomic read and write.

    Attributes:
        path: Location of the file
        lock: Held by callers around read-modify-write sequences
    """

    def __init__(self, path: Path, empty: Any):
        self.path = path
        self.lock = threading.RLock()
        self._empty = empty

    @property
    def name(self) -> str:
        return self.path.name

    def ensure_exists(self) -> None:
        """Create the file with its empty value if it is missing."""
        with self.lock:
            if not self.path.exists():
                logger.info(f"Creating empty {self.name}")
                self.write(copy.deepcopy(self._empty))

    def read(self) -> Any:
        """
        Load and parse the file.

        Raises:
            StorageFailureError: If the file cannot be read or parsed
        """
        with self.lock:
            try:
                with open(self.path, "r", encoding="utf-8") as f:
                    data = json.load(f, parse_float=Decimal)
            except json.JSONDecodeError as e:
                logger.error(f"Error parsing {self.name}: {e}")
                raise StorageFailureError("parse", self.name, str(e)) from e
            except OSError as e:
                logger.error(f"Error reading {self.name}: {e}")
                raise StorageFailureError("read", self.name, str(e)) from e

            if not isinstance(data, type(self._empty)):
                logger.error(f"Unexpected document shape in {self.name}")
                raise StorageFailureError(
                    "parse", self.name, f"expected {type(self._empty).__name__}"
                )
            return data

    def write(self, data: Any) -> None:
        """
        Replace the file contents atomically.

        Raises:
            StorageFailureError: If the file cannot be written
        """
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        with self.lock:
            try:
                with open(tmp_path, "w", encoding="utf-8") as f:
                    f.write(json.dumps(data, indent=2, default=_encode))
                os.replace(tmp_path, self.path)
            except OSError as e:
                logger.error(f"Error writing {self.name}: {e}")
                raise StorageFailureError("write", self.name, str(e)) from e


# =============================================================================
# COLLABORATORS
# =============================================================================

class FileCatalog(Catalog):
    """Catalog backed by product.json."""

    def __init__(self, document: JsonDocument):
        self._doc = document

    def _products(self, data: dict) -> list:
        products = data.get("products")
        # A file without a products array reads as an empty catalog
        if not isinstance(products, list):
            products = []
            data["products"] = products
        return products

    def find_by_id(self, product_id: str) -> Optional[Product]:
        for item in self._products(self._doc.read()):
            if item and item.get("id") == product_id:
                return decode_record(Product.from_dict, item, self._doc.name)
        return None

    def find_all(self) -> List[Product]:
        return [
            decode_record(Product.from_dict, item, self._doc.name)
            for item in self._products(self._doc.read())
            if item
        ]

    def insert(self, product: Product) -> None:
        with self._doc.lock:
            data = self._doc.read()
            self._products(data).append(product.to_dict())
            self._doc.write(data)

    def delete_by_id(self, product_id: str) -> bool:
        with self._doc.lock:
            data = self._doc.read()
            products = self._products(data)
            for index, item in enumerate(products):
                if item and item.get("id") == product_id:
                    del products[index]
                    self._doc.write(data)
                    return True
            return False


class FileCartStore(CartStore):
    """Cart backed by cart.json."""

    def __init__(self, document: JsonDocument):
        self._doc = document

    def find_by_product(self, product_id: str) -> Optional[CartLine]:
        for item in self._doc.read():
            if item.get("id") == product_id:
                return decode_record(CartLine.from_dict, item, self._doc.name)
        return None

    def upsert(self, line: CartLine) -> None:
        with self._doc.lock:
            items = self._doc.read()
            for index, item in enumerate(items):
                if item.get("id") == line.product_id:
                    items[index] = line.to_dict()
                    break
            else:
                items.append(line.to_dict())
            self._doc.write(items)

    def list_all(self) -> List[CartLine]:
        return [
            decode_record(CartLine.from_dict, item, self._doc.name)
            for item in self._doc.read()
        ]

    def clear(self) -> None:
        self._doc.write([])


class FileOrderStore(OrderStore):
    """Orders backed by order.json."""

    def __init__(self, document: JsonDocument):
        self._doc = document

    def create(self, order: Order) -> None:
        with self._doc.lock:
            items = self._doc.read()
            if any(item.get("id") == order.id for item in items):
                raise DuplicateOrderError(order.id)
            items.append(order.to_dict())
            self._doc.write(items)

    def find_by_id(self, order_id: str) -> Optional[Order]:
        for item in self._doc.read():
            if item.get("id") == order_id:
                return decode_record(Order.from_dict, item, self._doc.name)
        return None

    def update_status(self, order_id: str, status: str) -> bool:
        with self._doc.lock:
            items = self._doc.read()
            for item in items:
                if item.get("id") == order_id:
                    item["status"] = status
                    self._doc.write(items)
                    return True
            return False

    def delete_by_id(self, order_id: str) -> bool:
        with self._doc.lock:
            items = self._doc.read()
            for index, item in enumerate(items):
                if item.get("id") == order_id:
                    del items[index]
                    self._doc.write(items)
                    return True
            return False

    def find_all(self) -> List[Order]:
        return [
            decode_record(Order.from_dict, item, self._doc.name)
            for item in self._doc.read()
        ]


class FilePlacementJournal(PlacementJournal):
    """Placement marker backed by placement.json."""

    def __init__(self, document: JsonDocument):
        self._doc = document

    def begin(self, order_id: str) -> None:
        self._doc.write({"orderId": order_id})

    def pending(self) -> Optional[str]:
        return self._doc.read().get("orderId")

    def complete(self) -> None:
        self._doc.write({})


# =============================================================================
# FACTORY
# =============================================================================

class FileStorage(Storage):
    """All collaborators backed by JSON files in one directory."""

    backend = "file"

    def __init__(self, data_dir: Path):
        self.data_dir = data_dir
        self.documents = {
            PRODUCT_FILE: JsonDocument(data_dir / PRODUCT_FILE, {"products": []}),
            CART_FILE: JsonDocument(data_dir / CART_FILE, []),
            ORDER_FILE: JsonDocument(data_dir / ORDER_FILE, []),
            PLACEMENT_FILE: JsonDocument(data_dir / PLACEMENT_FILE, {}),
        }
        super().__init__(
            catalog=FileCatalog(self.documents[PRODUCT_FILE]),
            cart=FileCartStore(self.documents[CART_FILE]),
            orders=FileOrderStore(self.documents[ORDER_FILE]),
            journal=FilePlacementJournal(self.documents[PLACEMENT_FILE]),
        )


def open_file_storage(data_dir) -> FileStorage:
    """
    Open (and initialize if needed) the JSON store in `data_dir`.

    Args:
        data_dir: Directory holding the JSON files; created if missing

    Returns:
        FileStorage with every file present

    Raises:
        StorageFailureError: If the directory or files cannot be created
    """
    path = Path(data_dir)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StorageFailureError("open", str(path), str(e)) from e

    storage = FileStorage(path)
    for document in storage.documents.values():
        document.ensure_exists()

    logger.info(f"File storage ready in {path}")
    return storage
