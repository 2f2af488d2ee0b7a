"""
Catalog reader.

Looks up products for checkout and serves the product endpoints. The core
treats the catalog as read-only: checkout never writes stock. Inserts and
deletes exist only for the product management surface.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from core.exceptions import ProductNotFoundError
from core.locks import CATALOG, ResourceLocks
from models import Product, to_money
from logging_config import get_logger
from storage.base import Catalog

from .validation import require_non_negative_int, require_price, require_text


# Module logger
logger = get_logger(__name__)


# Sample catalog seeded on first start in development
DEFAULT_PRODUCTS = (
    Product(
        id="1",
        name="product1",
        description="Description of Product 1",
        price=to_money("19.99"),
        stock=50,
        image_url="https://example.com/product1.jpg",
    ),
    Product(
        id="2",
        name="product2",
        description="Description of Product 2",
        price=to_money("29.99"),
        stock=30,
        image_url="https://example.com/product2.jpg",
    ),
    Product(
        id="3",
        name="product3",
        description="Description of Product 3",
        price=to_money("39.99"),
        stock=20,
        image_url="https://example.com/product3.jpg",
    ),
    Product(
        id="4",
        name="product4",
        description="Description of Product 4",
        price=to_money("49.99"),
        stock=15,
        image_url="https://example.com/product4.jpg",
    ),
)


class CatalogReader:
    """
    Product lookups over a Catalog collaborator.

    Args:
        catalog: Storage collaborator holding products
        locks: Shared resource locks (catalog lock guards writes)
    """

    def __init__(self, catalog: Catalog, locks: ResourceLocks):
        self._catalog = catalog
        self._locks = locks

    def find_by_id(self, product_id: str) -> Product:
        """
        Look up one product.

        Raises:
            InvalidInputError: If product_id is absent
            ProductNotFoundError: If no product has this id
        """
        product_id = require_text(
            product_id, "id", "Product ID is required in the query parameters"
        )
        product = self._catalog.find_by_id(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    def find_all(self) -> List[Product]:
        """Return all products; an empty list is a valid answer."""
        return self._catalog.find_all()

    def add_product(
        self,
        name,
        description,
        price,
        stock,
        image_url,
    ) -> Product:
        """
        Add a product with a generated id.

        The id is one more than the largest numeric id present, so deleting
        a product never causes the next insert to reuse a live id.

        Raises:
            InvalidInputError: If any field is absent or malformed
        """
        message = (
            "Name, description, price, stock, and imageUrl are required "
            "in the request body"
        )
        name = require_text(name, "name", message)
        description = require_text(description, "description", message)
        price = require_price(price, "price", message)
        stock = require_non_negative_int(stock, "stock", message)
        image_url = require_text(image_url, "imageUrl", message)

        with self._locks.hold(CATALOG):
            product = Product(
                id=self._next_id(self._catalog.find_all()),
                name=name,
                description=description,
                price=price,
                stock=stock,
                image_url=image_url,
            )
            self._catalog.insert(product)

        logger.info(f"Added product {product.id} ({product.name})")
        return product

    def delete_product(self, product_id: str) -> None:
        """
        Remove a product. Cart lines referencing it are left untouched.

        Raises:
            InvalidInputError: If product_id is absent
            ProductNotFoundError: If no product has this id
        """
        product_id = require_text(product_id, "id", "Invalid or missing product ID")
        with self._locks.hold(CATALOG):
            if not self._catalog.delete_by_id(product_id):
                raise ProductNotFoundError(product_id)
        logger.info(f"Deleted product {product_id}")

    def seed(self, products: Optional[Iterable[Product]] = None) -> int:
        """
        Insert the sample catalog if the catalog is empty.

        Returns:
            Number of products inserted (0 when the catalog had products)
        """
        products = DEFAULT_PRODUCTS if products is None else tuple(products)
        with self._locks.hold(CATALOG):
            if self._catalog.find_all():
                logger.debug("Catalog already populated, skipping seed")
                return 0
            for product in products:
                self._catalog.insert(product)

        logger.info(f"{len(products)} products inserted successfully.")
        return len(products)

    @staticmethod
    def _next_id(products: List[Product]) -> str:
        numeric_ids = [int(p.id) for p in products if p.id.isdigit()]
        return str(max(numeric_ids, default=len(products)) + 1)
