"""
Catalog product model.

Products are owned by the catalog and read-only to checkout. The
serialized form uses the product.json field names (`imageUrl` in camel
case).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict

from .money import to_money


@dataclass(frozen=True)
class Product:
    """
    A product available for checkout.

    Frozen so a product read under the catalog lock can be handed to any
    thread without copying.
    """

    id: str
    """Unique product identifier."""

    price: Decimal
    """Unit price, non-negative, quantized to cents."""

    stock: int
    """Units in stock, non-negative. Never decremented by checkout."""

    name: str = ""
    description: str = ""
    image_url: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the stored document shape."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "stock": self.stock,
            "imageUrl": self.image_url,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Product":
        """Create from a stored document."""
        return cls(
            id=str(data["id"]),
            price=to_money(data.get("price", 0)),
            stock=int(data.get("stock", 0)),
            name=data.get("name", ""),
            description=data.get("description", ""),
            image_url=data.get("imageUrl", ""),
        )
