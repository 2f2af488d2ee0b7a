"""
Shared helpers for the JSON routes.

- error_response / HTTP_STATUS: map a failed Outcome to a status code
- sanitize_text: strip markup from free-text input (names, descriptions, addresses)
- *_to_json: convert models to JSON-ready dicts (money as numbers)
"""

from __future__ import annotations

import html
from decimal import Decimal
from typing import Any, Dict, Optional

import bleach
from flask import current_app, jsonify, request

from core.outcome import ErrorKind, Outcome
from models import CartLine, Order, Product

# Constants
MAX_TEXT_LENGTH = 1000

HTTP_STATUS = {
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.INSUFFICIENT_STOCK: 400,
    ErrorKind.EMPTY_CART: 400,
    ErrorKind.PRODUCT_NOT_FOUND: 404,
    ErrorKind.ORDER_NOT_FOUND: 404,
    ErrorKind.DUPLICATE_ORDER: 409,
    ErrorKind.ILLEGAL_TRANSITION: 409,
    ErrorKind.STORAGE_FAILURE: 500,
    ErrorKind.INTERNAL: 500,
}


def get_service():
    """The FulfillmentService registered by create_app()."""
    return current_app.config["FULFILLMENT_SERVICE"]


def json_body() -> Dict[str, Any]:
    """Request JSON body, or {} when absent or not an object."""
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def sanitize_text(value: Any, max_length: int = MAX_TEXT_LENGTH) -> Any:
    """
    Strip markup from a free-text input and return plain text.

    bleach escapes the characters it keeps (`&` becomes `&amp;`); those
    entities are decoded again so the stored text is what the caller
    typed, minus tags. Non-strings pass through unchanged so the services
    can report them as malformed. Identifiers and status tags are never
    passed through here.
    """
    if not isinstance(value, str):
        return value
    text = html.unescape(bleach.clean(value, tags=[], strip=True)).strip()
    if max_length and len(text) > max_length:
        text = text[:max_length]
    return text


def error_response(outcome: Outcome):
    """JSON error body with the status code for the outcome's ErrorKind."""
    status = HTTP_STATUS.get(outcome.error, 500)
    if status == 500:
        # Storage details stay in the log
        return jsonify({"error": "Internal Server Error"}), status
    return jsonify({"error": outcome.message}), status


def _money(value: Decimal) -> float:
    return float(value)


def product_to_json(product: Product) -> Dict[str, Any]:
    data = product.to_dict()
    data["price"] = _money(product.price)
    return data


def cart_line_to_json(line: CartLine) -> Dict[str, Any]:
    return {"id": line.product_id, "quantity": line.quantity, "price": _money(line.price)}


def order_to_json(order: Order) -> Dict[str, Any]:
    return {
        "id": order.id,
        "date": order.date,
        "address": order.address,
        "status": order.status,
        "totalCost": _money(order.total_cost),
        "products": [cart_line_to_json(line) for line in order.lines],
    }


def message_response(outcome: Outcome, extra: Optional[Dict[str, Any]] = None, status: int = 200):
    """{"message": ...} body for a successful outcome, merged with `extra`."""
    body = {"message": outcome.message}
    if extra:
        body.update(extra)
    return jsonify(body), status
