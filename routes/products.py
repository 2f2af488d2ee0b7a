"""
Product routes.

Handles:
- GET    /search_all              - List all products
- GET    /search_product_by_id    - One product (?id=)
- POST   /products_add            - Add a product (id generated)
- DELETE /delete_product          - Remove a product (?id=)
"""

from flask import Blueprint, jsonify, request

from .responses import (
    error_response,
    get_service,
    json_body,
    message_response,
    product_to_json,
    sanitize_text,
)

products_bp = Blueprint("products", __name__)


@products_bp.route("/search_all", methods=["GET"])
def search_all():
    """Retrieve all products; 404 when the catalog is empty."""
    outcome = get_service().list_products()
    if not outcome.ok:
        return error_response(outcome)
    if not outcome.value:
        return jsonify({"error": outcome.message}), 404
    return jsonify([product_to_json(p) for p in outcome.value])


@products_bp.route("/search_product_by_id", methods=["GET"])
def search_product_by_id():
    """Search for a product by the `id` query parameter."""
    outcome = get_service().get_product(request.args.get("id"))
    if not outcome.ok:
        return error_response(outcome)
    return jsonify(product_to_json(outcome.value))


@products_bp.route("/products_add", methods=["POST"])
def products_add():
    """Add a new product from name, description, price, stock and imageUrl."""
    body = json_body()
    outcome = get_service().add_product(
        name=sanitize_text(body.get("name")),
        description=sanitize_text(body.get("description")),
        price=body.get("price"),
        stock=body.get("stock"),
        image_url=sanitize_text(body.get("imageUrl")),
    )
    if not outcome.ok:
        return error_response(outcome)
    return jsonify(product_to_json(outcome.value)), 201


@products_bp.route("/delete_product", methods=["DELETE"])
def delete_product():
    """Delete the product named by the `id` query parameter."""
    outcome = get_service().delete_product(request.args.get("id"))
    if not outcome.ok:
        return error_response(outcome)
    return message_response(outcome)
