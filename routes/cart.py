"""
Cart routes.

Handles:
- POST /checkout - Add a product to the cart ({"id", "quantity"})
- GET  /cart     - Current cart lines and total
"""

from flask import Blueprint, jsonify

from .responses import (
    cart_line_to_json,
    error_response,
    get_service,
    json_body,
    message_response,
)

cart_bp = Blueprint("cart", __name__)


@cart_bp.route("/checkout", methods=["POST"])
def checkout():
    """Add items to the cart after checking stock."""
    body = json_body()
    outcome = get_service().checkout(body.get("id"), body.get("quantity"))
    if not outcome.ok:
        return error_response(outcome)
    return message_response(outcome, {"item": cart_line_to_json(outcome.value)})


@cart_bp.route("/cart", methods=["GET"])
def view_cart():
    """Show pending cart lines."""
    outcome = get_service().view_cart()
    if not outcome.ok:
        return error_response(outcome)
    view = outcome.value
    return jsonify({
        "items": [cart_line_to_json(line) for line in view.lines],
        "totalCost": float(view.total_cost),
    })
