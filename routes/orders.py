"""
Order routes.

Handles:
- POST   /order                 - Place an order from the cart
- PUT    /order_placed          - Update an order's status
- DELETE /delete_order          - Delete an order (?id= or JSON body)
- GET    /orders, /orders/<id>  - Read placed orders
"""

from flask import Blueprint, jsonify, request

from .responses import (
    error_response,
    get_service,
    json_body,
    message_response,
    order_to_json,
    sanitize_text,
)

orders_bp = Blueprint("orders", __name__)


@orders_bp.route("/order", methods=["POST"])
def place_order():
    """
    Place an order.

    Success is reported only once the order is stored and the cart has
    been cleared.
    """
    body = json_body()
    outcome = get_service().place_order(
        body.get("id"),
        body.get("date"),
        sanitize_text(body.get("address")),
    )
    if not outcome.ok:
        return error_response(outcome)
    return message_response(outcome, {"order": order_to_json(outcome.value)})


@orders_bp.route("/order_placed", methods=["PUT"])
def update_order_status():
    """Update the status of an order."""
    body = json_body()
    outcome = get_service().update_order_status(
        body.get("id"),
        body.get("status"),
    )
    if not outcome.ok:
        return error_response(outcome)
    return message_response(outcome, {"updatedOrder": order_to_json(outcome.value)})


@orders_bp.route("/delete_order", methods=["DELETE"])
@orders_bp.route("/delete-order", methods=["DELETE"])
def delete_order():
    """Delete an order; the id comes from the query string or the JSON body."""
    order_id = request.args.get("id") or json_body().get("id")
    outcome = get_service().delete_order(order_id)
    if not outcome.ok:
        return error_response(outcome)
    return message_response(outcome)


@orders_bp.route("/orders", methods=["GET"])
def list_orders():
    outcome = get_service().list_orders()
    if not outcome.ok:
        return error_response(outcome)
    return jsonify([order_to_json(order) for order in outcome.value])


@orders_bp.route("/orders/<order_id>", methods=["GET"])
def get_order(order_id: str):
    outcome = get_service().get_order(order_id)
    if not outcome.ok:
        return error_response(outcome)
    return jsonify(order_to_json(outcome.value))
