"""
Flask route blueprints for the order fulfillment backend.

This module contains all route handlers organized by resource:
- products: Catalog listing, lookup, add and delete
- cart: Checkout and cart view
- orders: Placement, status updates, deletion and lookup

Routes hold no business rules: they read the request, call the
FulfillmentService and map the Outcome to a JSON response.
"""

from .products import products_bp
from .cart import cart_bp
from .orders import orders_bp

__all__ = [
    "products_bp",
    "cart_bp",
    "orders_bp",
    "register_blueprints",
]


def register_blueprints(app):
    """
    Register all blueprints with the Flask app.

    Args:
        app: Flask application instance
    """
    app.register_blueprint(products_bp)
    app.register_blueprint(cart_bp)
    app.register_blueprint(orders_bp)
