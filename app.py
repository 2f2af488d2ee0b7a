"""
Order Fulfillment Backend - Flask Application Entry Point.

This is a slim app factory that:
1. Loads configuration (.env + config classes)
2. Configures thread-aware logging
3. Opens the configured storage backend (fail-fast)
4. Builds the FulfillmentService and recovers any interrupted placement
5. Registers route blueprints and JSON error handlers

ARCHITECTURE:
    Request threads (Flask)
    └── FulfillmentService (Outcome-returning surface)
        ├── CatalogReader / CartLedger / CheckoutService
        ├── OrderAssembler / OrderLifecycleManager
        └── Storage (file or document backend), guarded by ResourceLocks
"""

from __future__ import annotations

import atexit
import logging
from typing import Any, Mapping, Optional

from flask import Flask, jsonify

from logging_config import setup_logging, get_logger
from core.exceptions import StorageFailureError
from services.fulfillment import FulfillmentService
from storage import Storage, open_storage
from routes import register_blueprints


# Module logger (configured after setup_logging)
logger = get_logger(__name__)


def create_app(
    config_object: Any = "config.Config",
    config_overrides: Optional[Mapping[str, Any]] = None,
    storage: Optional[Storage] = None,
) -> Flask:
    """
    Application factory - creates and configures the Flask app.

    FAIL-FAST: If the storage backend cannot be opened, the app does not
    start.

    Args:
        config_object: Import path or class passed to app.config.from_object
        config_overrides: Extra settings applied after config_object
        storage: Pre-opened storage to use instead of open_storage()
            (the caller keeps ownership and closes it)

    Returns:
        Configured Flask application

    Raises:
        StorageFailureError: If the storage backend cannot be opened
        ValueError: If STORAGE_BACKEND names an unknown backend
    """
    app = Flask(__name__)
    app.config.from_object(config_object)
    if config_overrides:
        app.config.update(config_overrides)
    app.json.sort_keys = False

    # Configure logging
    log_level = logging.DEBUG if app.config.get("DEBUG") else logging.INFO
    enable_file_logging = app.config.get("ENVIRONMENT") == "production"

    root_logger = setup_logging(log_level=log_level, enable_file_logging=enable_file_logging)
    app.logger.handlers = root_logger.handlers
    app.logger.setLevel(log_level)

    logger.info(f"Starting order fulfillment backend in {app.config.get('ENVIRONMENT')} mode")

    # =========================================================================
    # STORAGE INITIALIZATION (FAIL-FAST)
    # =========================================================================

    owns_storage = storage is None
    if storage is None:
        try:
            storage = open_storage(app.config)
        except (StorageFailureError, ValueError) as e:
            logger.error(f"FATAL: Cannot start application - {e}")
            raise

    app.config["STORAGE"] = storage

    # =========================================================================
    # SERVICES INITIALIZATION
    # =========================================================================

    service = FulfillmentService.from_storage(
        storage,
        reserve_cart_stock=app.config.get("RESERVE_CART_STOCK", True),
        strict_status_transitions=app.config.get("STRICT_STATUS_TRANSITIONS", False),
    )
    app.config["FULFILLMENT_SERVICE"] = service

    recovered = service.recover()
    if not recovered.ok:
        logger.error(f"FATAL: Cannot recover interrupted order placement - {recovered.message}")
        raise StorageFailureError("recover", "placement journal", recovered.message)
    if recovered.value:
        logger.warning(f"Recovered interrupted placement of order {recovered.value}")

    if app.config.get("SEED_CATALOG"):
        seeded = service.seed_catalog()
        if not seeded.ok:
            logger.error(f"Catalog seeding failed: {seeded.message}")

    # =========================================================================
    # CLEANUP REGISTRATION
    # =========================================================================

    if owns_storage:
        def cleanup():
            """Cleanup on application shutdown."""
            logger.info("Shutting down...")
            storage.close()
            logger.info("Shutdown complete")

        atexit.register(cleanup)

    register_blueprints(app)

    # =========================================================================
    # ERROR HANDLERS
    # =========================================================================

    @app.errorhandler(404)
    def handle_not_found(e):
        return jsonify({"error": "Not Found"}), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(e):
        return jsonify({"error": "Method Not Allowed"}), 405

    @app.errorhandler(500)
    def handle_server_error(e):
        logger.error(f"500 error: {e}", exc_info=True)
        return jsonify({"error": "Internal Server Error"}), 500

    logger.info("Application initialized successfully")
    return app


if __name__ == "__main__":
    app = create_app()
    app.run(port=app.config["PORT"], debug=app.config.get("DEBUG", False))
