"""
Configuration for the order fulfillment backend.

Values come from environment variables, optionally loaded from a .env
file. STORAGE_BACKEND selects "file" (JSON files in DATA_DIR) or
"document" (MongoDB at MONGO_URI).
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env early so environment variables are available for Config class
load_dotenv()

# Base directory (where this file lives)
BASE_DIR = Path(__file__).resolve().parent


def env_flag(name: str, default: bool) -> bool:
    """Read a boolean environment variable ("1", "true", "yes", "on")."""
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Default configuration for the Flask application."""

    ENVIRONMENT = os.environ.get("FLASK_ENV", "development")
    DEBUG = env_flag("FLASK_DEBUG", False)
    TESTING = False

    # HTTP port for `python app.py`
    PORT = int(os.environ.get("PORT", "3000"))

    # ==========================================================================
    # Storage
    # ==========================================================================
    # STORAGE_BACKEND: "file" or "document"
    # DATA_DIR:        directory of product.json, cart.json, order.json
    # MONGO_URI / MONGO_DATABASE: document backend connection
    # ==========================================================================
    STORAGE_BACKEND = os.environ.get("STORAGE_BACKEND", "file")
    DATA_DIR = os.environ.get("DATA_DIR", str(BASE_DIR / "data"))
    MONGO_URI = os.environ.get("MONGO_URI", "mongodb://localhost:27017")
    MONGO_DATABASE = os.environ.get("MONGO_DATABASE", "order_fulfillment")

    # ==========================================================================
    # Business rules
    # ==========================================================================
    # RESERVE_CART_STOCK: count what is already in the cart against stock at
    #   checkout. Off reproduces the per-request check, which lets repeated
    #   checkouts of one product exceed its stock.
    # STRICT_STATUS_TRANSITIONS: only allow Pending -> Shipped -> Delivered
    #   and Pending -> Cancelled. Off accepts any status string.
    # SEED_CATALOG: insert the four sample products into an empty catalog.
    # ==========================================================================
    RESERVE_CART_STOCK = env_flag("RESERVE_CART_STOCK", True)
    STRICT_STATUS_TRANSITIONS = env_flag("STRICT_STATUS_TRANSITIONS", False)
    SEED_CATALOG = env_flag("SEED_CATALOG", False)


class ProductionConfig(Config):
    """Production configuration."""
    ENVIRONMENT = "production"
    DEBUG = False
    TESTING = False


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    TESTING = False
    SEED_CATALOG = env_flag("SEED_CATALOG", True)


class TestingConfig(Config):
    """Testing configuration."""
    ENVIRONMENT = "testing"
    DEBUG = False
    TESTING = True
    STORAGE_BACKEND = "file"
    SEED_CATALOG = False
    RESERVE_CART_STOCK = True
    STRICT_STATUS_TRANSITIONS = False
