"""
Logging setup for the order fulfillment backend.

Request threads contend for the same storage locks, so every line carries
the thread name. Lines logged for one order also carry its id, which lets
a placement be followed from journal marker to cart clear.

    2026-10-17 10:15:30 INFO     [MainThread] order_fulfillment.app: Application initialized successfully
    2026-10-17 10:15:31 INFO     [Thread-3] order_fulfillment.services.checkout_service: Added 5 x 1 to cart
    2026-10-17 10:15:32 INFO     [Thread-4] order_fulfillment.order [order o1]: Order persisted

Usage:
    setup_logging(log_level=logging.INFO, enable_file_logging=False)

    logger = get_logger(__name__)
    get_order_logger("o1").info("Order persisted")

Order loggers are adapters over one shared "order" logger, so arbitrary
caller-chosen order ids never create new Logger objects.
"""

import logging
import sys
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional


APP_NAMESPACE = "order_fulfillment"

LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(thread_name)s] %(name)s%(order_context)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Rotation: 10 MB per file, 5 backups
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5


class ContextFilter(logging.Filter):
    """
    Annotates records with the fields LOG_FORMAT expects.

    - thread_name: name of the emitting thread
    - order_context: " [order <id>]" for records logged through an order
      logger, otherwise empty
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.thread_name = threading.current_thread().name
        order_id = getattr(record, "order_id", None)
        record.order_context = f" [order {order_id}]" if order_id else ""
        return True


def _attach(
    logger: logging.Logger,
    handler: logging.Handler,
    level: int,
    formatter: logging.Formatter,
    context: ContextFilter,
) -> None:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(context)
    logger.addHandler(handler)


def _rotating(path: Path) -> RotatingFileHandler:
    return RotatingFileHandler(
        filename=path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8"
    )


def setup_logging(
    app_name: str = APP_NAMESPACE,
    log_level: int = logging.INFO,
    log_dir: Optional[Path] = None,
    enable_file_logging: bool = True,
) -> logging.Logger:
    """
    Configure the application logger tree.

    Always logs to stdout. With file logging enabled, also writes
    `<app_name>.log` and an ERROR-only `<app_name>_error.log` under
    `log_dir` (default ./logs beside this file). Calling again replaces
    the previous handlers, since the app factory runs once per test.

    Returns:
        The configured top-level logger
    """
    root = logging.getLogger(app_name)
    root.setLevel(log_level)
    root.propagate = False
    root.handlers.clear()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    context = ContextFilter()

    _attach(root, logging.StreamHandler(sys.stdout), log_level, formatter, context)

    if enable_file_logging:
        log_dir = Path(log_dir) if log_dir else Path(__file__).parent / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)
        app_log = log_dir / f"{app_name}.log"
        _attach(root, _rotating(app_log), log_level, formatter, context)
        _attach(root, _rotating(log_dir / f"{app_name}_error.log"), logging.ERROR, formatter, context)
        root.info(f"File logging enabled: {app_log}")

    root.info(f"Logging configured at level {logging.getLevelName(log_level)}")
    return root


def get_logger(name: str) -> logging.Logger:
    """Module logger under the application namespace (pass __name__)."""
    if not name.startswith(APP_NAMESPACE):
        name = f"{APP_NAMESPACE}.{name}"
    return logging.getLogger(name)


def get_order_logger(order_id: str) -> logging.LoggerAdapter:
    """Logger that tags each record with `order_id`."""
    return logging.LoggerAdapter(get_logger("order"), {"order_id": order_id})
