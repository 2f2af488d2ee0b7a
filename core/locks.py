"""
Per-resource mutual exclusion for shared storage.

Each named resource (catalog, cart, orders) gets one re-entrant lock.
Operations that touch several resources acquire them in sorted name
order, so two operations can never wait on each other in a cycle.

Usage:
    locks = ResourceLocks()

    with locks.hold(CART, ORDERS):
        # read-modify-write on cart and orders
        ...
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List

from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

CATALOG = "catalog"
CART = "cart"
ORDERS = "orders"


class ResourceLocks:
    """
    Registry of named re-entrant locks.

    Thread Safety:
        - The registry itself is guarded by _registry_lock
        - Locks are created lazily and never removed
    """

    def __init__(self):
        self._locks: Dict[str, threading.RLock] = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, name: str) -> threading.RLock:
        with self._registry_lock:
            lock = self._locks.get(name)
            if lock is None:
                lock = threading.RLock()
                self._locks[name] = lock
            return lock

    @contextmanager
    def hold(self, *names: str) -> Iterator[None]:
        """
        Hold the locks for all given resources for the duration of the block.

        Args:
            *names: Resource names; duplicates are ignored

        Yields:
            None, with every requested lock held
        """
        ordered = sorted(set(names))
        acquired: List[threading.RLock] = []
        try:
            for name in ordered:
                lock = self._lock_for(name)
                lock.acquire()
                acquired.append(lock)
            logger.debug(f"Holding locks: {', '.join(ordered)}")
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()
