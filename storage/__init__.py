"""
Storage backends for the order fulfillment backend.

- base: Abstract collaborator interfaces (Catalog, CartStore, OrderStore,
  PlacementJournal) and the Storage bundle
- file_store: JSON files in a data directory
- document_store: MongoDB collections

open_storage() picks the backend named by the STORAGE_BACKEND setting.
"""

from typing import Any, Mapping

from .base import Catalog, CartStore, OrderStore, PlacementJournal, Storage
from .file_store import FileStorage, open_file_storage
from .document_store import DocumentStorage, open_document_storage

FILE_BACKEND = "file"
DOCUMENT_BACKEND = "document"

__all__ = [
    "Catalog",
    "CartStore",
    "OrderStore",
    "PlacementJournal",
    "Storage",
    "FileStorage",
    "DocumentStorage",
    "open_file_storage",
    "open_document_storage",
    "open_storage",
    "FILE_BACKEND",
    "DOCUMENT_BACKEND",
]


def open_storage(config: Mapping[str, Any]) -> Storage:
    """
    Open the backend selected by configuration.

    Args:
        config: Mapping with STORAGE_BACKEND and the backend's settings
            (DATA_DIR for files; MONGO_URI and MONGO_DATABASE for documents)

    Returns:
        Ready-to-use Storage

    Raises:
        ValueError: If STORAGE_BACKEND names no known backend
    """
    backend = str(config.get("STORAGE_BACKEND", FILE_BACKEND)).lower()

    if backend == FILE_BACKEND:
        return open_file_storage(config["DATA_DIR"])
    if backend == DOCUMENT_BACKEND:
        return open_document_storage(config["MONGO_URI"], config["MONGO_DATABASE"])

    raise ValueError(
        f"Unknown STORAGE_BACKEND '{backend}' "
        f"(expected '{FILE_BACKEND}' or '{DOCUMENT_BACKEND}')"
    )
