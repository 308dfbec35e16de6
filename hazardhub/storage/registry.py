import logging
from typing import Optional

from hazardhub.core.settings import settings
from .base import KeyValueStore
from .json_file import JsonFileStore
from .memory import InMemoryStore

logger = logging.getLogger(__name__)

_store_instance: Optional[KeyValueStore] = None


def create_store(backend: str) -> KeyValueStore:
    """
    Build a store for the named backend.

    - "memory": process-local, lost on restart
    - "json": one JSON blob per collection under JSON_STORE_DIR
    - "firestore": Firestore through firebase-admin
    """
    backend = (backend or "json").lower()

    if backend == "memory":
        return InMemoryStore()
    if backend == "json":
        return JsonFileStore(settings.JSON_STORE_DIR)
    if backend == "firestore":
        from hazardhub.config.firebase import get_db
        from .firestore_store import FirestoreStore
        return FirestoreStore(get_db())

    raise ValueError(f"Unknown STORAGE_BACKEND '{backend}'. Expected memory, json or firestore.")


def get_store() -> KeyValueStore:
    """Resolve the active store based on settings (singleton)."""
    global _store_instance
    if _store_instance is None:
        _store_instance = create_store(settings.STORAGE_BACKEND)
        logger.info(f"Storage backend initialized: {settings.STORAGE_BACKEND}")
    return _store_instance
