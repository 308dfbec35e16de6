"""
Persistence port and its backends.
"""

from .base import KeyValueStore, StaleRecordError, StorageError
from .json_file import JsonFileStore
from .memory import InMemoryStore
from .registry import create_store, get_store

__all__ = [
    "KeyValueStore",
    "StaleRecordError",
    "StorageError",
    "JsonFileStore",
    "InMemoryStore",
    "create_store",
    "get_store",
]
