import copy
import threading
from typing import Any, Dict, List, Optional

from .base import KeyValueStore, check_version, matches


class InMemoryStore(KeyValueStore):
    """Process-local store for tests and local development."""

    def __init__(self):
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._lock = threading.Lock()

    def get(self, collection: str, record_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            record = self._collections.get(collection, {}).get(record_id)
            return copy.deepcopy(record) if record is not None else None

    def list(self, collection: str, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        with self._lock:
            records = self._collections.get(collection, {}).values()
            return [copy.deepcopy(r) for r in records if matches(r, filters)]

    def put(
        self,
        collection: str,
        record_id: str,
        record: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> None:
        with self._lock:
            docs = self._collections.setdefault(collection, {})
            check_version(collection, record_id, docs.get(record_id), expected_version)
            docs[record_id] = copy.deepcopy(record)

    def delete(self, collection: str, record_id: str) -> None:
        with self._lock:
            self._collections.get(collection, {}).pop(record_id, None)
