"""
JSON file store - one JSON blob per collection.

Each collection lives in "<base_dir>/<collection>.json" as an object keyed by
record id. Writes go through a temporary file and os.replace so a crash never
leaves a half-written blob behind.
"""

import json
import os
import threading
from typing import Any, Dict, List, Optional
import logging

from .base import KeyValueStore, StorageError, check_version, matches

logger = logging.getLogger(__name__)


class JsonFileStore(KeyValueStore):

    def __init__(self, base_dir: str):
        self.base_dir = base_dir
        self._lock = threading.RLock()
        os.makedirs(base_dir, exist_ok=True)
        logger.info(f"[STORAGE] JSON file store at {os.path.abspath(base_dir)}")

    def _path(self, collection: str) -> str:
        return os.path.join(self.base_dir, f"{collection}.json")

    def _load(self, collection: str) -> Dict[str, Dict[str, Any]]:
        path = self._path(collection)
        if not os.path.exists(path):
            return {}
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Failed to read collection '{collection}' from {path}: {e}") from e
        if not isinstance(data, dict):
            raise StorageError(f"Collection '{collection}' in {path} is not a JSON object")
        return data

    def _dump(self, collection: str, data: Dict[str, Dict[str, Any]]) -> None:
        path = self._path(collection)
        tmp_path = f"{path}.tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, path)
        except OSError as e:
            raise StorageError(f"Failed to write collection '{collection}' to {path}: {e}") from e

    def get(self, collection: str, record_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            return self._load(collection).get(record_id)

    def list(self, collection: str, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        with self._lock:
            return [r for r in self._load(collection).values() if matches(r, filters)]

    def put(
        self,
        collection: str,
        record_id: str,
        record: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> None:
        with self._lock:
            data = self._load(collection)
            check_version(collection, record_id, data.get(record_id), expected_version)
            data[record_id] = record
            self._dump(collection, data)

    def delete(self, collection: str, record_id: str) -> None:
        with self._lock:
            data = self._load(collection)
            if data.pop(record_id, None) is not None:
                self._dump(collection, data)

    def ping(self) -> bool:
        return os.path.isdir(self.base_dir) and os.access(self.base_dir, os.W_OK)
