from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when the persistence layer itself is broken."""


class StaleRecordError(StorageError):
    """Raised when a compare-and-swap write finds a newer version stored."""

    def __init__(self, collection: str, record_id: str, expected: int, found: int):
        self.collection = collection
        self.record_id = record_id
        self.expected = expected
        self.found = found
        super().__init__(
            f"Stale write to {collection}/{record_id}: expected version {expected}, found {found}"
        )


class KeyValueStore(ABC):
    """
    Abstract persistence port.

    Contract:
    - Records are JSON-compatible dicts keyed by (collection, id).
    - get() returns None when the record does not exist.
    - list() applies equality filters on top-level fields; order follows
      insertion where the backend can preserve it.
    - put() with expected_version performs a compare-and-swap against the
      stored record's "version" field (a missing record counts as version 0)
      and raises StaleRecordError on mismatch.
    - Backend failures propagate; there is no local fallback.
    """

    @abstractmethod
    def get(self, collection: str, record_id: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    def list(self, collection: str, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    def put(
        self,
        collection: str,
        record_id: str,
        record: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, collection: str, record_id: str) -> None:
        raise NotImplementedError

    def ping(self) -> bool:
        """Lightweight connectivity check used by /health/db."""
        return True


def matches(record: Dict[str, Any], filters: Optional[Dict[str, Any]]) -> bool:
    if not filters:
        return True
    return all(record.get(field) == value for field, value in filters.items())


def check_version(
    collection: str,
    record_id: str,
    current: Optional[Dict[str, Any]],
    expected_version: Optional[int],
) -> None:
    if expected_version is None:
        return
    found = int((current or {}).get("version", 0))
    if found != expected_version:
        logger.warning(f"CAS conflict on {collection}/{record_id}: expected {expected_version}, found {found}")
        raise StaleRecordError(collection, record_id, expected_version, found)
