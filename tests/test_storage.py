"""Persistence backends: filters, compare-and-swap, JSON durability."""
import json
from unittest.mock import MagicMock

import pytest

from hazardhub.storage.base import StaleRecordError, StorageError
from hazardhub.storage.json_file import JsonFileStore
from hazardhub.storage.memory import InMemoryStore
from hazardhub.storage.registry import create_store


@pytest.fixture(params=["memory", "json"])
def backend(request, tmp_path):
    if request.param == "memory":
        return InMemoryStore()
    return JsonFileStore(str(tmp_path / "data"))


class TestKeyValueContract:

    def test_get_missing_returns_none(self, backend):
        assert backend.get("alerts", "nope") is None

    def test_list_applies_equality_filters(self, backend):
        backend.put("alerts", "a", {"id": "a", "spot_id": "s1", "status": "pending"})
        backend.put("alerts", "b", {"id": "b", "spot_id": "s1", "status": "confirmed"})
        backend.put("alerts", "c", {"id": "c", "spot_id": "s2", "status": "pending"})

        ids = [r["id"] for r in backend.list("alerts", {"spot_id": "s1", "status": "pending"})]
        assert ids == ["a"]
        assert len(backend.list("alerts")) == 3

    def test_create_refuses_existing_record(self, backend):
        backend.put("alerts", "a", {"id": "a", "version": 1}, expected_version=0)
        with pytest.raises(StaleRecordError):
            backend.put("alerts", "a", {"id": "a", "version": 1}, expected_version=0)

    def test_compare_and_swap(self, backend):
        backend.put("alerts", "a", {"id": "a", "version": 1}, expected_version=0)
        backend.put("alerts", "a", {"id": "a", "version": 2}, expected_version=1)

        with pytest.raises(StaleRecordError) as excinfo:
            backend.put("alerts", "a", {"id": "a", "version": 2}, expected_version=1)
        assert excinfo.value.found == 2
        assert backend.get("alerts", "a")["version"] == 2

    def test_delete(self, backend):
        backend.put("alerts", "a", {"id": "a"})
        backend.delete("alerts", "a")
        backend.delete("alerts", "a")
        assert backend.get("alerts", "a") is None

    def test_ping(self, backend):
        assert backend.ping()


class TestJsonFileStore:

    def test_survives_reopen(self, tmp_path):
        JsonFileStore(str(tmp_path)).put("alerts", "a", {"id": "a", "spot_id": "s1"})
        reopened = JsonFileStore(str(tmp_path))
        assert reopened.get("alerts", "a") == {"id": "a", "spot_id": "s1"}

    def test_one_blob_per_collection(self, tmp_path):
        store = JsonFileStore(str(tmp_path))
        store.put("hazard_alerts", "a", {"id": "a"})
        store.put("deletion_proposals", "p", {"id": "p"})

        assert json.loads((tmp_path / "hazard_alerts.json").read_text()) == {"a": {"id": "a"}}
        assert (tmp_path / "deletion_proposals.json").exists()

    def test_corrupt_blob_raises(self, tmp_path):
        (tmp_path / "alerts.json").write_text("{not json")
        with pytest.raises(StorageError):
            JsonFileStore(str(tmp_path)).list("alerts")


class TestFirestorePing:

    def test_ping_queries_the_backend(self):
        from hazardhub.storage.firestore_store import FirestoreStore

        db = MagicMock()
        db.collections.return_value = iter([MagicMock(), MagicMock()])

        assert FirestoreStore(db).ping() is True
        db.collections.assert_called_once()

    def test_ping_propagates_unreachable_backend(self):
        from hazardhub.storage.firestore_store import FirestoreStore

        db = MagicMock()
        db.collections.side_effect = ConnectionError("firestore unreachable")

        with pytest.raises(ConnectionError):
            FirestoreStore(db).ping()


def test_create_store_rejects_unknown_backend():
    assert isinstance(create_store("memory"), InMemoryStore)
    with pytest.raises(ValueError):
        create_store("redis")
