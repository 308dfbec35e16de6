"""
Alert Store - durable collection of hazard alerts.

Pure CRUD over the persistence port. Every save writes a new model instance
with version + 1 and compares against the version the caller read.
"""

from typing import List, Optional
import logging

from hazardhub.models.alert import Alert
from hazardhub.storage.base import KeyValueStore

logger = logging.getLogger(__name__)


class AlertStore:

    def __init__(self, store: KeyValueStore, collection: str = "hazard_alerts"):
        self.store = store
        self.collection = collection

    def get(self, alert_id: str) -> Optional[Alert]:
        data = self.store.get(self.collection, alert_id)
        return Alert.model_validate(data) if data else None

    def list_for_spot(self, spot_id: str) -> List[Alert]:
        """Alerts of one spot, oldest first."""
        records = self.store.list(self.collection, {"spot_id": spot_id})
        return _by_creation([Alert.model_validate(r) for r in records])

    def list_all(self) -> List[Alert]:
        return _by_creation([Alert.model_validate(r) for r in self.store.list(self.collection)])

    def create(self, alert: Alert) -> Alert:
        self.store.put(self.collection, alert.id, alert.model_dump(mode="json"), expected_version=0)
        logger.debug(f"Alert {alert.id} created for spot {alert.spot_id}")
        return alert

    def save(self, alert: Alert) -> Alert:
        """Persist a mutated copy; `alert.version` must be the version that was read."""
        saved = alert.model_copy(update={"version": alert.version + 1})
        self.store.put(self.collection, saved.id, saved.model_dump(mode="json"), expected_version=alert.version)
        return saved

    def delete_all(self) -> int:
        records = self.store.list(self.collection)
        for record in records:
            self.store.delete(self.collection, record["id"])
        return len(records)


def _by_creation(alerts: List[Alert]) -> List[Alert]:
    # sorted() is stable, so equal timestamps keep store order
    return sorted(alerts, key=lambda a: a.created_at)
