"""
Spot catalog port.

The catalog owns the spot record; this subsystem only writes the derived
danger fields and flags approved deletions. Physical deletion stays with the
catalog.
"""

from abc import ABC, abstractmethod
from typing import List
import logging

from hazardhub.models.alert import Reason
from hazardhub.models.danger import DangerLevel
from hazardhub.storage.base import KeyValueStore
from hazardhub.utils.clock import utcnow

logger = logging.getLogger(__name__)


class SpotCatalog(ABC):

    @abstractmethod
    def set_danger_level(self, spot_id: str, level: DangerLevel, reasons: List[Reason]) -> None:
        raise NotImplementedError

    @abstractmethod
    def flag_for_deletion(self, spot_id: str, proposal_id: str) -> None:
        raise NotImplementedError


class StoreSpotCatalog(SpotCatalog):
    """Writes danger fields onto spot records in the shared store (merge, never replace)."""

    def __init__(self, store: KeyValueStore, collection: str = "spots"):
        self.store = store
        self.collection = collection

    def _merge(self, spot_id: str, fields: dict) -> None:
        record = self.store.get(self.collection, spot_id) or {"id": spot_id}
        record.update(fields)
        self.store.put(self.collection, spot_id, record)

    def set_danger_level(self, spot_id: str, level: DangerLevel, reasons: List[Reason]) -> None:
        self._merge(spot_id, {
            "danger_level": level.value,
            "danger_reasons": [r.value for r in reasons],
            "danger_updated_at": utcnow().isoformat(),
        })
        logger.debug(f"Spot {spot_id} danger level → {level.value}")

    def flag_for_deletion(self, spot_id: str, proposal_id: str) -> None:
        self._merge(spot_id, {
            "deletion_approved": True,
            "deletion_proposal_id": proposal_id,
        })
        logger.info(f"Spot {spot_id} flagged for deletion (proposal {proposal_id})")
