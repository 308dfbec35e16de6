"""
Proposal Store - durable collection of deletion proposals.
"""

from typing import List, Optional
import logging

from hazardhub.models.proposal import DeletionProposal, ProposalStatus
from hazardhub.storage.base import KeyValueStore

logger = logging.getLogger(__name__)


class ProposalStore:

    def __init__(self, store: KeyValueStore, collection: str = "deletion_proposals"):
        self.store = store
        self.collection = collection

    def get(self, proposal_id: str) -> Optional[DeletionProposal]:
        data = self.store.get(self.collection, proposal_id)
        return DeletionProposal.model_validate(data) if data else None

    def list_for_spot(self, spot_id: str) -> List[DeletionProposal]:
        records = self.store.list(self.collection, {"spot_id": spot_id})
        return _by_creation([DeletionProposal.model_validate(r) for r in records])

    def list_all(self) -> List[DeletionProposal]:
        return _by_creation([DeletionProposal.model_validate(r) for r in self.store.list(self.collection)])

    def get_active_for_spot(self, spot_id: str) -> Optional[DeletionProposal]:
        """The PROPOSED proposal of a spot, if any (at most one exists)."""
        records = self.store.list(
            self.collection, {"spot_id": spot_id, "status": ProposalStatus.PROPOSED.value}
        )
        proposals = _by_creation([DeletionProposal.model_validate(r) for r in records])
        return proposals[0] if proposals else None

    def list_pending(self) -> List[DeletionProposal]:
        records = self.store.list(self.collection, {"status": ProposalStatus.PROPOSED.value})
        return _by_creation([DeletionProposal.model_validate(r) for r in records])

    def create(self, proposal: DeletionProposal) -> DeletionProposal:
        self.store.put(self.collection, proposal.id, proposal.model_dump(mode="json"), expected_version=0)
        logger.debug(f"Proposal {proposal.id} created for spot {proposal.spot_id}")
        return proposal

    def save(self, proposal: DeletionProposal) -> DeletionProposal:
        saved = proposal.model_copy(update={"version": proposal.version + 1})
        self.store.put(
            self.collection, saved.id, saved.model_dump(mode="json"), expected_version=proposal.version
        )
        return saved

    def delete_all(self) -> int:
        records = self.store.list(self.collection)
        for record in records:
            self.store.delete(self.collection, record["id"])
        return len(records)


def _by_creation(proposals: List[DeletionProposal]) -> List[DeletionProposal]:
    return sorted(proposals, key=lambda p: p.created_at)
