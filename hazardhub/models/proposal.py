"""
Pydantic models for deletion proposals and their votes.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List
from enum import Enum

from hazardhub.models.alert import Reason
from hazardhub.models.danger import DangerLevel


class ProposalStatus(str, Enum):
    """
    PROPOSED → APPROVED | REJECTED by vote; APPROVED → DELETED once the spot
    catalog has physically removed the spot.
    """
    PROPOSED = "proposed"
    APPROVED = "approved"
    REJECTED = "rejected"
    DELETED = "deleted"


class VoteChoice(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


class VoteTally(BaseModel):
    """Two disjoint voter-id sets."""
    approve: List[str] = Field(default_factory=list)
    reject: List[str] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.approve) + len(self.reject)

    def cast(self, voter_id: str, choice: VoteChoice) -> "VoteTally":
        """Return a new tally with the voter's previous vote replaced by `choice`."""
        approve = [v for v in self.approve if v != voter_id]
        reject = [v for v in self.reject if v != voter_id]
        if choice == VoteChoice.APPROVE:
            approve.append(voter_id)
        else:
            reject.append(voter_id)
        return VoteTally(approve=approve, reject=reject)


class DeletionProposal(BaseModel):
    """Stored proposal to remove a spot from the catalog."""
    id: str = Field(..., description="Proposal ID (deletion_<ms>_<suffix>)")
    spot_id: str
    triggering_alert_id: Optional[str] = None
    proposed_by: str
    status: ProposalStatus = ProposalStatus.PROPOSED
    danger_level: DangerLevel
    danger_reasons: List[Reason] = Field(default_factory=list)
    votes: VoteTally = Field(default_factory=VoteTally)
    created_at: datetime
    updated_at: datetime
    version: int = Field(default=1, ge=1)


class ProposeDeletionRequest(BaseModel):
    spot_id: str = Field(..., max_length=200)
    alert_id: Optional[str] = None


class VoteRequest(BaseModel):
    """Choice stays a plain string so invalid votes get the business error, not a 422."""
    choice: str

    class Config:
        json_schema_extra = {"example": {"choice": "approve"}}
