"""
Voting Engine - deletion proposals and majority resolution.

DESIGN PRINCIPLES:
- At most one open (PROPOSED) proposal per spot
- One vote per voter; voting again replaces the earlier vote
- No decision before quorum, and a tie never resolves
"""

from datetime import datetime
from typing import Callable, Optional, Union
import logging

from hazardhub.models.danger import DangerAssessment
from hazardhub.models.outcomes import VoteOutcome
from hazardhub.models.proposal import DeletionProposal, ProposalStatus, VoteChoice
from hazardhub.models.result import CommandResult, ErrorCode
from hazardhub.services.proposal_store import ProposalStore
from hazardhub.utils.clock import utcnow
from hazardhub.utils.ids import generate_proposal_id

logger = logging.getLogger(__name__)


class VotingEngine:

    def __init__(
        self,
        proposals: ProposalStore,
        quorum: int = 5,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.proposals = proposals
        self.quorum = quorum
        self.clock = clock

    def propose(
        self,
        spot_id: Optional[str],
        triggering_alert_id: Optional[str],
        proposed_by: str,
        assessment: DangerAssessment,
    ) -> CommandResult:
        """
        Open a deletion proposal, snapshotting the spot's current danger.

        Fails with ALREADY_PROPOSED (carrying the open proposal) when the
        spot already has one.
        """
        if not spot_id or not spot_id.strip():
            return CommandResult.fail(ErrorCode.MISSING_SPOT_ID)

        existing = self.proposals.get_active_for_spot(spot_id)
        if existing is not None:
            return CommandResult.fail(
                ErrorCode.ALREADY_PROPOSED,
                f"Spot {spot_id} already has open proposal {existing.id}",
                value=existing,
            )

        now = self.clock()
        proposal = self.proposals.create(DeletionProposal(
            id=generate_proposal_id(),
            spot_id=spot_id,
            triggering_alert_id=triggering_alert_id,
            proposed_by=proposed_by,
            status=ProposalStatus.PROPOSED,
            danger_level=assessment.level,
            danger_reasons=list(assessment.reasons),
            created_at=now,
            updated_at=now,
        ))
        logger.info(
            f"Deletion proposal {proposal.id} opened for spot {spot_id} "
            f"(level {proposal.danger_level.value}, by {proposed_by})"
        )
        return CommandResult.ok(proposal)

    def vote(
        self,
        proposal_id: Optional[str],
        voter_id: str,
        choice: Union[VoteChoice, str, None],
    ) -> CommandResult:
        if not proposal_id:
            return CommandResult.fail(ErrorCode.MISSING_PROPOSAL_ID)

        try:
            parsed = VoteChoice(choice)
        except ValueError:
            return CommandResult.fail(ErrorCode.INVALID_VOTE, f"Vote must be approve or reject, got '{choice}'")

        proposal = self.proposals.get(proposal_id)
        if proposal is None:
            return CommandResult.fail(ErrorCode.PROPOSAL_NOT_FOUND)
        if proposal.status != ProposalStatus.PROPOSED:
            return CommandResult.fail(ErrorCode.PROPOSAL_CLOSED, f"Proposal is {proposal.status.value}")

        votes = proposal.votes.cast(voter_id, parsed)
        status = self._decide(len(votes.approve), len(votes.reject))

        saved = self.proposals.save(proposal.model_copy(update={
            "votes": votes,
            "status": status,
            "updated_at": self.clock(),
        }))
        resolved = status != ProposalStatus.PROPOSED
        logger.info(
            f"Vote {parsed.value} by {voter_id} on {saved.id}: "
            f"{len(votes.approve)} approve / {len(votes.reject)} reject → {status.value}"
        )
        return CommandResult.ok(VoteOutcome(proposal=saved, resolved=resolved))

    def _decide(self, approve: int, reject: int) -> ProposalStatus:
        if approve + reject < self.quorum:
            return ProposalStatus.PROPOSED
        if approve > reject:
            return ProposalStatus.APPROVED
        if reject > approve:
            return ProposalStatus.REJECTED
        return ProposalStatus.PROPOSED

    def mark_deleted(self, proposal_id: Optional[str]) -> CommandResult:
        """The catalog removed the spot of an approved proposal."""
        if not proposal_id:
            return CommandResult.fail(ErrorCode.MISSING_PROPOSAL_ID)

        proposal = self.proposals.get(proposal_id)
        if proposal is None:
            return CommandResult.fail(ErrorCode.PROPOSAL_NOT_FOUND)
        if proposal.status != ProposalStatus.APPROVED:
            return CommandResult.fail(
                ErrorCode.PROPOSAL_NOT_APPROVED,
                f"Only approved proposals can be marked deleted (proposal is {proposal.status.value})",
            )

        saved = self.proposals.save(proposal.model_copy(update={
            "status": ProposalStatus.DELETED,
            "updated_at": self.clock(),
        }))
        logger.info(f"Proposal {saved.id}: spot {saved.spot_id} deleted")
        return CommandResult.ok(saved)
