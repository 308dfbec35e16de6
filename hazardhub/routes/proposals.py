"""
Deletion proposal endpoints - propose and vote.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
import logging

from hazardhub.models.outcomes import VoteOutcome
from hazardhub.models.proposal import DeletionProposal, ProposeDeletionRequest, VoteRequest
from hazardhub.routes.errors import raise_for_failure
from hazardhub.services.hazard_service import get_hazard_service
from hazardhub.utils.identity import current_actor_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/proposals", tags=["Proposals"])


@router.post("", response_model=DeletionProposal, status_code=status.HTTP_201_CREATED)
async def propose_deletion(request: ProposeDeletionRequest, actor_id: str = Depends(current_actor_id)):
    """Open a deletion proposal for a spot (at most one open proposal per spot)."""
    result = get_hazard_service().propose_deletion(
        spot_id=request.spot_id,
        proposed_by=actor_id,
        alert_id=request.alert_id,
    )
    raise_for_failure(result)
    return result.value


@router.get("/pending", response_model=List[DeletionProposal])
async def list_pending_proposals():
    return get_hazard_service().get_pending_deletion_proposals()


@router.get("/spot/{spot_id}", response_model=Optional[DeletionProposal])
async def get_spot_proposal(spot_id: str):
    """The open proposal of a spot, or null."""
    return get_hazard_service().get_deletion_proposal(spot_id)


@router.get("/{proposal_id}", response_model=DeletionProposal)
async def get_proposal(proposal_id: str):
    proposal = get_hazard_service().get_proposal(proposal_id)
    if proposal is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "proposal_not_found", "message": f"Proposal {proposal_id} not found"},
        )
    return proposal


@router.post("/{proposal_id}/vote", response_model=VoteOutcome)
async def vote_on_proposal(proposal_id: str, request: VoteRequest, actor_id: str = Depends(current_actor_id)):
    """
    Vote approve or reject.

    Voting again replaces your earlier vote. Once the quorum is reached the
    strict majority decides; a tie keeps the proposal open.
    """
    try:
        result = get_hazard_service().vote_on_proposal(proposal_id, actor_id, request.choice)
        raise_for_failure(result)
        return result.value
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to vote on proposal {proposal_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to vote on proposal: {str(e)}"
        )
