"""
Admin endpoints - moderator-level transitions.

SCOPE OF ADMIN:
✅ Dismiss an alert (it stops counting everywhere)
✅ Resolve an alert (the danger has been addressed)
✅ Record that the catalog deleted an approved spot
✅ Republish a spot's danger level after outside changes
✅ Read aggregate statistics

❌ NOT cast votes on behalf of users
❌ NOT delete spots (the catalog owns that)
"""

from fastapi import APIRouter, HTTPException, status
import logging

from hazardhub.models.alert import Alert, ModerationRequest
from hazardhub.models.danger import DangerAssessment, DangerStats
from hazardhub.models.proposal import DeletionProposal
from hazardhub.routes.errors import raise_for_failure
from hazardhub.services.hazard_service import get_hazard_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post("/alerts/{alert_id}/dismiss", response_model=Alert)
async def dismiss_alert(alert_id: str, request: ModerationRequest):
    result = get_hazard_service().dismiss_alert(alert_id, request.note)
    raise_for_failure(result)
    logger.info(f"✅ Admin dismissed alert {alert_id}")
    return result.value


@router.post("/alerts/{alert_id}/resolve", response_model=Alert)
async def resolve_alert(alert_id: str, request: ModerationRequest):
    result = get_hazard_service().resolve_alert(alert_id, request.note)
    raise_for_failure(result)
    logger.info(f"✅ Admin resolved alert {alert_id}")
    return result.value


@router.post("/proposals/{proposal_id}/deleted", response_model=DeletionProposal)
async def mark_spot_deleted(proposal_id: str):
    """Called once the catalog has removed the spot of an approved proposal."""
    result = get_hazard_service().mark_spot_deleted(proposal_id)
    raise_for_failure(result)
    return result.value


@router.post("/spots/{spot_id}/refresh", response_model=DangerAssessment)
async def refresh_spot_danger(spot_id: str):
    result = get_hazard_service().refresh_danger_level(spot_id)
    raise_for_failure(result)
    return result.value


@router.get("/stats", response_model=DangerStats)
async def get_danger_stats():
    try:
        return get_hazard_service().get_danger_stats()
    except Exception as e:
        logger.error(f"Failed to compute danger stats: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to compute danger stats: {str(e)}"
        )


@router.delete("/danger-data")
async def clear_danger_data():
    """Delete every alert and proposal (reset for testing/demo environments)."""
    result = get_hazard_service().clear_all_danger_data()
    return result.value
