"""
Alert endpoints - report and confirm hazards, read danger levels.
"""

from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
import logging

from hazardhub.models.alert import Alert, ConfirmAlertRequest, ReasonInfo, ReportAlertRequest
from hazardhub.models.danger import DangerAssessment, SpotDangerSummary
from hazardhub.models.outcomes import ConfirmationOutcome
from hazardhub.routes.errors import raise_for_failure
from hazardhub.services.hazard_service import get_hazard_service
from hazardhub.utils.identity import current_actor_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/alerts", tags=["Alerts"])


@router.get("/reasons", response_model=List[ReasonInfo])
async def list_reasons():
    """Every reportable reason with its fixed severity."""
    return get_hazard_service().get_danger_reasons()


@router.post("", response_model=Alert, status_code=status.HTTP_201_CREATED)
async def report_alert(request: ReportAlertRequest, actor_id: str = Depends(current_actor_id)):
    """
    Report a hazard on a spot.

    This endpoint:
    1. Rejects a second active report of the same reason by the same user
    2. Stores a PENDING alert
    3. Auto-confirms once enough independent users reported the same reason
    4. Republishes the spot's danger level
    """
    try:
        logger.info(f"📝 POST /alerts - spot={request.spot_id}, reason={request.reason}, by={actor_id}")
        result = get_hazard_service().report_alert(
            spot_id=request.spot_id,
            reporter_id=actor_id,
            reason=request.reason,
            details=request.details,
        )
        raise_for_failure(result)
        return result.value
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"❌ POST /alerts - Report failed: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Alert report failed: {str(e)}"
        )


@router.post("/confirm", response_model=ConfirmationOutcome)
async def confirm_alert(request: ConfirmAlertRequest, actor_id: str = Depends(current_actor_id)):
    """
    Confirm an alert reported by someone else.

    Without alert_id the most recently reported PENDING alert of the spot is
    confirmed. Crossing the deletion threshold opens a deletion proposal.
    """
    try:
        result = get_hazard_service().confirm_alert(
            spot_id=request.spot_id,
            confirmer_id=actor_id,
            alert_id=request.alert_id,
        )
        raise_for_failure(result)
        return result.value
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"❌ POST /alerts/confirm - Confirmation failed: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Alert confirmation failed: {str(e)}"
        )


@router.get("/dangerous-spots", response_model=List[SpotDangerSummary])
async def list_dangerous_spots():
    """Every spot with at least one active alert."""
    return get_hazard_service().get_dangerous_spots()


@router.get("/spot/{spot_id}", response_model=List[Alert])
async def get_spot_alerts(spot_id: str):
    return get_hazard_service().get_spot_alerts(spot_id)


@router.get("/spot/{spot_id}/danger", response_model=DangerAssessment)
async def get_spot_danger(spot_id: str):
    """Current danger level of a spot, recomputed from its active alerts."""
    return get_hazard_service().get_spot_danger_level(spot_id)


@router.get("/{alert_id}", response_model=Alert)
async def get_alert(alert_id: str):
    alert = get_hazard_service().get_alert(alert_id)
    if alert is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "alert_not_found", "message": f"Alert {alert_id} not found"},
        )
    return alert
