"""
Health check endpoints.
Used for monitoring, deployment readiness checks, and basic connectivity tests.
"""

from fastapi import APIRouter, HTTPException
from hazardhub.core.settings import settings
from hazardhub.services.hazard_service import get_hazard_service
from datetime import datetime, timezone


router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check():
    """
    Basic health check endpoint.
    Returns 200 if service is running.
    """
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@router.get("/db")
async def database_health():
    """
    Storage connectivity check for the configured backend.
    """
    try:
        connected = get_hazard_service().store.ping()
    except Exception as e:
        raise HTTPException(
            status_code=503,
            detail=f"Storage connection failed: {str(e)}"
        )

    if not connected:
        raise HTTPException(status_code=503, detail="Storage backend is not reachable")

    return {
        "status": "healthy",
        "backend": settings.STORAGE_BACKEND,
        "connected": True,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }
