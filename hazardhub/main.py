"""
Spot Hazard Hub - FastAPI Application Entry Point

Community hazard reporting and deletion consensus for a crowdsourced spot map.

DESIGN PRINCIPLES:
- Reports and confirmations come from independent users; nobody confirms their own report
- Danger levels are always derived from active alerts, never edited by hand
- Deleting a spot needs a quorum and a strict majority
- The subsystem trusts the actor id it is given; it does not authenticate
"""

import sys
import traceback
import logging
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from hazardhub.core.logging_config import configure_logging
from hazardhub.core.settings import settings
from hazardhub.routes import admin, alerts, health, proposals
from hazardhub.services.hazard_service import get_hazard_service

logger = logging.getLogger(__name__)


# Initialize FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Community hazard reporting and deletion consensus for crowdsourced spots",
    debug=settings.DEBUG
)


# Global exception handler: storage failures and bugs end up here
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch all unhandled exceptions and log them with full traceback."""
    sys.stderr.write("=" * 80 + "\n")
    sys.stderr.write("🔥 GLOBAL EXCEPTION HANDLER CAUGHT EXCEPTION\n")
    sys.stderr.write(f"Path: {request.url.path}\n")
    sys.stderr.write(f"Method: {request.method}\n")
    sys.stderr.write("=" * 80 + "\n")
    sys.stderr.write("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))
    sys.stderr.write("=" * 80 + "\n")
    sys.stderr.flush()

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": f"Internal server error: {str(exc)}"}
    )


# Pydantic validation error handler
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Catch Pydantic validation errors and log them."""
    logger.warning(f"Validation error on {request.method} {request.url.path}: {exc.errors()}")

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": exc.errors()}
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Application lifecycle events
@app.on_event("startup")
async def startup_event():
    """
    Initialize services on application startup.
    Currently: logging and the configured storage backend
    """
    configure_logging(settings.LOG_LEVEL)
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    try:
        get_hazard_service()
    except Exception as e:
        logger.error(f"Storage initialization failed ({settings.STORAGE_BACKEND}): {e}")
        logger.warning("The app will start but hazard operations may fail.")


@app.on_event("shutdown")
async def shutdown_event():
    """
    Cleanup on application shutdown.
    """
    logger.info(f"Shutting down {settings.APP_NAME}")


# Include routers
app.include_router(health.router)
app.include_router(alerts.router)
app.include_router(proposals.router)
app.include_router(admin.router)


# Root endpoint
@app.get("/")
async def root():
    """
    Root endpoint - API information.
    """
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "docs": "/docs",
        "health": "/health",
        "thresholds": {
            "confirm": settings.CONFIRM_THRESHOLD,
            "delete": settings.DELETE_THRESHOLD,
            "vote_quorum": settings.VOTE_QUORUM,
        },
    }
