"""
Health Check Endpoints - Application health and status monitoring.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from chimera.core.config import get_settings, Settings
from chimera.core.database import get_db
from chimera.core.dependencies import get_llm_client
from chimera.models.responses import HealthResponse
from chimera.services.llm import GeminiClient

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="Check if the API is running and healthy"
)
async def health_check(
    settings: Settings = Depends(get_settings)
) -> HealthResponse:
    """
    Basic health check endpoint.

    Returns:
        HealthResponse with status and version info
    """
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        environment=settings.environment,
    )


@router.get(
    "/ready",
    summary="Readiness Check",
    description="Check if the API is ready to accept requests"
)
async def readiness_check(
    settings: Settings = Depends(get_settings),
    db: Session = Depends(get_db),
    llm: GeminiClient = Depends(get_llm_client),
) -> dict:
    """
    Readiness check for container orchestration.

    Verifies that the database answers and the LLM has credentials.
    """
    checks = {
        "api": True,
        "config_loaded": settings is not None,
    }

    try:
        db.execute(text("SELECT 1"))
        checks["database"] = True
    except SQLAlchemyError as e:
        logger.warning("Database readiness check failed: %s", e)
        checks["database"] = False

    checks["llm_configured"] = llm.is_configured

    return {
        "ready": all(checks.values()),
        "checks": checks,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@router.get(
    "/live",
    summary="Liveness Check",
    description="Simple liveness probe"
)
async def liveness_check() -> dict:
    """Just returns OK if the server is running."""
    return {"status": "alive"}
