"""
Analytics Endpoints - Aggregate usage figures.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from chimera.core.database import get_db
from chimera.models.responses import AnalyticsOverviewResponse
from chimera.services.analytics import get_overview


router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get(
    "/overview",
    response_model=AnalyticsOverviewResponse,
    summary="Overview",
    description="Agent and task counts, task success rate and analyses per flow"
)
async def analytics_overview(db: Session = Depends(get_db)) -> AnalyticsOverviewResponse:
    return AnalyticsOverviewResponse(**get_overview(db))
