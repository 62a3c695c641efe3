"""
API Routes - FastAPI route modules.
"""

from chimera.api.routes.health import router as health_router
from chimera.api.routes.repo import router as repo_router
from chimera.api.routes.studio import router as studio_router
from chimera.api.routes.agents import router as agents_router
from chimera.api.routes.marketplace import router as marketplace_router
from chimera.api.routes.analytics import router as analytics_router

__all__ = [
    "health_router",
    "repo_router",
    "studio_router",
    "agents_router",
    "marketplace_router",
    "analytics_router",
]
