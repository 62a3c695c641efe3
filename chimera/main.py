"""
ChimeraGPT - FastAPI Application Entry Point

Usage:
    uvicorn chimera.main:app --reload

Or:
    python -m chimera.main
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from chimera.core.config import get_settings
from chimera.core.database import init_db
from chimera.core.dependencies import close_clients
from chimera.api.routes import (
    health_router,
    repo_router,
    studio_router,
    agents_router,
    marketplace_router,
    analytics_router,
)
from chimera.api.middleware.error_handler import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler,
)

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events:
    - Startup: configure logging, create database tables
    - Shutdown: close the GitHub HTTP client
    """
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("Starting %s v%s", settings.app_name, settings.app_version)
    logger.info("Environment: %s", settings.environment)

    init_db()

    yield

    logger.info("Shutting down application...")
    await close_clients()


def create_app() -> FastAPI:
    """
    Application factory function.

    Creates and configures the FastAPI application.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="""
## ChimeraGPT API

Point AI agents at any GitHub repository and orchestrate your own.

### Features
- **Repository Insight**: metadata, file tree, README and package.json
- **Agent Flows**: code audit, README enhancement and Q&A, app ideation
- **Studio**: framework design, persona conversations, video, web tasks, free-form goals
- **Orchestrator**: agent registry with a prioritised task queue
- **Marketplace**: publish, install and rate agent templates
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register exception handlers
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    # Register routers
    for router in (
        health_router,
        repo_router,
        studio_router,
        agents_router,
        marketplace_router,
        analytics_router,
    ):
        app.include_router(router, prefix=settings.api_prefix)

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint with API information."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "docs": "/docs",
            "health": f"{settings.api_prefix}/health"
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "chimera.main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )
