"""FastAPI application factory.

Creates and configures the FastAPI application with its routers and
exception handlers.

API Versioning:
    All API endpoints are versioned under /api/v1/ prefix.
    The health check endpoint remains unversioned at /health.
"""

import logging
import sys
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI, Request
from sqlalchemy.ext.asyncio import AsyncEngine

from placesum.infrastructure.persistence.sqlalchemy.init_db import create_tables
from placesum.presentation.api.dependencies import (
    get_engine,
    get_place_summary_service,
)
from placesum.presentation.api.exception_handlers import setup_exception_handlers
from placesum.presentation.api.routers import places_router
from placesum.presentation.api.schemas import HealthResponse
from placesum_config.settings import Settings, get_settings


@lru_cache(maxsize=1)
def _configure_logging() -> None:
    """Configure application logging.

    - Console output with timestamps and module names
    - Configurable log level for placesum modules (from settings)
    - WARNING level for noisy third-party libraries
    """
    settings = get_settings()
    log_level_str = settings.log_level.upper()
    log_level = getattr(logging, log_level_str, logging.INFO)

    log_format = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt=date_format,
        stream=sys.stdout,
        force=True,  # Override any existing config
    )

    logging.getLogger("placesum").setLevel(log_level)

    # Quiet down noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"
API_V1_PREFIX = "/api/v1"

OPENAPI_TAGS = [
    {
        "name": "Places",
        "description": """AI summaries of map reviews for a place.

**Freshness levels (`status`):**
- `cached`: served from a fresh cache entry
- `fresh`: crawled and summarized for this request
- `stale`: cache entry expired, a background refresh was triggered
- `degraded`: the crawl failed, older data is shown
- `minimal`: no data available, a placeholder is shown

Queries that differ only in word order or branch suffix share one entry
("스타벅스 강남점" and "강남 스타벅스").
""",
    },
    {
        "name": "Health",
        "description": "Service health monitoring endpoints.",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    logger.info("Starting placesum API v%s...", API_VERSION)
    engine = get_engine()
    await _init_database_schema(engine)
    service = get_place_summary_service()
    app.state.place_summary_service = service
    yield

    logger.info("Shutting down placesum API...")
    # Let in-flight background revalidations finish before closing the pool
    await service.aclose()
    await engine.dispose()
    logger.info("Database connections closed")


async def _init_database_schema(engine: AsyncEngine) -> None:
    """Initialize database schema (if not existent) and verify connectivity."""
    try:
        await create_tables(engine)
    except ConnectionRefusedError:
        logger.critical("Could not connect to the database.")
        raise SystemExit(1) from None


def create_v1_router() -> APIRouter:
    """Create the v1 API router with all endpoints."""
    v1_router = APIRouter()
    v1_router.include_router(places_router, prefix="/places", tags=["Places"])
    return v1_router


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Parameters
    ----------
    settings
        Optional settings override for testing.

    Returns
    -------
    Configured FastAPI application instance.
    """
    # Configure logging on first app creation (not on module import)
    _configure_logging()

    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title=f"{settings.app_name} API",
        description="Cached, AI-generated review summaries for places.",
        version=API_VERSION,
        docs_url="/docs" if settings.api_debug else None,
        redoc_url="/redoc" if settings.api_debug else None,
        openapi_url="/openapi.json" if settings.api_debug else None,
        lifespan=lifespan,
        openapi_tags=OPENAPI_TAGS,
    )

    setup_exception_handlers(app)

    app.include_router(create_v1_router(), prefix=API_V1_PREFIX)

    @app.get("/health", tags=["Health"], response_model=HealthResponse)
    async def health_check(request: Request) -> HealthResponse:
        """Health check endpoint (unversioned for load balancers)."""
        service = getattr(request.app.state, "place_summary_service", None)
        pending = service.pending_revalidations if service else 0
        return HealthResponse(
            status="healthy",
            version=API_VERSION,
            pending_revalidations=pending,
        )

    return app


# Application instance for uvicorn
app = create_app()
