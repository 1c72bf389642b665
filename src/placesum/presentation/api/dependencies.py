"""FastAPI dependency injection for the placesum API.

Provides dependencies for:
- Database engine and session factory (process-wide singletons)
- The place summary service
"""

import logging
from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from placesum.application.services import PlaceSummaryService
from placesum.infrastructure.persistence.sqlalchemy.database import (
    create_engine_from_settings,
    create_session_maker,
)
from placesum.infrastructure.persistence.sqlalchemy.repositories import (
    build_place_summary_service,
)
from placesum_config.settings import get_settings

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Database Engine & Session (Singleton)
# -----------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_engine() -> AsyncEngine:
    """
    Get the shared async database engine (singleton).

    The engine manages the connection pool and is reused across all requests.

    Returns
    -------
    AsyncEngine instance
    """
    return create_engine_from_settings(get_settings())


@lru_cache(maxsize=1)
def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """
    Get the shared async session maker (singleton).

    Repositories open one short session per operation from this factory.
    """
    return create_session_maker(get_engine())


# -----------------------------------------------------------------------------
# Services
# -----------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_place_summary_service() -> PlaceSummaryService:
    """
    Get the shared place summary service (singleton).

    The service owns the background revalidation tasks, so one instance
    lives for the whole process and is closed in the app lifespan.
    """
    return build_place_summary_service(get_session_maker(), get_settings())


# Type alias for injected service
PlaceService = Annotated[PlaceSummaryService, Depends(get_place_summary_service)]
