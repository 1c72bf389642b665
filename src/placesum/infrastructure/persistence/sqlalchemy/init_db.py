"""Database initialization utilities."""

import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncEngine

# Import models to register with Base.metadata
import placesum.infrastructure.persistence.sqlalchemy.models  # noqa: F401
from placesum.infrastructure.persistence.sqlalchemy.database import (
    create_engine_from_settings,
)
from placesum.infrastructure.persistence.sqlalchemy.models.base import Base
from placesum_config.settings import get_settings

logger = logging.getLogger(__name__)


async def create_tables(engine: AsyncEngine) -> None:
    """
    Create all database tables (idempotent).

    Uses SQLAlchemy's create_all() which only creates missing tables.
    Existing tables and their data are never modified or deleted.
    """
    logger.info("Ensuring all database tables exist...")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Database schema is up to date (missing tables created if needed)")


async def drop_tables(engine: AsyncEngine) -> None:
    """
    Drop all database tables (USE WITH CAUTION!).

    This is primarily for testing and development reset scenarios.
    """
    logger.warning("Dropping all database tables...")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    logger.info("Database tables dropped successfully")


async def _init_database() -> None:
    settings = get_settings()
    engine = create_engine_from_settings(settings)

    logger.info("Initializing database...")
    try:
        await create_tables(engine)
    finally:
        await engine.dispose()

    logger.info("Database initialized successfully!")


def db_init() -> None:
    """Initialize database (create tables)."""
    logging.basicConfig(level=logging.INFO)
    asyncio.run(_init_database())
