"""
Pytest fixtures for infrastructure persistence tests.

Each test gets a fresh SQLite database file. The pool holds a single
connection so that concurrent sessions queue instead of tripping over
SQLite's file lock.
"""

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from placesum.infrastructure.persistence.sqlalchemy.models import Base


class FakeClock:
    """Settable UTC clock for freshness and expiry tests."""

    def __init__(self, now: datetime | None = None):
        self.now = now or datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest_asyncio.fixture
async def async_engine(tmp_path):
    """Async engine on a per-test SQLite file with all tables created."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path}/placesum-test.db",
        echo=False,
        pool_size=1,
        max_overflow=0,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(async_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
