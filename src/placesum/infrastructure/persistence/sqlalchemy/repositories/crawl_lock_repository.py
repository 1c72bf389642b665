"""SQLAlchemy implementation of CrawlLockRepository.

Mutual exclusion comes from the primary key on ``cache_locks.lock_key``:
inserting a row either succeeds (lock acquired) or fails with an integrity
error (someone else holds it). Rows carry an expiry so that a crashed
holder cannot block a key forever.
"""

from __future__ import annotations

import asyncio
import logging
import random
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Optional

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from placesum.domain.places.repositories import CrawlLockRepository
from placesum.domain.shared.time import utc_now
from placesum.infrastructure.persistence.sqlalchemy.models import CacheLockModel
from placesum.infrastructure.persistence.sqlalchemy.repositories._utils import (
    translate_store_errors,
)

logger = logging.getLogger(__name__)


class CrawlLockRepositorySQLAlchemy(CrawlLockRepository):
    """Distributed crawl lock backed by a unique-key table."""

    def __init__(  # NOQA: PLR0913
        self,
        session_factory: async_sessionmaker[AsyncSession],
        ttl_seconds: float = 30.0,
        wait_timeout_seconds: float = 30.0,
        initial_wait_seconds: float = 0.5,
        max_wait_seconds: float = 3.0,
        cleanup_probability: float = 0.1,
        random_source: Callable[[], float] = random.random,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._session_factory = session_factory
        self._ttl = timedelta(seconds=ttl_seconds)
        self._wait_timeout = wait_timeout_seconds
        self._initial_wait = initial_wait_seconds
        self._max_wait = max_wait_seconds
        self._cleanup_probability = cleanup_probability
        self._random = random_source
        self._sleep = sleep
        self._clock = clock

    async def acquire_lock(self, lock_key: str, owner_id: str) -> bool:
        if self._random() < self._cleanup_probability:
            await self.cleanup_expired_locks()

        with translate_store_errors("acquire_lock"):
            if await self._try_insert(lock_key, owner_id):
                logger.debug("Lock %s acquired by %s", lock_key, owner_id)
                return True

            # The holder may have died; take over an expired row once
            if await self._delete_if_expired(lock_key):
                logger.info("Reclaimed expired lock %s", lock_key)
                return await self._try_insert(lock_key, owner_id)

        return False

    async def release_lock(self, lock_key: str, owner_id: Optional[str] = None) -> None:
        stmt = delete(CacheLockModel).where(CacheLockModel.lock_key == lock_key)
        if owner_id is not None:
            stmt = stmt.where(CacheLockModel.request_id == owner_id)

        with translate_store_errors("release_lock"):
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                await session.commit()

        if owner_id is not None and result.rowcount == 0:
            logger.debug("Lock %s not held by %s, nothing released", lock_key, owner_id)

    async def wait_for_lock_release(self, lock_key: str) -> bool:
        """
        Poll with exponential backoff until the lock disappears.

        Waits 0.5 s, 1 s, 2 s, 3 s, 3 s, ... (with default settings) and
        gives up once the accumulated wait reaches the timeout. A timed
        out waiter never deletes a live lock.
        """
        delay = self._initial_wait
        waited = 0.0

        while waited < self._wait_timeout:
            step = min(delay, self._wait_timeout - waited)
            await self._sleep(step)
            waited += step

            if not await self.is_locked(lock_key):
                return True

            delay = min(delay * 2, self._max_wait)

        return False

    async def is_locked(self, lock_key: str) -> bool:
        with translate_store_errors("is_locked"):
            async with self._session_factory() as session:
                lock = await session.get(CacheLockModel, lock_key)

            if lock is None:
                return False

            if lock.is_expired(self._clock()):
                await self._delete_if_expired(lock_key)
                return False

        return True

    async def cleanup_expired_locks(self) -> int:
        stmt = delete(CacheLockModel).where(CacheLockModel.expires_at <= self._clock())
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                await session.commit()
        except Exception as e:
            logger.error("Failed to cleanup expired locks: %s", e)
            return 0

        deleted = result.rowcount or 0
        if deleted:
            logger.info("Cleaned up %d expired lock(s)", deleted)
        return deleted

    async def _try_insert(self, lock_key: str, owner_id: str) -> bool:
        now = self._clock()
        async with self._session_factory() as session:
            session.add(
                CacheLockModel(
                    lock_key=lock_key,
                    request_id=owner_id,
                    expires_at=now + self._ttl,
                    created_at=now,
                )
            )
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                return False
        return True

    async def _delete_if_expired(self, lock_key: str) -> bool:
        stmt = delete(CacheLockModel).where(
            CacheLockModel.lock_key == lock_key,
            CacheLockModel.expires_at <= self._clock(),
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            await session.commit()
        return result.rowcount > 0
