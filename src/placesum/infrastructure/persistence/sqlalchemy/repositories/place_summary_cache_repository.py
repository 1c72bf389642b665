"""SQLAlchemy implementation of PlaceSummaryCacheRepository."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional
from uuid import UUID

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from placesum.domain.places.repositories import PlaceSummaryCacheRepository
from placesum.domain.places.value_objects import (
    CacheLookup,
    CacheRecord,
    PlaceSummary,
    Sentiment,
)
from placesum.domain.shared.time import ensure_tz_aware, utc_now
from placesum.infrastructure.persistence.sqlalchemy.models import PlaceSummaryModel
from placesum.infrastructure.persistence.sqlalchemy.repositories._utils import (
    ensure_uuid,
    translate_store_errors,
)

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL = timedelta(days=7)
DEFAULT_REVALIDATION_LEASE = timedelta(minutes=5)


class PlaceSummaryCacheRepositorySQLAlchemy(PlaceSummaryCacheRepository):
    """
    SQLAlchemy implementation of PlaceSummaryCacheRepository.

    Every operation opens its own session and commits before returning, so
    coordination state (``is_revalidating``) is visible to concurrent
    requests and other processes immediately.

    A revalidation claim is a lease: once ``revalidation_started_at`` is older
    than ``revalidation_lease`` the record is reported as not revalidating
    and the next request may claim it again.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        ttl: timedelta = DEFAULT_CACHE_TTL,
        revalidation_lease: timedelta = DEFAULT_REVALIDATION_LEASE,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._session_factory = session_factory
        self._ttl = ttl
        self._revalidation_lease = revalidation_lease
        self._clock = clock

    async def get_by_normalized_name(self, normalized_key: str) -> CacheLookup:
        record = await self.get_any(normalized_key)
        return CacheLookup.from_record(record, now=self._clock())

    async def get_any(self, normalized_key: str) -> Optional[CacheRecord]:
        with translate_store_errors("get"):
            async with self._session_factory() as session:
                model = await self._find_model(session, normalized_key)
                if model is None:
                    return None
                return self._model_to_domain(model, now=self._clock())

    async def touch(self, record_id: UUID) -> None:
        stmt = (
            update(PlaceSummaryModel)
            .where(PlaceSummaryModel.id == ensure_uuid(record_id))
            .values(
                request_count=PlaceSummaryModel.request_count + 1,
                last_requested_at=self._clock(),
            )
        )
        with translate_store_errors("touch"):
            await self._execute_update(stmt)

    async def mark_for_revalidation(self, record_id: UUID) -> bool:
        # Conditional update: only one concurrent caller can flip the flag
        # or take over a claim whose lease has run out
        now = self._clock()
        stmt = (
            update(PlaceSummaryModel)
            .where(
                PlaceSummaryModel.id == ensure_uuid(record_id),
                or_(
                    PlaceSummaryModel.is_revalidating.is_(False),
                    PlaceSummaryModel.revalidation_started_at.is_(None),
                    PlaceSummaryModel.revalidation_started_at
                    <= now - self._revalidation_lease,
                ),
            )
            .values(is_revalidating=True, revalidation_started_at=now)
        )
        with translate_store_errors("mark_for_revalidation"):
            rowcount = await self._execute_update(stmt)
        return rowcount == 1

    async def finish_revalidation(self, record_id: UUID, data: PlaceSummary) -> None:
        now = self._clock()
        stmt = (
            update(PlaceSummaryModel)
            .where(PlaceSummaryModel.id == ensure_uuid(record_id))
            .values(
                summary=data.summary,
                pros=list(data.pros),
                cons=list(data.cons),
                sentiment=data.sentiment,
                review_count=data.review_count,
                source_url=data.source_url,
                cached_at=now,
                expires_at=now + self._ttl,
                is_revalidating=False,
                revalidation_started_at=None,
                last_requested_at=now,
            )
        )
        with translate_store_errors("finish_revalidation"):
            await self._execute_update(stmt)

    async def reset_revalidation(self, record_id: UUID) -> None:
        stmt = (
            update(PlaceSummaryModel)
            .where(PlaceSummaryModel.id == ensure_uuid(record_id))
            .values(is_revalidating=False, revalidation_started_at=None)
        )
        with translate_store_errors("reset_revalidation"):
            await self._execute_update(stmt)

    async def save(self, summary: PlaceSummary, normalized_key: str) -> CacheRecord:
        with translate_store_errors("save"):
            try:
                return await self._upsert(summary, normalized_key)
            except IntegrityError:
                # A concurrent insert won the unique key; update its row
                logger.debug("Insert race on '%s', retrying as update", normalized_key)
                return await self._upsert(summary, normalized_key)

    async def _upsert(self, summary: PlaceSummary, normalized_key: str) -> CacheRecord:
        now = self._clock()
        async with self._session_factory() as session:
            model = await self._find_model(session, normalized_key)
            if model is None:
                model = PlaceSummaryModel(
                    place_name_normalized=normalized_key,
                    place_name_original=summary.place_name_original,
                    request_count=1,
                )
                session.add(model)

            model.summary = summary.summary
            model.pros = list(summary.pros)
            model.cons = list(summary.cons)
            model.sentiment = summary.sentiment
            model.review_count = summary.review_count
            model.source_url = summary.source_url
            model.cached_at = now
            model.expires_at = now + self._ttl
            model.is_revalidating = False
            model.revalidation_started_at = None
            model.last_requested_at = now

            await session.flush()
            record = self._model_to_domain(model, now=now)
            await session.commit()
            return record

    async def _execute_update(self, stmt) -> int:
        async with self._session_factory() as session:
            result = await session.execute(
                stmt.execution_options(synchronize_session=False)
            )
            await session.commit()
            return result.rowcount

    @staticmethod
    async def _find_model(
        session: AsyncSession,
        normalized_key: str,
    ) -> Optional[PlaceSummaryModel]:
        stmt = select(PlaceSummaryModel).where(
            PlaceSummaryModel.place_name_normalized == normalized_key,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    def _claim_is_active(self, model: PlaceSummaryModel, now: datetime) -> bool:
        if not model.is_revalidating or model.revalidation_started_at is None:
            return False
        started_at = ensure_tz_aware(model.revalidation_started_at)
        return started_at > now - self._revalidation_lease

    def _model_to_domain(self, model: PlaceSummaryModel, now: datetime) -> CacheRecord:
        data = PlaceSummary(
            place_name_original=model.place_name_original,
            normalized_key=model.place_name_normalized,
            summary=model.summary,
            pros=tuple(model.pros or ()),
            cons=tuple(model.cons or ()),
            sentiment=Sentiment.parse(model.sentiment),
            review_count=model.review_count or 0,
            source_url=model.source_url or "",
        )
        return CacheRecord(
            id=model.id,
            data=data,
            cached_at=ensure_tz_aware(model.cached_at),
            expires_at=ensure_tz_aware(model.expires_at),
            is_revalidating=self._claim_is_active(model, now),
            request_count=model.request_count or 0,
            last_requested_at=(
                ensure_tz_aware(model.last_requested_at)
                if model.last_requested_at
                else None
            ),
        )
