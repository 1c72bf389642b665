"""Application service answering place summary lookups.

The service walks a five-level degradation ladder:

1. Cached: the record is fresh, return it
2. Stale: the record expired, return it and refresh it in the background
3. Fresh: no record, crawl and summarize under a distributed lock
4. Degraded: the crawl failed, return whatever older data exists
5. Minimal: nothing exists, return a placeholder

Coordination between concurrent requests and processes lives entirely in
the stores: a conditional update elects the single background revalidator
and a unique-key lock row elects the single cold crawler.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Optional, Set
from urllib.parse import quote

from placesum.application.dtos import PlaceSummaryResponse, ResponseStatus
from placesum.application.ports import CacheHitType, ErrorStage
from placesum.application.services.metrics_tracker import (
    MetricsTracker,
    MetricsTrackerFactory,
    generate_request_id,
)
from placesum.domain.places.exceptions import (
    CacheStoreError,
    CrawlFailedError,
    InvalidPlaceNameError,
    LockTimeoutError,
    SummarizationFailedError,
)
from placesum.domain.places.repositories import crawl_lock_key
from placesum.domain.places.services import normalize_place_name
from placesum.domain.places.value_objects import CacheRecord, PlaceSummary

if TYPE_CHECKING:
    from uuid import UUID

    from placesum.application.factories import RepositoryFactory
    from placesum.domain.places.ports import ReviewCrawler, ReviewSummarizer
    from placesum.domain.places.repositories import (
        CrawlLockRepository,
        PlaceSummaryCacheRepository,
    )
    from placesum_config.settings import Settings

logger = logging.getLogger(__name__)

REVALIDATING_MESSAGE = "최신 데이터를 확인 중입니다. 잠시 후 다시 검색해주세요."
BEING_UPDATED_MESSAGE = "데이터를 업데이트하고 있습니다. 잠시 후 다시 검색해주세요."
DEGRADED_WARNING = "최신 데이터를 가져올 수 없어 이전 데이터를 보여드립니다"
UNAVAILABLE_SUMMARY = "현재 리뷰 정보를 불러올 수 없습니다"
INVALID_NAME_SUMMARY = "올바른 장소명을 입력해주세요"

DEFAULT_PLACEHOLDER_URL_TEMPLATE = "https://map.naver.com/v5/search/{query}"


class PlaceSummaryService:
    """Cache orchestrator for place summaries."""

    def __init__(  # NOQA: PLR0913
        self,
        cache_repository: PlaceSummaryCacheRepository,
        lock_repository: CrawlLockRepository,
        crawler: ReviewCrawler,
        summarizer: ReviewSummarizer,
        metrics_factory: Optional[MetricsTrackerFactory] = None,
        placeholder_url_template: str = DEFAULT_PLACEHOLDER_URL_TEMPLATE,
    ):
        self._cache_repo = cache_repository
        self._lock_repo = lock_repository
        self._crawler = crawler
        self._summarizer = summarizer
        self._metrics_factory = metrics_factory or MetricsTrackerFactory()
        self._placeholder_url_template = placeholder_url_template
        self._background_tasks: Set[asyncio.Task] = set()

    @classmethod
    def from_factory(
        cls,
        factory: RepositoryFactory,
        crawler: ReviewCrawler,
        summarizer: ReviewSummarizer,
        settings: Settings,
    ) -> PlaceSummaryService:
        metrics_repo = factory.metrics_repository() if settings.metrics_enabled else None
        metrics_factory = MetricsTrackerFactory(
            repository=metrics_repo,
            sampling_rate=settings.metrics_sampling_rate,
            slow_request_threshold_ms=settings.metrics_slow_request_threshold_ms,
        )
        return cls(
            cache_repository=factory.cache_repository(),
            lock_repository=factory.lock_repository(),
            crawler=crawler,
            summarizer=summarizer,
            metrics_factory=metrics_factory,
            placeholder_url_template=settings.crawler_search_url_template,
        )

    @property
    def pending_revalidations(self) -> int:
        return len(self._background_tasks)

    async def fetch_summary(self, place_name: str) -> PlaceSummaryResponse:
        """
        Return a summary for a place, degrading gracefully on failure.

        Never raises for crawler, summarizer, lock or store failures; every
        path ends in a well-formed response.

        Parameters
        ----------
        place_name
            Place name as typed by the user

        Returns
        -------
        PlaceSummaryResponse tagged with the ladder level that produced it
        """
        normalized_key = normalize_place_name(place_name)
        if not normalized_key:
            display_name = place_name if isinstance(place_name, str) else ""
            return PlaceSummaryResponse.minimal(
                PlaceSummary.placeholder(display_name, "", INVALID_NAME_SUMMARY),
                error=str(InvalidPlaceNameError(place_name)),
            )

        request_id = generate_request_id()
        tracker = self._metrics_factory.start(place_name, normalized_key, request_id)
        try:
            return await self._resolve(place_name, normalized_key, request_id, tracker)
        except Exception as e:
            # Lookup failures before the crawl path (e.g. the store is down)
            logger.warning(
                "Cache lookup for '%s' failed: %s", normalized_key, str(e) or repr(e)
            )
            tracker.record_error(e, _error_stage(e) or ErrorStage.DB)
            return await self._degraded_or_minimal(place_name, normalized_key, e)
        finally:
            await tracker.save()

    async def aclose(self) -> None:
        """Wait for in-flight background revalidations to finish."""
        while self._background_tasks:
            await asyncio.gather(*list(self._background_tasks), return_exceptions=True)

    async def _resolve(
        self,
        place_name: str,
        normalized_key: str,
        request_id: str,
        tracker: MetricsTracker,
    ) -> PlaceSummaryResponse:
        lookup = await self._cache_repo.get_by_normalized_name(normalized_key)

        if lookup.fresh is not None:
            tracker.record_cache_hit(CacheHitType.FRESH)
            await self._touch_quietly(lookup.fresh)
            return PlaceSummaryResponse.cached(lookup.fresh.data)

        if lookup.stale is not None:
            tracker.record_cache_hit(CacheHitType.STALE)
            return await self._serve_stale(
                lookup.stale, place_name, normalized_key, request_id
            )

        tracker.record_cache_hit(CacheHitType.MISS)
        return await self._perform_fresh_crawl(
            place_name, normalized_key, request_id, tracker
        )

    async def _serve_stale(
        self,
        stale: CacheRecord,
        place_name: str,
        normalized_key: str,
        request_id: str,
    ) -> PlaceSummaryResponse:
        await self._touch_quietly(stale)

        if not stale.is_revalidating and await self._try_mark_for_revalidation(stale):
            self._spawn_revalidation(stale.id, place_name, normalized_key, request_id)
            return PlaceSummaryResponse.stale(stale.data, REVALIDATING_MESSAGE)

        return PlaceSummaryResponse.stale(stale.data, BEING_UPDATED_MESSAGE)

    def _spawn_revalidation(
        self,
        record_id: UUID,
        place_name: str,
        normalized_key: str,
        request_id: str,
    ) -> None:
        task = asyncio.create_task(
            self._revalidate(record_id, place_name, normalized_key, request_id),
            name=f"revalidate:{normalized_key}",
        )
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    async def _revalidate(
        self,
        record_id: UUID,
        place_name: str,
        normalized_key: str,
        request_id: str,
    ) -> None:
        tracker = self._metrics_factory.start(place_name, normalized_key, request_id)
        try:
            result = await self._perform_fresh_crawl(
                place_name, normalized_key, request_id, tracker
            )
            if result.status is ResponseStatus.FRESH:
                await self._cache_repo.finish_revalidation(record_id, result.data)
                logger.info("Revalidated '%s'", normalized_key)
            else:
                logger.info(
                    "Revalidation of '%s' ended %s, keeping stale data",
                    normalized_key,
                    result.status.value,
                )
                await self._reset_quietly(record_id)
        except asyncio.CancelledError:
            await self._reset_quietly(record_id)
            raise
        except Exception as e:
            logger.error("Revalidation of '%s' failed: %s", normalized_key, e)
            await self._reset_quietly(record_id)
        finally:
            await tracker.save()

    async def _perform_fresh_crawl(
        self,
        place_name: str,
        normalized_key: str,
        request_id: str,
        tracker: MetricsTracker,
    ) -> PlaceSummaryResponse:
        lock_key = crawl_lock_key(normalized_key)
        try:
            if not await self._lock_repo.acquire_lock(lock_key, request_id):
                return await self._await_other_crawler(
                    normalized_key, lock_key, tracker
                )
            try:
                return await self._crawl_summarize_save(
                    place_name, normalized_key, tracker
                )
            finally:
                await self._release_quietly(lock_key, request_id)
        except Exception as e:
            logger.warning(
                "Fresh crawl for '%s' failed: %s", normalized_key, str(e) or repr(e)
            )
            tracker.record_error(e, _error_stage(e))
            return await self._degraded_or_minimal(place_name, normalized_key, e)

    async def _await_other_crawler(
        self,
        normalized_key: str,
        lock_key: str,
        tracker: MetricsTracker,
    ) -> PlaceSummaryResponse:
        released = await self._lock_repo.wait_for_lock_release(lock_key)
        if not released:
            logger.info("Timed out waiting for lock %s", lock_key)

        # Re-check even after a timeout; the holder may have written late
        lookup = await self._cache_repo.get_by_normalized_name(normalized_key)
        if lookup.fresh is not None:
            tracker.record_cache_hit(CacheHitType.FRESH)
            return PlaceSummaryResponse.fresh(lookup.fresh.data)
        if lookup.stale is not None:
            tracker.record_cache_hit(CacheHitType.STALE)
            return PlaceSummaryResponse.stale(lookup.stale.data)

        raise LockTimeoutError(lock_key)

    async def _crawl_summarize_save(
        self,
        place_name: str,
        normalized_key: str,
        tracker: MetricsTracker,
    ) -> PlaceSummaryResponse:
        start = tracker.start_crawl()
        crawl = await self._crawler.extract(place_name)
        tracker.end_crawl(start)

        start = tracker.start_ai()
        review_summary = await self._summarizer.summarize(place_name, crawl.review_text)
        tracker.end_ai(start)

        summary = PlaceSummary.from_review_summary(
            place_name, normalized_key, review_summary, crawl.source_url
        )

        start = tracker.start_db()
        record = await self._cache_repo.save(summary, normalized_key)
        tracker.end_db(start)

        logger.info("Crawled and cached '%s'", normalized_key)
        return PlaceSummaryResponse.fresh(record.data)

    async def _degraded_or_minimal(
        self,
        place_name: str,
        normalized_key: str,
        error: Exception,
    ) -> PlaceSummaryResponse:
        try:
            record = await self._cache_repo.get_any(normalized_key)
        except Exception as e:
            logger.warning(
                "Fallback lookup for '%s' failed: %s", normalized_key, str(e) or repr(e)
            )
            record = None

        if record is not None:
            return PlaceSummaryResponse.degraded(record.data, DEGRADED_WARNING)

        placeholder = PlaceSummary.placeholder(
            place_name,
            normalized_key,
            UNAVAILABLE_SUMMARY,
            source_url=self._placeholder_url(place_name),
        )
        return PlaceSummaryResponse.minimal(
            placeholder, error=str(error) or repr(error)
        )

    def _placeholder_url(self, place_name: str) -> str:
        return self._placeholder_url_template.format(query=quote(place_name, safe=""))

    # Best-effort store calls ------------------------------------------------

    async def _touch_quietly(self, record: CacheRecord) -> None:
        try:
            await self._cache_repo.touch(record.id)
        except Exception as e:
            logger.warning("Failed to touch cache record %s: %s", record.id, e)

    async def _try_mark_for_revalidation(self, record: CacheRecord) -> bool:
        try:
            return await self._cache_repo.mark_for_revalidation(record.id)
        except Exception as e:
            # Treated as a lost race; the next request retries
            logger.warning("Failed to mark %s for revalidation: %s", record.id, e)
            return False

    async def _reset_quietly(self, record_id: UUID) -> None:
        try:
            await self._cache_repo.reset_revalidation(record_id)
        except Exception as e:
            logger.error("Failed to reset revalidation flag on %s: %s", record_id, e)

    async def _release_quietly(self, lock_key: str, owner_id: str) -> None:
        try:
            await self._lock_repo.release_lock(lock_key, owner_id)
        except Exception as e:
            # The row expires on its own after the lock TTL
            logger.warning("Failed to release lock %s: %s", lock_key, e)


def _error_stage(error: BaseException) -> Optional[ErrorStage]:
    if isinstance(error, LockTimeoutError):
        return ErrorStage.LOCK
    if isinstance(error, CrawlFailedError):
        return ErrorStage.CRAWL
    if isinstance(error, SummarizationFailedError):
        return ErrorStage.AI
    if isinstance(error, CacheStoreError):
        return ErrorStage.DB
    return None
