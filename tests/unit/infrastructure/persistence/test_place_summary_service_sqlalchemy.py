"""Tests for PlaceSummaryService coordination through the SQLAlchemy stores."""

import asyncio
from datetime import timedelta

import pytest

from placesum.application.dtos import ResponseStatus
from placesum.application.services import PlaceSummaryService
from placesum.application.services.place_summary_service import (
    BEING_UPDATED_MESSAGE,
    REVALIDATING_MESSAGE,
)
from placesum.domain.places.value_objects import CrawlResult
from placesum.infrastructure.persistence.sqlalchemy.repositories import (
    CrawlLockRepositorySQLAlchemy,
    PlaceSummaryCacheRepositorySQLAlchemy,
)
from placesum_config.settings import Settings
from tests.shared.fixtures import (
    FakeReviewCrawler,
    FakeReviewSummarizer,
    make_summary,
)

KEY = "강남스타벅스"


class GatedCrawler(FakeReviewCrawler):
    """Crawler that blocks inside extract until released."""

    def __init__(self):
        super().__init__()
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def extract(self, place_name: str) -> CrawlResult:
        self.calls.append(place_name)
        self.started.set()
        await self.release.wait()
        return CrawlResult(review_text=self.review_text, source_url=self.source_url)


async def _yield_only(delay: float) -> None:
    await asyncio.sleep(0)


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, lock_cleanup_probability=0.0)


@pytest.fixture
def cache(session_factory, clock, settings) -> PlaceSummaryCacheRepositorySQLAlchemy:
    return PlaceSummaryCacheRepositorySQLAlchemy(
        session_factory,
        ttl=settings.cache_ttl,
        revalidation_lease=settings.revalidation_lease,
        clock=clock,
    )


@pytest.fixture
def locks(session_factory, clock, settings) -> CrawlLockRepositorySQLAlchemy:
    return CrawlLockRepositorySQLAlchemy(
        session_factory,
        ttl_seconds=settings.crawl_lock_ttl_seconds,
        wait_timeout_seconds=settings.lock_wait_timeout_seconds,
        cleanup_probability=0.0,
        sleep=_yield_only,
        clock=clock,
    )


def _service(cache, locks, crawler) -> PlaceSummaryService:
    return PlaceSummaryService(
        cache_repository=cache,
        lock_repository=locks,
        crawler=crawler,
        summarizer=FakeReviewSummarizer(),
    )


class TestAbandonedRevalidation:
    """A revalidator that died without resetting its claim must not block refreshes."""

    @pytest.mark.asyncio
    async def test_expired_claim_is_taken_over(self, cache, locks, clock):
        record = await cache.save(make_summary(), KEY)
        assert await cache.mark_for_revalidation(record.id) is True
        clock.advance(timedelta(days=30))
        crawler = FakeReviewCrawler()
        service = _service(cache, locks, crawler)

        first = await service.fetch_summary("강남 스타벅스")
        await service.aclose()
        second = await service.fetch_summary("강남 스타벅스")

        assert first.status is ResponseStatus.STALE
        assert first.message == REVALIDATING_MESSAGE
        assert crawler.calls == ["강남 스타벅스"]
        assert second.status is ResponseStatus.CACHED
        assert (await cache.get_any(KEY)).is_revalidating is False

    @pytest.mark.asyncio
    async def test_live_claim_still_blocks(self, cache, locks, clock, settings):
        record = await cache.save(make_summary(), KEY)
        clock.advance(settings.cache_ttl + timedelta(days=1))
        assert await cache.mark_for_revalidation(record.id) is True
        clock.advance(settings.revalidation_lease - timedelta(seconds=1))
        crawler = FakeReviewCrawler()
        service = _service(cache, locks, crawler)

        response = await service.fetch_summary("강남 스타벅스")
        await service.aclose()

        assert response.status is ResponseStatus.STALE
        assert response.message == BEING_UPDATED_MESSAGE
        assert crawler.calls == []


class TestLockOutlivesCrawl:
    """The default lock TTL must cover a crawl that runs its full budget."""

    @pytest.mark.asyncio
    async def test_slow_crawl_keeps_single_flight(
        self, cache, locks, clock, settings
    ):
        crawler = GatedCrawler()
        service = _service(cache, locks, crawler)

        first = asyncio.create_task(service.fetch_summary("스타벅스 강남점"))
        await crawler.started.wait()
        clock.advance(timedelta(seconds=settings.crawl_budget_seconds))

        second = await service.fetch_summary("강남 스타벅스")
        crawler.release.set()
        first_response = await first

        assert crawler.calls == ["스타벅스 강남점"]
        assert second.status is ResponseStatus.MINIMAL
        assert first_response.status is ResponseStatus.FRESH
        assert await locks.is_locked(f"crawl:{KEY}") is False
