"""Tests for the per-request metrics tracker and its sampling policy."""

import re

import pytest

from placesum.application.ports import CacheHitType, ErrorStage, PerformanceMetrics
from placesum.application.services import (
    MetricsTracker,
    MetricsTrackerFactory,
    generate_request_id,
)
from placesum.domain.places.exceptions import CrawlFailedError
from tests.shared.fixtures import RecordingMetricsRepository


class FakeClock:
    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _tracker(
    repository=None,
    sampling_rate: float = 0.0,
    slow_ms: int = 5000,
    roll: float = 0.5,
    clock=None,
) -> MetricsTracker:
    return MetricsTracker(
        PerformanceMetrics(
            search_query="스타벅스 강남점",
            place_name_normalized="강남스타벅스",
            request_id="1700000000000-abc123",
        ),
        repository=repository,
        sampling_rate=sampling_rate,
        slow_request_threshold_ms=slow_ms,
        random_source=lambda: roll,
        clock=clock or FakeClock(),
    )


class TestGenerateRequestId:
    def test_format(self):
        assert re.fullmatch(r"\d{13}-[0-9a-f]{6}", generate_request_id())

    def test_ids_differ(self):
        assert len({generate_request_id() for _ in range(50)}) == 50


class TestTimings:
    def test_stage_timings_in_milliseconds(self):
        clock = FakeClock()
        tracker = _tracker(clock=clock)

        start = tracker.start_crawl()
        clock.advance(1.5)
        tracker.end_crawl(start)

        start = tracker.start_ai()
        clock.advance(0.25)
        tracker.end_ai(start)

        start = tracker.start_db()
        clock.advance(0.01)
        tracker.end_db(start)

        assert tracker.metrics.crawl_time_ms == 1500
        assert tracker.metrics.ai_summary_time_ms == 250
        assert tracker.metrics.db_save_time_ms == 10

    @pytest.mark.asyncio
    async def test_save_sets_total_time(self):
        clock = FakeClock()
        tracker = _tracker(clock=clock)
        clock.advance(2.0)

        await tracker.save()

        assert tracker.metrics.total_time_ms == 2000


class TestOutcome:
    def test_cache_hit_types(self):
        tracker = _tracker()

        tracker.record_cache_hit(CacheHitType.STALE)
        assert tracker.metrics.cache_hit is True
        assert tracker.metrics.cache_type is CacheHitType.STALE

        tracker.record_cache_hit(CacheHitType.MISS)
        assert tracker.metrics.cache_hit is False

    def test_error_stage_defaults_to_last_started_stage(self):
        tracker = _tracker()
        tracker.start_crawl()
        tracker.start_ai()

        tracker.record_error(ValueError("bad json"))

        assert tracker.metrics.error == "bad json"
        assert tracker.metrics.error_stage is ErrorStage.AI

    def test_explicit_stage_wins(self):
        tracker = _tracker()
        tracker.start_db()

        tracker.record_error(CrawlFailedError("timeout"), ErrorStage.LOCK)

        assert tracker.metrics.error == "Crawl failed: timeout"
        assert tracker.metrics.error_stage is ErrorStage.LOCK

    def test_error_without_stage_or_message(self):
        tracker = _tracker()

        tracker.record_error(RuntimeError())

        assert tracker.metrics.error == "RuntimeError"
        assert tracker.metrics.error_stage is ErrorStage.CRAWL


class TestSampling:
    @pytest.mark.asyncio
    async def test_errors_are_always_saved(self):
        repo = RecordingMetricsRepository()
        tracker = _tracker(repo, sampling_rate=0.0, roll=0.99)
        tracker.record_error(RuntimeError("boom"), ErrorStage.DB)

        assert await tracker.save() is True
        assert repo.saved == [tracker.metrics]

    @pytest.mark.asyncio
    async def test_slow_requests_are_always_saved(self):
        repo = RecordingMetricsRepository()
        clock = FakeClock()
        tracker = _tracker(repo, sampling_rate=0.0, slow_ms=1000, clock=clock)
        clock.advance(1.001)

        assert await tracker.save() is True
        assert len(repo.saved) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("roll", "expected"),
        [(0.05, True), (0.1, False), (0.9, False)],
    )
    async def test_normal_requests_are_sampled(self, roll, expected):
        repo = RecordingMetricsRepository()
        tracker = _tracker(repo, sampling_rate=0.1, roll=roll)

        assert await tracker.save() is expected
        assert len(repo.saved) == int(expected)

    @pytest.mark.asyncio
    async def test_no_repository_means_nothing_saved(self):
        tracker = _tracker(None, sampling_rate=1.0)
        tracker.record_error(RuntimeError("boom"))

        assert await tracker.save() is False

    @pytest.mark.asyncio
    async def test_repository_failure_is_swallowed(self):
        repo = RecordingMetricsRepository()
        repo.fail_with = RuntimeError("connection refused")
        tracker = _tracker(repo, sampling_rate=1.0)

        assert await tracker.save() is False


class TestMetricsTrackerFactory:
    @pytest.mark.asyncio
    async def test_start_creates_tracker_with_shared_policy(self):
        repo = RecordingMetricsRepository()
        factory = MetricsTrackerFactory(
            repo, sampling_rate=0.5, random_source=lambda: 0.4
        )

        tracker = factory.start("강남 스타벅스", "강남스타벅스", "1-abcdef")

        assert tracker.metrics.search_query == "강남 스타벅스"
        assert tracker.metrics.place_name_normalized == "강남스타벅스"
        assert tracker.metrics.request_id == "1-abcdef"
        assert await tracker.save() is True
        assert repo.saved == [tracker.metrics]
