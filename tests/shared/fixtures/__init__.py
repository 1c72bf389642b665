"""Shared test fixtures and in-memory fakes."""

from tests.shared.fixtures.fakes import (
    FakeReviewCrawler,
    FakeReviewSummarizer,
    InMemoryCrawlLockRepository,
    InMemoryPlaceSummaryCacheRepository,
    RecordingMetricsRepository,
    make_summary,
)

__all__ = [
    "FakeReviewCrawler",
    "FakeReviewSummarizer",
    "InMemoryCrawlLockRepository",
    "InMemoryPlaceSummaryCacheRepository",
    "RecordingMetricsRepository",
    "make_summary",
]
