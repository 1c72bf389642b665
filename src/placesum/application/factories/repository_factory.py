"""Repository factory protocol for application layer."""

from __future__ import annotations

from typing import Protocol

from placesum.application.ports.performance_metrics import (
    PerformanceMetricsRepository,
)
from placesum.domain.places.repositories import (
    CrawlLockRepository,
    PlaceSummaryCacheRepository,
)


class RepositoryFactory(Protocol):
    """Protocol for creating the stores used by the place summary service.

    Each repository manages its own short-lived sessions, so the factory
    exposes no shared session or transaction.
    """

    def cache_repository(self) -> PlaceSummaryCacheRepository:
        """Get place summary cache repository."""
        ...

    def lock_repository(self) -> CrawlLockRepository:
        """Get crawl lock repository."""
        ...

    def metrics_repository(self) -> PerformanceMetricsRepository:
        """Get performance metrics repository."""
        ...
