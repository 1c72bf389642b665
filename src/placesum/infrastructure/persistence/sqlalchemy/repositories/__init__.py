"""SQLAlchemy repository implementations."""

from placesum.infrastructure.persistence.sqlalchemy.repositories.crawl_lock_repository import (  # NOQA: E501
    CrawlLockRepositorySQLAlchemy,
)
from placesum.infrastructure.persistence.sqlalchemy.repositories.factory import (
    SQLAlchemyRepositoryFactory,
    build_place_summary_service,
)
from placesum.infrastructure.persistence.sqlalchemy.repositories.performance_metrics_repository import (  # NOQA: E501
    PerformanceMetricsRepositorySQLAlchemy,
)
from placesum.infrastructure.persistence.sqlalchemy.repositories.place_summary_cache_repository import (  # NOQA: E501
    PlaceSummaryCacheRepositorySQLAlchemy,
)

__all__ = [
    "CrawlLockRepositorySQLAlchemy",
    "PerformanceMetricsRepositorySQLAlchemy",
    "PlaceSummaryCacheRepositorySQLAlchemy",
    "SQLAlchemyRepositoryFactory",
    "build_place_summary_service",
]
