"""SQLAlchemy repository factory and service composition."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from placesum.application.services import PlaceSummaryService
from placesum.infrastructure.integration.ai import AnthropicReviewSummarizer
from placesum.infrastructure.integration.crawling import NaverMapReviewCrawler
from placesum.infrastructure.persistence.sqlalchemy.repositories.crawl_lock_repository import (  # NOQA: E501
    CrawlLockRepositorySQLAlchemy,
)
from placesum.infrastructure.persistence.sqlalchemy.repositories.performance_metrics_repository import (  # NOQA: E501
    PerformanceMetricsRepositorySQLAlchemy,
)
from placesum.infrastructure.persistence.sqlalchemy.repositories.place_summary_cache_repository import (  # NOQA: E501
    PlaceSummaryCacheRepositorySQLAlchemy,
)

if TYPE_CHECKING:
    from placesum.domain.places.ports import ReviewCrawler, ReviewSummarizer
    from placesum_config.settings import Settings

logger = logging.getLogger(__name__)


class SQLAlchemyRepositoryFactory:
    """SQLAlchemy implementation of the RepositoryFactory Protocol."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        settings: Settings,
    ):
        self._session_factory = session_factory
        self._settings = settings

        # Cached instances (created on demand)
        self._cache_repo: PlaceSummaryCacheRepositorySQLAlchemy | None = None
        self._lock_repo: CrawlLockRepositorySQLAlchemy | None = None
        self._metrics_repo: PerformanceMetricsRepositorySQLAlchemy | None = None

    def cache_repository(self) -> PlaceSummaryCacheRepositorySQLAlchemy:
        if self._cache_repo is None:
            self._cache_repo = PlaceSummaryCacheRepositorySQLAlchemy(
                self._session_factory,
                ttl=self._settings.cache_ttl,
                revalidation_lease=self._settings.revalidation_lease,
            )
        return self._cache_repo

    def lock_repository(self) -> CrawlLockRepositorySQLAlchemy:
        if self._lock_repo is None:
            self._lock_repo = CrawlLockRepositorySQLAlchemy(
                self._session_factory,
                ttl_seconds=self._settings.crawl_lock_ttl_seconds,
                wait_timeout_seconds=self._settings.lock_wait_timeout_seconds,
                initial_wait_seconds=self._settings.lock_initial_wait_seconds,
                max_wait_seconds=self._settings.lock_max_wait_seconds,
                cleanup_probability=self._settings.lock_cleanup_probability,
            )
        return self._lock_repo

    def metrics_repository(self) -> PerformanceMetricsRepositorySQLAlchemy:
        if self._metrics_repo is None:
            self._metrics_repo = PerformanceMetricsRepositorySQLAlchemy(
                self._session_factory,
            )
        return self._metrics_repo


def create_review_crawler_from_settings(settings: Settings) -> NaverMapReviewCrawler:
    return NaverMapReviewCrawler(
        headless=settings.crawler_headless,
        navigation_timeout_ms=settings.crawler_navigation_timeout_ms,
        settle_ms=settings.crawler_settle_ms,
        search_url_template=settings.crawler_search_url_template,
    )


def create_review_summarizer_from_settings(
    settings: Settings,
) -> AnthropicReviewSummarizer:
    api_key = (
        settings.anthropic_api_key.get_secret_value()
        if settings.anthropic_api_key
        else ""
    )
    if not api_key:
        logger.warning(
            "ANTHROPIC_API_KEY is not set; cold crawls will degrade to cached data",
        )

    logger.info("Creating Anthropic summarizer (model: %s)", settings.anthropic_model)
    return AnthropicReviewSummarizer(
        api_key=api_key,
        model=settings.anthropic_model,
        base_url=settings.anthropic_base_url,
        max_tokens=settings.anthropic_max_tokens,
        temperature=settings.anthropic_temperature,
        timeout=settings.anthropic_timeout,
    )


def build_place_summary_service(
    session_factory: async_sessionmaker[AsyncSession],
    settings: Settings,
    crawler: Optional[ReviewCrawler] = None,
    summarizer: Optional[ReviewSummarizer] = None,
) -> PlaceSummaryService:
    """Wire the place summary service to the SQL stores and live adapters."""
    factory = SQLAlchemyRepositoryFactory(session_factory, settings)
    return PlaceSummaryService.from_factory(
        factory,
        crawler=crawler or create_review_crawler_from_settings(settings),
        summarizer=summarizer or create_review_summarizer_from_settings(settings),
        settings=settings,
    )
