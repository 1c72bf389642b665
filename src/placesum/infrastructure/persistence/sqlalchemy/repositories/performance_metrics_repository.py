"""SQLAlchemy implementation of PerformanceMetricsRepository."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from placesum.application.ports.performance_metrics import (
    PerformanceMetrics,
    PerformanceMetricsRepository,
)
from placesum.infrastructure.persistence.sqlalchemy.models import (
    PerformanceMetricModel,
)
from placesum.infrastructure.persistence.sqlalchemy.repositories._utils import (
    translate_store_errors,
)


class PerformanceMetricsRepositorySQLAlchemy(PerformanceMetricsRepository):
    """Appends metrics rows, one short transaction per record."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def save(self, metrics: PerformanceMetrics) -> None:
        model = PerformanceMetricModel(
            search_query=metrics.search_query[:255],
            place_name_normalized=metrics.place_name_normalized[:255],
            request_id=metrics.request_id,
            total_time_ms=metrics.total_time_ms,
            crawl_time_ms=metrics.crawl_time_ms,
            ai_summary_time_ms=metrics.ai_summary_time_ms,
            db_save_time_ms=metrics.db_save_time_ms,
            cache_hit=metrics.cache_hit,
            cache_type=metrics.cache_type,
            error=metrics.error,
            error_stage=metrics.error_stage,
        )
        with translate_store_errors("save_metrics"):
            async with self._session_factory() as session:
                session.add(model)
                await session.commit()
