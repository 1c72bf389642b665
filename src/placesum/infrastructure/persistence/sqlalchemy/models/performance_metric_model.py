"""SQLAlchemy model for sampled request performance metrics."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from placesum.application.ports.performance_metrics import CacheHitType, ErrorStage
from placesum.domain.shared.time import utc_now
from placesum.infrastructure.persistence.sqlalchemy.models.base import Base


class PerformanceMetricModel(Base):
    """Append-only record of one request's timings and outcome."""

    __tablename__ = "performance_metrics"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)

    search_query: Mapped[str] = mapped_column(String(255), nullable=False)
    place_name_normalized: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )
    request_id: Mapped[str] = mapped_column(String(64), nullable=False)

    total_time_ms: Mapped[int] = mapped_column(Integer, nullable=False)
    crawl_time_ms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    ai_summary_time_ms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    db_save_time_ms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    cache_hit: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    cache_type: Mapped[CacheHitType] = mapped_column(
        SQLEnum(
            CacheHitType,
            values_callable=lambda x: [e.value for e in x],
            native_enum=False,
        ),
        nullable=False,
        default=CacheHitType.MISS,
    )

    error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    error_stage: Mapped[Optional[ErrorStage]] = mapped_column(
        SQLEnum(
            ErrorStage,
            values_callable=lambda x: [e.value for e in x],
            native_enum=False,
        ),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
        index=True,
    )
