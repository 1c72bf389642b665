"""SQLAlchemy model for cached place summaries."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, Boolean, DateTime, Integer, String, Text
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from placesum.domain.places.value_objects import Sentiment
from placesum.infrastructure.persistence.sqlalchemy.models.base import (
    Base,
    ExpiringMixin,
    TimestampMixin,
)


class PlaceSummaryModel(Base, TimestampMixin, ExpiringMixin):
    """
    SQLAlchemy model for persisting cache records.

    One row per normalized place name. Rows are updated in place on every
    successful crawl and never deleted by the application.

    Coordination columns:
    - is_revalidating: set by a conditional update to elect one background
      revalidator per stale row
    - revalidation_started_at: when the current revalidation was claimed
    """

    __tablename__ = "place_summaries"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)

    place_name_normalized: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )
    place_name_original: Mapped[str] = mapped_column(String(255), nullable=False)

    summary: Mapped[str] = mapped_column(Text, nullable=False)
    pros: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    cons: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    sentiment: Mapped[Sentiment] = mapped_column(
        SQLEnum(
            Sentiment,
            values_callable=lambda x: [e.value for e in x],
            native_enum=False,
        ),
        default=Sentiment.NEUTRAL,
        nullable=False,
    )
    review_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    source_url: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Freshness window (expires_at comes from ExpiringMixin)
    cached_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    is_revalidating: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )
    revalidation_started_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Telemetry
    request_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_requested_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return (
            f"<PlaceSummaryModel(id={self.id}, "
            f"key={self.place_name_normalized!r}, "
            f"expires_at={self.expires_at})>"
        )
