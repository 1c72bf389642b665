"""SQLAlchemy base configuration and shared column mixins."""

from datetime import datetime

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from placesum.domain.shared.time import ensure_tz_aware, utc_now


class Base(DeclarativeBase):
    """Base class for all placesum tables."""


class TimestampMixin:
    """Row bookkeeping: created_at and updated_at in UTC."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )


class ExpiringMixin:
    """
    Indexed ``expires_at`` column for rows that go stale.

    Cache rows turn stale and lock rows become reclaimable once
    ``expires_at <= now``. SQLite hands the value back without a timezone,
    so comparisons go through ``is_expired``.
    """

    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
    )

    def is_expired(self, now: datetime) -> bool:
        return ensure_tz_aware(self.expires_at) <= ensure_tz_aware(now)
