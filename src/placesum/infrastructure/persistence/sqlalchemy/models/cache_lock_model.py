"""SQLAlchemy model for crawl locks."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from placesum.domain.shared.time import utc_now
from placesum.infrastructure.persistence.sqlalchemy.models.base import (
    Base,
    ExpiringMixin,
)


class CacheLockModel(Base, ExpiringMixin):
    """
    One row per held lock.

    The primary key on ``lock_key`` is what makes acquisition atomic: a
    second insert for the same key fails with an integrity error.
    """

    __tablename__ = "cache_locks"

    lock_key: Mapped[str] = mapped_column(String(300), primary_key=True)
    request_id: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<CacheLockModel(lock_key={self.lock_key!r}, "
            f"owner={self.request_id!r}, expires_at={self.expires_at})>"
        )
