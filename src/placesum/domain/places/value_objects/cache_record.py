"""Cache record value objects."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID

from placesum.domain.places.value_objects.place_summary import PlaceSummary
from placesum.domain.shared.time import ensure_tz_aware, utc_now


@dataclass(frozen=True)
class CacheRecord:
    """
    Storage wrapper around a PlaceSummary with freshness metadata.

    A record is fresh while ``now < expires_at``. ``is_revalidating`` marks
    that one request holds an unexpired claim to refresh the record in the
    background; ``request_count`` is telemetry only.
    """

    id: UUID
    data: PlaceSummary
    cached_at: datetime
    expires_at: datetime
    is_revalidating: bool = False
    request_count: int = 0
    last_requested_at: Optional[datetime] = None

    def is_fresh(self, now: Optional[datetime] = None) -> bool:
        now = ensure_tz_aware(now or utc_now())
        return now < ensure_tz_aware(self.expires_at)

    @property
    def normalized_key(self) -> str:
        return self.data.normalized_key


@dataclass(frozen=True)
class CacheLookup:
    """Result of a keyed cache lookup: fresh, stale, or neither (never both)."""

    fresh: Optional[CacheRecord] = None
    stale: Optional[CacheRecord] = None

    def __post_init__(self) -> None:
        if self.fresh is not None and self.stale is not None:
            msg = "A cache lookup cannot be both fresh and stale"
            raise ValueError(msg)

    @classmethod
    def empty(cls) -> CacheLookup:
        return cls()

    @classmethod
    def from_record(
        cls,
        record: Optional[CacheRecord],
        now: Optional[datetime] = None,
    ) -> CacheLookup:
        if record is None:
            return cls()
        if record.is_fresh(now):
            return cls(fresh=record)
        return cls(stale=record)

    @property
    def is_miss(self) -> bool:
        return self.fresh is None and self.stale is None
