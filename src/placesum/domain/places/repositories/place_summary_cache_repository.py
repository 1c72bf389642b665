"""Repository interface for the place summary cache.

Defines the contract for cache record persistence. All lookups and writes
are keyed by the normalized place name, which is unique across records.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from placesum.domain.places.value_objects import (
    CacheLookup,
    CacheRecord,
    PlaceSummary,
)


class PlaceSummaryCacheRepository(ABC):
    """Repository interface for cached place summaries."""

    @abstractmethod
    async def get_by_normalized_name(self, normalized_key: str) -> CacheLookup:
        """
        Look up the record for a key and split it by freshness.

        Parameters
        ----------
        normalized_key
            Normalized place name

        Returns
        -------
        CacheLookup with either ``fresh`` or ``stale`` set, or neither
        """

    @abstractmethod
    async def get_any(self, normalized_key: str) -> Optional[CacheRecord]:
        """
        Return the record for a key regardless of freshness.

        Used only for degraded-mode fallback.
        """

    @abstractmethod
    async def touch(self, record_id: UUID) -> None:
        """Increment request_count and update last_requested_at."""

    @abstractmethod
    async def mark_for_revalidation(self, record_id: UUID) -> bool:
        """
        Atomically set ``is_revalidating`` if it is unset or its claim expired.

        Implementations must use a compare-and-swap (conditional update);
        a read followed by a write is not sufficient.

        Returns
        -------
        True if this caller won the race and should revalidate
        """

    @abstractmethod
    async def finish_revalidation(self, record_id: UUID, data: PlaceSummary) -> None:
        """
        Write new data, refresh the freshness window and clear the flag.

        Parameters
        ----------
        record_id
            Record being revalidated
        data
            Freshly crawled summary
        """

    @abstractmethod
    async def reset_revalidation(self, record_id: UUID) -> None:
        """Clear ``is_revalidating`` without touching data."""

    @abstractmethod
    async def save(self, summary: PlaceSummary, normalized_key: str) -> CacheRecord:
        """
        Upsert a summary on its normalized key.

        Creates the record or overwrites it, resets the freshness window
        and clears the revalidation flag.

        Returns
        -------
        The stored record
        """
