"""Response DTO returned by the place summary service."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from placesum.domain.places.value_objects import PlaceSummary


class ResponseStatus(Enum):
    """Which rung of the degradation ladder produced the response."""

    CACHED = "cached"  # fresh cache hit
    FRESH = "fresh"  # crawled now (or by a concurrent request we waited for)
    STALE = "stale"  # expired cache, refresh in progress
    DEGRADED = "degraded"  # crawl failed, older data shown
    MINIMAL = "minimal"  # no data at all, placeholder shown


@dataclass(frozen=True)
class PlaceSummaryResponse:
    """
    Output contract of ``PlaceSummaryService.fetch_summary``.

    ``data`` is always a well-formed PlaceSummary, so callers never need
    null handling. ``message``, ``warning`` and ``error`` are human-readable
    and tied to ``status``.
    """

    status: ResponseStatus
    data: PlaceSummary
    is_fresh: bool
    message: Optional[str] = None
    warning: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def cached(cls, data: PlaceSummary) -> PlaceSummaryResponse:
        return cls(status=ResponseStatus.CACHED, data=data, is_fresh=True)

    @classmethod
    def fresh(cls, data: PlaceSummary) -> PlaceSummaryResponse:
        return cls(status=ResponseStatus.FRESH, data=data, is_fresh=True)

    @classmethod
    def stale(
        cls,
        data: PlaceSummary,
        message: Optional[str] = None,
    ) -> PlaceSummaryResponse:
        return cls(
            status=ResponseStatus.STALE,
            data=data,
            is_fresh=False,
            message=message,
        )

    @classmethod
    def degraded(cls, data: PlaceSummary, warning: str) -> PlaceSummaryResponse:
        return cls(
            status=ResponseStatus.DEGRADED,
            data=data,
            is_fresh=False,
            warning=warning,
        )

    @classmethod
    def minimal(cls, data: PlaceSummary, error: str) -> PlaceSummaryResponse:
        return cls(
            status=ResponseStatus.MINIMAL,
            data=data,
            is_fresh=False,
            error=error,
        )
