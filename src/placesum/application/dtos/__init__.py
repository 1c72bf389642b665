"""Application layer data transfer objects."""

from placesum.application.dtos.place_summary_response import (
    PlaceSummaryResponse,
    ResponseStatus,
)

__all__ = [
    "PlaceSummaryResponse",
    "ResponseStatus",
]
