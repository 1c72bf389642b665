"""Application services."""

from placesum.application.services.metrics_tracker import (
    MetricsTracker,
    MetricsTrackerFactory,
    generate_request_id,
)
from placesum.application.services.place_summary_service import (
    PlaceSummaryService,
)

__all__ = [
    "MetricsTracker",
    "MetricsTrackerFactory",
    "PlaceSummaryService",
    "generate_request_id",
]
