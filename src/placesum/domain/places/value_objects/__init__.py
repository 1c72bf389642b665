"""Places domain value objects."""

from placesum.domain.places.value_objects.cache_record import (
    CacheLookup,
    CacheRecord,
)
from placesum.domain.places.value_objects.place_summary import (
    CrawlResult,
    PlaceSummary,
    ReviewSummary,
)
from placesum.domain.places.value_objects.sentiment import Sentiment

__all__ = [
    # Cached artifact
    "PlaceSummary",
    "Sentiment",
    # Storage
    "CacheLookup",
    "CacheRecord",
    # External collaborator results
    "CrawlResult",
    "ReviewSummary",
]
