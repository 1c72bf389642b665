"""Places bounded context: cached, AI-summarized place reviews."""

from placesum.domain.places.exceptions import (
    CacheStoreError,
    CrawlFailedError,
    InvalidPlaceNameError,
    LockTimeoutError,
    PlacesError,
    SummarizationFailedError,
)
from placesum.domain.places.services import normalize_place_name
from placesum.domain.places.value_objects import (
    CacheLookup,
    CacheRecord,
    CrawlResult,
    PlaceSummary,
    ReviewSummary,
    Sentiment,
)

__all__ = [
    # Exceptions
    "CacheStoreError",
    "CrawlFailedError",
    "InvalidPlaceNameError",
    "LockTimeoutError",
    "PlacesError",
    "SummarizationFailedError",
    # Services
    "normalize_place_name",
    # Value objects
    "CacheLookup",
    "CacheRecord",
    "CrawlResult",
    "PlaceSummary",
    "ReviewSummary",
    "Sentiment",
]
