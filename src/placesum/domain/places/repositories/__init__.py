"""Places domain repository interfaces."""

from placesum.domain.places.repositories.crawl_lock_repository import (
    CrawlLockRepository,
    crawl_lock_key,
)
from placesum.domain.places.repositories.place_summary_cache_repository import (
    PlaceSummaryCacheRepository,
)

__all__ = [
    "CrawlLockRepository",
    "PlaceSummaryCacheRepository",
    "crawl_lock_key",
]
