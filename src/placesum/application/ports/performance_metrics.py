"""Performance metrics port for the application layer.

Abstracts where per-request timings are persisted so that the tracker stays
independent of the database.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class CacheHitType(str, Enum):
    """How the request was answered from the cache."""

    FRESH = "fresh"
    STALE = "stale"
    MISS = "miss"


class ErrorStage(str, Enum):
    """Pipeline stage in which a request failed."""

    CRAWL = "crawl"
    AI = "ai"
    DB = "db"
    LOCK = "lock"


@dataclass
class PerformanceMetrics:
    """Mutable timing record collected over one request."""

    search_query: str
    place_name_normalized: str
    request_id: str
    total_time_ms: int = 0
    crawl_time_ms: Optional[int] = None
    ai_summary_time_ms: Optional[int] = None
    db_save_time_ms: Optional[int] = None
    cache_hit: bool = False
    cache_type: CacheHitType = CacheHitType.MISS
    error: Optional[str] = None
    error_stage: Optional[ErrorStage] = None


class PerformanceMetricsRepository(ABC):
    """Sink for collected performance metrics."""

    @abstractmethod
    async def save(self, metrics: PerformanceMetrics) -> None:
        """
        Persist one metrics record.

        Parameters
        ----------
        metrics
            Collected timings and outcome of a request
        """
