"""Per-request performance tracking with sampled persistence.

Every request gets a MetricsTracker. Timings for the crawl, the AI summary
and the database write are collected while the request runs; ``save()``
persists them according to the sampling policy:

- errors are always persisted
- slow requests (above the threshold) are always persisted
- everything else is persisted with probability ``sampling_rate``

Metrics never affect control flow: ``save()`` swallows sink failures.
"""

from __future__ import annotations

import logging
import random
import secrets
import time
from typing import Callable, Optional

from placesum.application.ports.performance_metrics import (
    CacheHitType,
    ErrorStage,
    PerformanceMetrics,
    PerformanceMetricsRepository,
)

logger = logging.getLogger(__name__)


def generate_request_id() -> str:
    """Return a request id of the form ``<epoch-ms>-<6 hex chars>``."""
    return f"{int(time.time() * 1000)}-{secrets.token_hex(3)}"


class MetricsTracker:
    """Collects timings and outcome for a single request."""

    def __init__(
        self,
        metrics: PerformanceMetrics,
        repository: Optional[PerformanceMetricsRepository],
        sampling_rate: float = 0.1,
        slow_request_threshold_ms: int = 5000,
        random_source: Callable[[], float] = random.random,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._metrics = metrics
        self._repository = repository
        self._sampling_rate = sampling_rate
        self._slow_threshold_ms = slow_request_threshold_ms
        self._random = random_source
        self._clock = clock
        self._started = clock()
        self._active_stage: Optional[ErrorStage] = None

    @property
    def metrics(self) -> PerformanceMetrics:
        return self._metrics

    # Timing -----------------------------------------------------------------

    def start_crawl(self) -> float:
        self._active_stage = ErrorStage.CRAWL
        return self._clock()

    def end_crawl(self, start: float) -> None:
        self._metrics.crawl_time_ms = self._elapsed_ms(start)

    def start_ai(self) -> float:
        self._active_stage = ErrorStage.AI
        return self._clock()

    def end_ai(self, start: float) -> None:
        self._metrics.ai_summary_time_ms = self._elapsed_ms(start)

    def start_db(self) -> float:
        self._active_stage = ErrorStage.DB
        return self._clock()

    def end_db(self, start: float) -> None:
        self._metrics.db_save_time_ms = self._elapsed_ms(start)

    # Outcome ----------------------------------------------------------------

    def record_cache_hit(self, kind: CacheHitType) -> None:
        self._metrics.cache_hit = kind is not CacheHitType.MISS
        self._metrics.cache_type = kind

    def record_error(
        self,
        error: BaseException,
        stage: Optional[ErrorStage] = None,
    ) -> None:
        """Record a failure; the stage defaults to the last one started."""
        self._metrics.error = str(error) or type(error).__name__
        self._metrics.error_stage = stage or self._active_stage or ErrorStage.CRAWL

    # Persistence ------------------------------------------------------------

    def should_persist(self) -> bool:
        if self._metrics.error:
            return True
        if self._metrics.total_time_ms > self._slow_threshold_ms:
            return True
        return self._random() < self._sampling_rate

    async def save(self) -> bool:
        """
        Finalize the total time and persist if the sampling policy allows.

        Returns
        -------
        True if the metrics were handed to the repository successfully
        """
        self._metrics.total_time_ms = self._elapsed_ms(self._started)

        logger.debug(
            "Request %s (%s): %d ms, cache=%s, error_stage=%s",
            self._metrics.request_id,
            self._metrics.place_name_normalized,
            self._metrics.total_time_ms,
            self._metrics.cache_type.value,
            self._metrics.error_stage.value if self._metrics.error_stage else None,
        )

        if self._repository is None or not self.should_persist():
            return False

        try:
            await self._repository.save(self._metrics)
        except Exception as e:
            logger.warning(
                "Failed to save performance metrics for request %s: %s",
                self._metrics.request_id,
                str(e) or repr(e),
            )
            return False
        return True

    def _elapsed_ms(self, start: float) -> int:
        return max(0, int((self._clock() - start) * 1000))


class MetricsTrackerFactory:
    """Creates MetricsTrackers sharing one repository and sampling policy."""

    def __init__(
        self,
        repository: Optional[PerformanceMetricsRepository] = None,
        sampling_rate: float = 0.1,
        slow_request_threshold_ms: int = 5000,
        random_source: Callable[[], float] = random.random,
    ):
        self._repository = repository
        self._sampling_rate = sampling_rate
        self._slow_threshold_ms = slow_request_threshold_ms
        self._random = random_source

    def start(
        self,
        place_name: str,
        normalized_key: str,
        request_id: str,
    ) -> MetricsTracker:
        return MetricsTracker(
            PerformanceMetrics(
                search_query=place_name,
                place_name_normalized=normalized_key,
                request_id=request_id,
            ),
            repository=self._repository,
            sampling_rate=self._sampling_rate,
            slow_request_threshold_ms=self._slow_threshold_ms,
            random_source=self._random,
        )
