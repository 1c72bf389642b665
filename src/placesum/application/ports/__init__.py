"""Application layer ports."""

from placesum.application.ports.performance_metrics import (
    CacheHitType,
    ErrorStage,
    PerformanceMetrics,
    PerformanceMetricsRepository,
)

__all__ = [
    "CacheHitType",
    "ErrorStage",
    "PerformanceMetrics",
    "PerformanceMetricsRepository",
]
