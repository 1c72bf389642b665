"""SQLAlchemy models for persistence layer."""

from placesum.infrastructure.persistence.sqlalchemy.models.base import Base
from placesum.infrastructure.persistence.sqlalchemy.models.cache_lock_model import (
    CacheLockModel,
)
from placesum.infrastructure.persistence.sqlalchemy.models.performance_metric_model import (  # NOQA: E501
    PerformanceMetricModel,
)
from placesum.infrastructure.persistence.sqlalchemy.models.place_summary_model import (
    PlaceSummaryModel,
)

__all__ = [
    "Base",
    "CacheLockModel",
    "PerformanceMetricModel",
    "PlaceSummaryModel",
]
