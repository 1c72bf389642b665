"""Pydantic schemas for API request/response models."""

from placesum.presentation.api.schemas.common import ErrorResponse, HealthResponse
from placesum.presentation.api.schemas.places import (
    PlaceSummaryData,
    PlaceSummaryRequest,
    PlaceSummaryResponseSchema,
)

__all__ = [
    # Common
    "ErrorResponse",
    "HealthResponse",
    # Places
    "PlaceSummaryData",
    "PlaceSummaryRequest",
    "PlaceSummaryResponseSchema",
]
