"""Shared domain components.

This module exports shared exceptions and time helpers used across
domain boundaries.
"""

from placesum.domain.shared.exceptions import (
    DomainException,
    ErrorCode,
    ExternalServiceError,
    ValidationError,
)
from placesum.domain.shared.time import ensure_tz_aware, utc_now

__all__ = [
    # Error codes
    "ErrorCode",
    # Base exception
    "DomainException",
    # Exception categories
    "ValidationError",
    "ExternalServiceError",
    # Utilities
    "ensure_tz_aware",
    "utc_now",
]
