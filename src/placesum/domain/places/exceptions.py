"""Places domain exceptions.

These cover the failure modes of the summary pipeline: invalid input,
crawl lock contention, crawler and summarizer failures, and cache store
failures. The orchestrator recovers from all of them locally; they exist
so that each failure carries a stable code and a stage for metrics.
"""

from placesum.domain.shared.exceptions import (
    DomainException,
    ErrorCode,
    ExternalServiceError,
    ValidationError,
)


class PlacesError(DomainException):
    """Base exception for places domain errors."""


class InvalidPlaceNameError(ValidationError):
    """Raised when a place name normalizes to an empty key."""

    def __init__(self, place_name: object) -> None:
        super().__init__(
            message="Invalid place name",
            code=ErrorCode.INVALID_PLACE_NAME,
            details={"place_name": repr(place_name)},
        )


class LockTimeoutError(PlacesError):
    """Raised when another request held the crawl lock past the wait bound."""

    def __init__(self, lock_key: str) -> None:
        super().__init__(
            message="Lock timeout - other request failed to crawl",
            code=ErrorCode.LOCK_TIMEOUT,
            details={"lock_key": lock_key},
        )


class CrawlFailedError(ExternalServiceError):
    """Raised when review extraction from the map service fails."""

    def __init__(self, reason: str, place_name: str | None = None) -> None:
        super().__init__(
            message=f"Crawl failed: {reason}",
            code=ErrorCode.CRAWL_FAILED,
            details={"reason": reason, "place_name": place_name},
        )


class SummarizationFailedError(ExternalServiceError):
    """Raised when the summarizer finds no reviews or returns malformed output."""

    def __init__(self, reason: str) -> None:
        super().__init__(
            message=f"Summarization failed: {reason}",
            code=ErrorCode.SUMMARIZATION_FAILED,
            details={"reason": reason},
        )


class CacheStoreError(ExternalServiceError):
    """Raised when the cache or lock backend cannot be reached."""

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(
            message=f"Cache store operation '{operation}' failed: {reason}",
            code=ErrorCode.CACHE_STORE_FAILED,
            details={"operation": operation, "reason": reason},
        )
