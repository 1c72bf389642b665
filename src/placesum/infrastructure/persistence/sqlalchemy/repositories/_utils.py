"""Shared utilities for SQLAlchemy repositories."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from placesum.domain.places.exceptions import CacheStoreError


def ensure_uuid(value: UUID | str) -> UUID:
    """
    Ensure a value is a UUID, converting from string if necessary.

    Record ids cross the HTTP and CLI boundaries as strings.
    """
    if isinstance(value, UUID):
        return value
    if isinstance(value, str):
        return UUID(value)
    msg = f"Expected UUID or str, got {type(value).__name__}"
    raise TypeError(msg)


@contextmanager
def translate_store_errors(operation: str) -> Iterator[None]:
    """Re-raise driver and connection failures as CacheStoreError."""
    try:
        yield
    except (SQLAlchemyError, OSError) as e:
        raise CacheStoreError(operation, str(e) or type(e).__name__) from e
