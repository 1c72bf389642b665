"""Places domain services."""

from placesum.domain.places.services.place_name_normalizer import (
    VENUE_SUFFIXES,
    normalize_place_name,
)

__all__ = [
    "VENUE_SUFFIXES",
    "normalize_place_name",
]
