"""Place summary value objects."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from placesum.domain.places.value_objects.sentiment import Sentiment


@dataclass(frozen=True)
class CrawlResult:
    """Raw output of the review crawler."""

    review_text: str
    source_url: str


@dataclass(frozen=True)
class ReviewSummary:
    """Structured summary produced by the summarizer from raw review text."""

    summary: str
    pros: tuple[str, ...] = ()
    cons: tuple[str, ...] = ()
    sentiment: Sentiment = Sentiment.NEUTRAL
    review_count: int = 0

    def __post_init__(self) -> None:
        if self.review_count < 0:
            msg = f"review_count must be >= 0, got {self.review_count}"
            raise ValueError(msg)


@dataclass(frozen=True)
class PlaceSummary:
    """
    The cached artifact for a place.

    ``normalized_key`` is the cache's primary key; ``place_name_original``
    is the first user query that produced the entry and is display only.
    """

    place_name_original: str
    normalized_key: str
    summary: str
    pros: tuple[str, ...] = field(default_factory=tuple)
    cons: tuple[str, ...] = field(default_factory=tuple)
    sentiment: Sentiment = Sentiment.NEUTRAL
    review_count: int = 0
    source_url: str = ""

    def __post_init__(self) -> None:
        if self.review_count < 0:
            msg = f"review_count must be >= 0, got {self.review_count}"
            raise ValueError(msg)
        # Accept lists from callers, store immutable tuples
        object.__setattr__(self, "pros", tuple(self.pros))
        object.__setattr__(self, "cons", tuple(self.cons))

    @classmethod
    def from_review_summary(
        cls,
        place_name: str,
        normalized_key: str,
        review_summary: ReviewSummary,
        source_url: str,
    ) -> PlaceSummary:
        return cls(
            place_name_original=place_name,
            normalized_key=normalized_key,
            summary=review_summary.summary,
            pros=review_summary.pros,
            cons=review_summary.cons,
            sentiment=review_summary.sentiment,
            review_count=review_summary.review_count,
            source_url=source_url,
        )

    @classmethod
    def placeholder(
        cls,
        place_name: str,
        normalized_key: str,
        summary: str,
        source_url: str = "",
    ) -> PlaceSummary:
        """Well-formed stand-in used when no data could be produced."""
        return cls(
            place_name_original=place_name,
            normalized_key=normalized_key,
            summary=summary,
            source_url=source_url,
        )

    def with_original_name(self, place_name: str) -> PlaceSummary:
        return replace(self, place_name_original=place_name)
