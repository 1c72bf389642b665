"""Places domain ports for external collaborators."""

from placesum.domain.places.ports.review_crawler import ReviewCrawler
from placesum.domain.places.ports.review_summarizer import ReviewSummarizer

__all__ = [
    "ReviewCrawler",
    "ReviewSummarizer",
]
