"""Review crawling integrations."""

from placesum.infrastructure.integration.crawling.naver_map_review_crawler import (
    NaverMapReviewCrawler,
    extract_review_section,
)

__all__ = [
    "NaverMapReviewCrawler",
    "extract_review_section",
]
