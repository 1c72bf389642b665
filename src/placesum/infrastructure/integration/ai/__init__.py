"""AI integrations for review summarization."""

from placesum.infrastructure.integration.ai.anthropic_review_summarizer import (
    AnthropicReviewSummarizer,
)
from placesum.infrastructure.integration.ai.summary_parser import (
    ParseFailure,
    ParseResult,
    ParseSuccess,
    parse_summary_response,
)

__all__ = [
    "AnthropicReviewSummarizer",
    "ParseFailure",
    "ParseResult",
    "ParseSuccess",
    "parse_summary_response",
]
