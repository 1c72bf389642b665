"""Parsing of LLM review summary output.

The model is asked for a single JSON object. It sometimes wraps the object
in a Markdown code fence or adds a sentence around it, so extraction is
lenient; validation of the object itself is strict.
"""

from __future__ import annotations

import json
import math
import re
from dataclasses import dataclass
from typing import Any, Optional, Union

from placesum.domain.places.value_objects import ReviewSummary, Sentiment

_FENCED_JSON = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL)
_BARE_OBJECT = re.compile(r"\{.*\}", re.DOTALL)

NO_REVIEWS_REASON = "리뷰를 찾을 수 없습니다"


@dataclass(frozen=True)
class ParseSuccess:
    summary: ReviewSummary


@dataclass(frozen=True)
class ParseFailure:
    reason: str


ParseResult = Union[ParseSuccess, ParseFailure]


def parse_summary_response(text: str) -> ParseResult:
    """
    Turn raw model output into a ReviewSummary.

    Parameters
    ----------
    text
        Model output, optionally wrapped in a code fence

    Returns
    -------
    ParseSuccess with the summary, or ParseFailure with a reason when the
    output is not JSON, misses required fields or reports no reviews
    """
    data = _extract_json(text or "")
    if data is None:
        return ParseFailure("Model output is not a JSON object")

    if not data.get("hasReviews", False):
        return ParseFailure(NO_REVIEWS_REASON)

    summary = data.get("summary")
    if not isinstance(summary, str) or not summary.strip():
        return ParseFailure("Missing 'summary' field")

    pros = _string_list(data.get("pros"))
    cons = _string_list(data.get("cons"))
    if pros is None or cons is None:
        return ParseFailure("'pros' and 'cons' must be lists of strings")

    return ParseSuccess(
        ReviewSummary(
            summary=summary.strip(),
            pros=pros,
            cons=cons,
            sentiment=Sentiment.parse(data.get("sentiment")),
            review_count=_review_count(data.get("reviewCount")),
        )
    )


def _extract_json(text: str) -> Optional[dict[str, Any]]:
    candidates = []
    fenced = _FENCED_JSON.search(text)
    if fenced:
        candidates.append(fenced.group(1))
    candidates.append(text.strip())
    bare = _BARE_OBJECT.search(text)
    if bare:
        candidates.append(bare.group(0))

    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data
    return None


def _string_list(value: object) -> Optional[tuple[str, ...]]:
    if value is None:
        return ()
    if not isinstance(value, list):
        return None
    return tuple(str(item).strip() for item in value if str(item).strip())


def _review_count(value: object) -> int:
    # Models occasionally answer "약 120" or 120.0
    if isinstance(value, bool):
        return 0
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    if isinstance(value, (int, float)):
        return max(0, int(value))
    if isinstance(value, str):
        digits = re.sub(r"[^0-9]", "", value)
        return int(digits) if digits else 0
    return 0
