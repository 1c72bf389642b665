"""Place name normalization for cache key generation.

Two queries for the same place must map to the same key even when the user
types the words in a different order or adds a branch suffix:

    "스타벅스 강남점"  -> "강남스타벅스"
    "강남 스타벅스"    -> "강남스타벅스"

Process (per pass):
1. Lowercase, split on whitespace and a fixed punctuation set
2. Strip one venue suffix (지점, 본점, 매장, ...) from every word
3. Split words into Hangul-syllable and [a-z0-9] runs
4. Sort the runs and concatenate them without separator

Passes repeat until the key is stable, which makes the function idempotent.
"""

import re

# Longest first so "본점" wins over "점"
VENUE_SUFFIXES: tuple[str, ...] = tuple(
    sorted(("점", "지점", "본점", "매장", "스토어", "샵", "카페"), key=len, reverse=True)
)

_SEPARATOR_PATTERN = re.compile(r"[\s\-_.,!?()\[\]{}'\"]+")
_TOKEN_PATTERN = re.compile(r"[가-힣]+|[a-z0-9]+")


def normalize_place_name(place_name: object) -> str:
    """
    Normalize a place name into a canonical cache key.

    Parameters
    ----------
    place_name
        Original user search query

    Returns
    -------
    Normalized key, or an empty string for empty/non-string input
    (callers must treat an empty key as invalid).
    """
    if not place_name or not isinstance(place_name, str):
        return ""

    normalized = _normalize_once(place_name)
    # Each pass either shortens the key or leaves it unchanged
    for _ in range(len(normalized) + 1):
        again = _normalize_once(normalized)
        if again == normalized:
            break
        normalized = again
    return normalized


def _normalize_once(text: str) -> str:
    words = [word for word in _SEPARATOR_PATTERN.split(text.lower()) if word]

    kept = [stripped for stripped in map(_strip_venue_suffix, words) if stripped]
    if not kept:
        # The name consists of suffix words only ("카페"); keep it whole
        kept = words

    tokens: list[str] = []
    for word in kept:
        tokens.extend(_TOKEN_PATTERN.findall(word))

    return "".join(sorted(tokens))


def _strip_venue_suffix(word: str) -> str:
    for suffix in VENUE_SUFFIXES:
        if word.endswith(suffix):
            return word[: -len(suffix)]
    return word
