"""Review sentiment enumeration."""

from enum import Enum


class Sentiment(Enum):
    """Overall tone of the reviews behind a summary."""

    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"

    @classmethod
    def parse(cls, value: object) -> "Sentiment":
        """Lenient conversion used for LLM and database input.

        Unknown or missing values fall back to NEUTRAL.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                return cls.NEUTRAL
        return cls.NEUTRAL
