"""Review summarizer port."""

from abc import ABC, abstractmethod

from placesum.domain.places.value_objects import ReviewSummary


class ReviewSummarizer(ABC):
    """Abstract interface for turning raw review text into a structured summary."""

    @abstractmethod
    async def summarize(self, place_name: str, review_text: str) -> ReviewSummary:
        """
        Summarize raw review text.

        Parameters
        ----------
        place_name
            Place the reviews belong to
        review_text
            Raw page text from the crawler

        Returns
        -------
        ReviewSummary with prose summary, pros, cons, sentiment and count

        Raises
        ------
        SummarizationFailedError
            When no reviews are found or the model output cannot be parsed
        """

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Identifier of the model used, for logging."""
