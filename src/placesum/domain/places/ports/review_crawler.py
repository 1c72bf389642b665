"""Review crawler port."""

from abc import ABC, abstractmethod

from placesum.domain.places.value_objects import CrawlResult


class ReviewCrawler(ABC):
    """Abstract interface for extracting raw review text for a place."""

    @abstractmethod
    async def extract(self, place_name: str) -> CrawlResult:
        """
        Extract review text and a canonical source URL for a place.

        Parameters
        ----------
        place_name
            Place name as typed by the user

        Returns
        -------
        CrawlResult with the raw review text and the source URL

        Raises
        ------
        CrawlFailedError
            On navigation or extraction failure
        """
