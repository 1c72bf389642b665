"""Tests for the Naver Map review crawler."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from playwright.async_api import Error as PlaywrightError

from placesum.domain.places.exceptions import CrawlFailedError
from placesum.infrastructure.integration.crawling import (
    NaverMapReviewCrawler,
    extract_review_section,
)

MODULE = "placesum.infrastructure.integration.crawling.naver_map_review_crawler"


class TestExtractReviewSection:
    """Tests for cutting the review part out of page text."""

    def test_starts_at_review_marker(self):
        text = "메뉴\n가격 정보\n리뷰 123\n커피가 맛있어요"

        assert extract_review_section(text) == "리뷰 123\n커피가 맛있어요"

    def test_whole_text_without_marker(self):
        assert extract_review_section("영업시간 09:00") == "영업시간 09:00"

    def test_truncated_to_prompt_budget(self):
        text = "소개" * 100 + "리뷰" + "가" * 20_000

        section = extract_review_section(text)

        assert section.startswith("리뷰")
        assert len(section) == 8_000

    def test_empty_input(self):
        assert extract_review_section("") == ""
        assert extract_review_section(None) == ""


def _frame(url: str) -> MagicMock:
    frame = MagicMock()
    frame.url = url
    return frame


def _page(frames: list, page_url: str = "https://map.naver.com/p/entry/place/1"):
    page = MagicMock()
    page.goto = AsyncMock()
    page.wait_for_timeout = AsyncMock()
    page.frames = frames
    page.url = page_url
    return page


@pytest.fixture
def crawler() -> NaverMapReviewCrawler:
    return NaverMapReviewCrawler(settle_ms=0)


class TestExtractFromPage:
    """Tests for page navigation with a mocked Playwright page."""

    @pytest.mark.asyncio
    async def test_success(self, crawler):
        """Test the detail frame text is returned with the page URL."""
        search = _frame("https://pcmap.place.naver.com/place/list?query=x")
        search.locator.return_value.first.click = AsyncMock()
        detail = _frame("https://pcmap.place.naver.com/restaurant/1/home")
        review_tab = detail.locator.return_value.or_.return_value
        review_tab.count = AsyncMock(return_value=1)
        review_tab.first.click = AsyncMock()
        detail.evaluate = AsyncMock(return_value="홈\n리뷰 42\n친절해요")
        page = _page([_frame("about:blank"), search, detail])

        result = await crawler._extract_from_page(page, "스타벅스", "https://s")

        assert result.review_text == "리뷰 42\n친절해요"
        assert result.source_url == "https://map.naver.com/p/entry/place/1"
        review_tab.first.click.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_search_frame(self, crawler):
        page = _page([_frame("about:blank")])

        with pytest.raises(CrawlFailedError, match="검색 결과"):
            await crawler._extract_from_page(page, "스타벅스", "https://s")

    @pytest.mark.asyncio
    async def test_empty_detail_text(self, crawler):
        """Test a blank place page counts as a crawl failure."""
        search = _frame("https://pcmap.place.naver.com/place/list?query=x")
        search.locator.return_value.first.click = AsyncMock()
        detail = _frame("https://pcmap.place.naver.com/place/1/home")
        detail.locator.return_value.or_.return_value.count = AsyncMock(
            return_value=0
        )
        detail.evaluate = AsyncMock(return_value="   ")
        page = _page([search, detail])

        with pytest.raises(CrawlFailedError):
            await crawler._extract_from_page(page, "스타벅스", "https://s")


class TestExtract:
    @pytest.mark.asyncio
    async def test_playwright_errors_become_crawl_failures(self, crawler):
        """Test browser launch failures are wrapped in CrawlFailedError."""
        context = MagicMock()
        context.__aenter__ = AsyncMock(
            side_effect=PlaywrightError("Executable doesn't exist")
        )
        context.__aexit__ = AsyncMock(return_value=False)

        with patch(f"{MODULE}.async_playwright", return_value=context):
            with pytest.raises(CrawlFailedError) as exc_info:
                await crawler.extract("스타벅스 강남점")

        assert "Executable doesn't exist" in str(exc_info.value)
        assert exc_info.value.details["place_name"] == "스타벅스 강남점"
