"""Naver Map review crawler using a headless Chromium via Playwright.

The map site renders search results and place details in iframes served
from ``pcmap.place.naver.com``. The crawler searches for the place, opens
the first result, switches to the review tab when present and returns the
visible text from the first "리뷰" heading on.
"""

import logging
from typing import Optional
from urllib.parse import quote

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Frame, Page, async_playwright

from placesum.domain.places.exceptions import CrawlFailedError
from placesum.domain.places.ports import ReviewCrawler
from placesum.domain.places.value_objects import CrawlResult

logger = logging.getLogger(__name__)

REVIEW_MARKER = "리뷰"
REVIEW_SECTION_CHARS = 10_000
MAX_REVIEW_CHARS = 8_000

_PLACE_FRAME_HOST = "pcmap.place.naver.com"


def extract_review_section(page_text: str) -> str:
    """
    Cut the review part out of a place page's visible text.

    Starts at the first occurrence of "리뷰" (the whole text if absent),
    keeps at most 10 000 characters from there and truncates the result
    to 8 000 characters for the summarizer prompt.
    """
    text = page_text or ""
    index = text.find(REVIEW_MARKER)
    if index != -1:
        text = text[index : index + REVIEW_SECTION_CHARS]
    return text[:MAX_REVIEW_CHARS]


class NaverMapReviewCrawler(ReviewCrawler):
    """ReviewCrawler implementation scraping Naver Map place pages."""

    def __init__(
        self,
        headless: bool = True,
        navigation_timeout_ms: int = 30_000,
        settle_ms: int = 5_000,
        search_url_template: str = "https://map.naver.com/v5/search/{query}",
    ):
        self._headless = headless
        self._navigation_timeout_ms = navigation_timeout_ms
        self._settle_ms = settle_ms
        self._search_url_template = search_url_template

    async def extract(self, place_name: str) -> CrawlResult:
        search_url = self._search_url_template.format(query=quote(place_name, safe=""))
        logger.info("Crawling reviews for '%s'", place_name)

        try:
            async with async_playwright() as playwright:
                browser = await playwright.chromium.launch(
                    headless=self._headless,
                    timeout=self._navigation_timeout_ms,
                )
                try:
                    page = await browser.new_page()
                    # Clicks and lookups share the navigation timeout
                    page.set_default_timeout(self._navigation_timeout_ms)
                    return await self._extract_from_page(page, place_name, search_url)
                finally:
                    await browser.close()
        except CrawlFailedError:
            raise
        except PlaywrightError as e:
            logger.warning("Playwright error while crawling '%s': %s", place_name, e)
            raise CrawlFailedError(str(e) or type(e).__name__, place_name) from e

    async def _extract_from_page(
        self,
        page: Page,
        place_name: str,
        search_url: str,
    ) -> CrawlResult:
        await page.goto(
            search_url,
            wait_until="domcontentloaded",
            timeout=self._navigation_timeout_ms,
        )
        await page.wait_for_timeout(self._settle_ms)

        search_frame = self._find_frame(page, lambda url: "/place/list" in url)
        if search_frame is None:
            raise CrawlFailedError("검색 결과를 찾을 수 없습니다", place_name)

        await search_frame.locator("a").first.click()
        await page.wait_for_timeout(self._settle_ms)

        detail_frame = self._find_frame(page, lambda url: "/list" not in url)
        if detail_frame is None:
            raise CrawlFailedError("상세 페이지를 찾을 수 없습니다", place_name)

        await self._open_review_tab(page, detail_frame)

        source_url = page.url
        page_text = await detail_frame.evaluate("() => document.body.innerText")

        review_text = extract_review_section(page_text)
        if not review_text.strip():
            raise CrawlFailedError("Place page contains no text", place_name)

        logger.debug("Extracted %d characters for '%s'", len(review_text), place_name)
        return CrawlResult(review_text=review_text, source_url=source_url)

    async def _open_review_tab(self, page: Page, frame: Frame) -> None:
        review_tab = frame.locator(f'a:has-text("{REVIEW_MARKER}")').or_(
            frame.locator(f'button:has-text("{REVIEW_MARKER}")')
        )
        try:
            if await review_tab.count() > 0:
                await review_tab.first.click()
                await page.wait_for_timeout(3_000)
        except PlaywrightError as e:
            # Without a review tab the whole detail page is used
            logger.debug("Review tab not clickable: %s", e)

    @staticmethod
    def _find_frame(page: Page, url_matches) -> Optional[Frame]:
        for frame in page.frames:
            if _PLACE_FRAME_HOST in frame.url and url_matches(frame.url):
                return frame
        return None
