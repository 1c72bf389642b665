"""Anthropic Messages API based review summarizer.

Sends the crawled page text to Claude and asks for a JSON summary of the
user reviews it contains. Only the Messages endpoint is used, through
httpx, so no vendor SDK is required.
"""

import logging
from typing import Optional

import httpx

from placesum.domain.places.exceptions import SummarizationFailedError
from placesum.domain.places.ports import ReviewSummarizer
from placesum.domain.places.value_objects import ReviewSummary
from placesum.infrastructure.integration.ai.summary_parser import (
    ParseFailure,
    parse_summary_response,
)

logger = logging.getLogger(__name__)

ANTHROPIC_VERSION = "2023-06-01"


class AnthropicReviewSummarizer(ReviewSummarizer):
    """Review summarizer backed by the Anthropic Messages API."""

    DEFAULT_PROMPT_TEMPLATE = """다음은 "{place_name}"의 네이버 지도 페이지 텍스트입니다.
이 중에서 실제 사용자 리뷰로 보이는 내용만 추출하여 요약해주세요.

{review_text}

다음 형식의 JSON으로만 응답해주세요 (다른 설명 없이):
{{
  "summary": "1-2문장으로 전체 요약",
  "pros": ["장점1", "장점2", "장점3"],
  "cons": ["단점1", "단점2"],
  "sentiment": "positive|neutral|negative",
  "reviewCount": 대략적인리뷰개수(숫자),
  "hasReviews": true|false
}}

리뷰를 찾을 수 없으면 hasReviews를 false로 설정하세요."""

    def __init__(  # NOQA: PLR0913
        self,
        api_key: str,
        model: str = "claude-3-5-sonnet-20241022",
        base_url: str = "https://api.anthropic.com",
        max_tokens: int = 1024,
        temperature: float = 0.3,
        timeout: float = 60.0,
        prompt_template: Optional[str] = None,
    ):
        self._api_key = api_key
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._timeout = timeout
        self._prompt_template = prompt_template or self.DEFAULT_PROMPT_TEMPLATE

    @property
    def model_name(self) -> str:
        return self._model

    async def summarize(self, place_name: str, review_text: str) -> ReviewSummary:
        if not self._api_key:
            msg = "Anthropic API key is not configured"
            raise SummarizationFailedError(msg)

        prompt = self._prompt_template.format(
            place_name=place_name,
            review_text=review_text,
        )

        try:
            response_text = await self._call_messages_api(prompt)
        except (httpx.HTTPError, ValueError) as e:
            self._log_request_error(e)
            raise SummarizationFailedError(str(e) or type(e).__name__) from e

        logger.debug("AI Response: %s", response_text[:500])

        result = parse_summary_response(response_text)
        if isinstance(result, ParseFailure):
            logger.info("Summary for '%s' rejected: %s", place_name, result.reason)
            raise SummarizationFailedError(result.reason)

        return result.summary

    async def _call_messages_api(self, prompt: str) -> str:
        url = f"{self._base_url}/v1/messages"
        payload = {
            "model": self._model,
            "max_tokens": self._max_tokens,
            "temperature": self._temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        headers = {
            "x-api-key": self._api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "content-type": "application/json",
        }

        timeout = httpx.Timeout(connect=5.0, read=self._timeout, write=10.0, pool=5.0)
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.post(url, json=payload, headers=headers)
            response.raise_for_status()
            data = response.json()

        return self._first_text_block(data)

    @staticmethod
    def _first_text_block(data: object) -> str:
        content = data.get("content") if isinstance(data, dict) else None
        if not isinstance(content, list):
            msg = "Unexpected response body"
            raise ValueError(msg)
        for block in content:
            if isinstance(block, dict) and block.get("type") == "text":
                return block.get("text", "")
        msg = "Unexpected response type"
        raise ValueError(msg)

    def _log_request_error(self, e: Exception) -> None:
        if isinstance(e, httpx.TimeoutException):
            logger.warning("Anthropic request timed out after %.1fs", self._timeout)
        elif isinstance(e, httpx.ConnectError):
            logger.warning("Could not connect to Anthropic at %s", self._base_url)
        elif isinstance(e, httpx.HTTPStatusError):
            logger.warning(
                "Anthropic returned HTTP %s: %s",
                e.response.status_code,
                e.response.text[:200],
            )
        else:
            logger.warning(
                "AI summarization failed: %s (type: %s)",
                str(e) or repr(e),
                type(e).__name__,
            )
