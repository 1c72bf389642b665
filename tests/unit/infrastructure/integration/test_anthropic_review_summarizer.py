"""Tests for AnthropicReviewSummarizer."""

import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from placesum.domain.places.exceptions import SummarizationFailedError
from placesum.domain.places.value_objects import Sentiment
from placesum.infrastructure.integration.ai import AnthropicReviewSummarizer

MESSAGES_URL = "https://api.anthropic.com/v1/messages"


def _messages_response(text: str, status_code: int = 200) -> httpx.Response:
    return httpx.Response(
        status_code,
        json={
            "id": "msg_01",
            "type": "message",
            "role": "assistant",
            "content": [{"type": "text", "text": text}],
        },
        request=httpx.Request("POST", MESSAGES_URL),
    )


@pytest.fixture
def summarizer() -> AnthropicReviewSummarizer:
    """Summarizer with a dummy key."""
    return AnthropicReviewSummarizer(api_key="sk-test", timeout=10.0)


@pytest.fixture
def model_output() -> str:
    return json.dumps(
        {
            "summary": "분위기가 좋고 커피가 맛있다는 평이 많습니다.",
            "pros": ["맛있는 커피", "넓은 좌석"],
            "cons": ["주차 불편"],
            "sentiment": "positive",
            "reviewCount": 57,
            "hasReviews": True,
        },
        ensure_ascii=False,
    )


class TestAnthropicReviewSummarizerInit:
    """Tests for summarizer initialization."""

    def test_defaults(self):
        """Test default model and base URL."""
        summarizer = AnthropicReviewSummarizer(api_key="sk-test")

        assert summarizer.model_name == "claude-3-5-sonnet-20241022"
        assert summarizer._base_url == "https://api.anthropic.com"

    def test_base_url_trailing_slash_removed(self):
        summarizer = AnthropicReviewSummarizer(
            api_key="sk-test", base_url="http://proxy.local:8080/"
        )

        assert summarizer._base_url == "http://proxy.local:8080"


class TestSummarize:
    """Tests for the summarize call."""

    @pytest.mark.asyncio
    async def test_success(self, summarizer, model_output):
        """Test a well-formed model answer becomes a ReviewSummary."""
        with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = _messages_response(model_output)

            result = await summarizer.summarize("스타벅스 강남점", "리뷰 ...")

        assert result.summary.startswith("분위기가 좋고")
        assert result.pros == ("맛있는 커피", "넓은 좌석")
        assert result.cons == ("주차 불편",)
        assert result.sentiment is Sentiment.POSITIVE
        assert result.review_count == 57

    @pytest.mark.asyncio
    async def test_request_shape(self, summarizer, model_output):
        """Test URL, headers and prompt of the Messages API request."""
        with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = _messages_response(model_output)

            await summarizer.summarize("스타벅스 강남점", "리뷰 커피 맛집")

        args, kwargs = mock_post.call_args
        assert args[0] == MESSAGES_URL
        assert kwargs["headers"]["x-api-key"] == "sk-test"
        assert kwargs["headers"]["anthropic-version"] == "2023-06-01"
        payload = kwargs["json"]
        assert payload["model"] == summarizer.model_name
        prompt = payload["messages"][0]["content"]
        assert "스타벅스 강남점" in prompt
        assert "리뷰 커피 맛집" in prompt

    @pytest.mark.asyncio
    async def test_fenced_output_is_accepted(self, summarizer, model_output):
        fenced = f"요약입니다.\n```json\n{model_output}\n```"
        with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = _messages_response(fenced)

            result = await summarizer.summarize("스타벅스 강남점", "리뷰 ...")

        assert result.review_count == 57

    @pytest.mark.asyncio
    async def test_no_reviews_fails(self, summarizer):
        """Test hasReviews=false is reported as a summarization failure."""
        output = json.dumps({"summary": "", "hasReviews": False})
        with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = _messages_response(output)

            with pytest.raises(SummarizationFailedError, match="리뷰를 찾을 수 없습니다"):
                await summarizer.summarize("없는 장소", "...")

    @pytest.mark.asyncio
    async def test_non_json_output_fails(self, summarizer):
        with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = _messages_response("죄송합니다, 도와드릴 수 없습니다.")

            with pytest.raises(SummarizationFailedError):
                await summarizer.summarize("스타벅스 강남점", "...")

    @pytest.mark.asyncio
    async def test_non_text_content_fails(self, summarizer):
        """Test a response without a text block is rejected."""
        response = httpx.Response(
            200,
            json={"content": [{"type": "tool_use", "id": "x", "input": {}}]},
            request=httpx.Request("POST", MESSAGES_URL),
        )
        with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = response

            with pytest.raises(SummarizationFailedError, match="Unexpected response"):
                await summarizer.summarize("스타벅스 강남점", "...")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body", [["not", "an", "object"], "text", {"content": None}]
    )
    async def test_malformed_body_fails(self, summarizer, body):
        """Test a body that is not a messages object is rejected, not leaked."""
        response = httpx.Response(
            200,
            json=body,
            request=httpx.Request("POST", MESSAGES_URL),
        )
        with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = response

            with pytest.raises(SummarizationFailedError, match="Unexpected response"):
                await summarizer.summarize("스타벅스 강남점", "...")

    @pytest.mark.asyncio
    async def test_http_error_status_fails(self, summarizer):
        """Test a 5xx answer is wrapped in SummarizationFailedError."""
        response = httpx.Response(
            529,
            json={"type": "error", "error": {"type": "overloaded_error"}},
            request=httpx.Request("POST", MESSAGES_URL),
        )
        with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = response

            with pytest.raises(SummarizationFailedError):
                await summarizer.summarize("스타벅스 강남점", "...")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            httpx.TimeoutException("Request timed out"),
            httpx.ConnectError("Connection refused"),
        ],
    )
    async def test_transport_errors_fail(self, summarizer, error):
        """Test graceful wrapping of timeouts and connection errors."""
        with patch(
            "httpx.AsyncClient.post",
            new_callable=AsyncMock,
            side_effect=error,
        ):
            with pytest.raises(SummarizationFailedError) as exc_info:
                await summarizer.summarize("스타벅스 강남점", "...")

        assert exc_info.value.__cause__ is error

    @pytest.mark.asyncio
    async def test_missing_api_key_fails_without_request(self):
        """Test no HTTP call is made when the key is missing."""
        summarizer = AnthropicReviewSummarizer(api_key="")

        with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
            with pytest.raises(SummarizationFailedError, match="API key"):
                await summarizer.summarize("스타벅스 강남점", "...")

        mock_post.assert_not_called()


class TestCustomPromptTemplate:
    """Tests for custom prompt templates."""

    @pytest.mark.asyncio
    async def test_custom_prompt_is_used(self, model_output):
        summarizer = AnthropicReviewSummarizer(
            api_key="sk-test",
            prompt_template="장소: {place_name}\n텍스트: {review_text}",
        )

        with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = _messages_response(model_output)

            await summarizer.summarize("블루보틀", "조용함")

        prompt = mock_post.call_args.kwargs["json"]["messages"][0]["content"]
        assert prompt == "장소: 블루보틀\n텍스트: 조용함"
