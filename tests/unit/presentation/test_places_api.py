"""Tests for the places API endpoints.

The service is built from in-memory fakes and injected through
``dependency_overrides``; the lifespan (and with it the database) is not
started.
"""

import pytest
from fastapi.testclient import TestClient

from placesum.application.services import PlaceSummaryService
from placesum.domain.places.exceptions import CrawlFailedError, LockTimeoutError
from placesum.presentation.api import create_app
from placesum.presentation.api.dependencies import get_place_summary_service
from tests.shared.fixtures import (
    FakeReviewCrawler,
    FakeReviewSummarizer,
    InMemoryCrawlLockRepository,
    InMemoryPlaceSummaryCacheRepository,
    make_summary,
)

SUMMARY_URL = "/api/v1/places/summary"


@pytest.fixture
def cache():
    return InMemoryPlaceSummaryCacheRepository()


@pytest.fixture
def crawler():
    return FakeReviewCrawler()


@pytest.fixture
def app(cache, crawler):
    app = create_app()
    service = PlaceSummaryService(
        cache_repository=cache,
        lock_repository=InMemoryCrawlLockRepository(),
        crawler=crawler,
        summarizer=FakeReviewSummarizer(),
    )
    app.dependency_overrides[get_place_summary_service] = lambda: service
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    return TestClient(app, raise_server_exceptions=False)


class TestPlaceSummaryEndpoint:
    """Tests for POST /api/v1/places/summary."""

    def test_cached_response_shape(self, client, cache):
        """Test a fresh cache entry is returned with the full body."""
        cache.seed(make_summary())

        response = client.post(SUMMARY_URL, json={"place_name": "강남 스타벅스"})

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "cached"
        assert body["is_fresh"] is True
        assert body["message"] is None
        assert body["data"] == {
            "place_name_original": "스타벅스 강남점",
            "normalized_key": "강남스타벅스",
            "summary": "조용하고 좋은 카페",
            "pros": ["분위기"],
            "cons": ["가격"],
            "sentiment": "positive",
            "review_count": 10,
            "source_url": "https://map.naver.com/p/entry/place/1",
        }

    def test_cold_request_is_crawled(self, client, crawler):
        response = client.post(SUMMARY_URL, json={"place_name": "스타벅스 강남점"})

        assert response.status_code == 200
        assert response.json()["status"] == "fresh"
        assert crawler.calls == ["스타벅스 강남점"]

    def test_failures_are_still_200(self, client, crawler):
        """Test a crawl failure yields a minimal body, not an error status."""
        crawler.fail("blocked")

        response = client.post(SUMMARY_URL, json={"place_name": "스타벅스 강남점"})

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "minimal"
        assert body["is_fresh"] is False
        assert body["error"] == "Crawl failed: blocked"

    def test_name_that_normalizes_to_nothing_is_minimal(self, client):
        response = client.post(SUMMARY_URL, json={"place_name": "!!!"})

        assert response.status_code == 200
        assert response.json()["status"] == "minimal"
        assert response.json()["error"] == "Invalid place name"

    @pytest.mark.parametrize(
        "body",
        [{}, {"place_name": ""}, {"place_name": "   "}, {"place_name": "a" * 256}],
    )
    def test_request_validation(self, client, body):
        response = client.post(SUMMARY_URL, json=body)

        assert response.status_code == 422


class TestExceptionHandlers:
    """Tests for the error body of exceptions raised outside the service."""

    def test_domain_exception_maps_to_status_and_code(self, app, client):
        async def raise_lock_timeout():
            raise LockTimeoutError("crawl:강남스타벅스")

        app.add_api_route("/boom/lock", raise_lock_timeout)

        response = client.get("/boom/lock")

        assert response.status_code == 504
        assert response.json() == {
            "detail": "Lock timeout - other request failed to crawl",
            "code": "LOCK_TIMEOUT",
        }

    def test_external_service_error_is_503(self, app, client):
        async def raise_crawl_failed():
            raise CrawlFailedError("browser crashed")

        app.add_api_route("/boom/crawl", raise_crawl_failed)

        response = client.get("/boom/crawl")

        assert response.status_code == 503
        assert response.json()["code"] == "CRAWL_FAILED"

    def test_unexpected_exception_is_500(self, app, client):
        async def raise_bug():
            raise RuntimeError("bug")

        app.add_api_route("/boom/bug", raise_bug)

        response = client.get("/boom/bug")

        assert response.status_code == 500
        assert response.json() == {
            "detail": "An internal error occurred",
            "code": "INTERNAL_ERROR",
        }


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["pending_revalidations"] == 0
        assert "version" in body
