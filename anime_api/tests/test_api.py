"""End-to-end tests for the HTTP API with stubbed upstream providers."""
from unittest.mock import patch

import httpx
import pytest
from fastapi.testclient import TestClient

import anime_api.main as api

from conftest import (
    ANIME_ID,
    FALLBACK_ROUTE,
    IMAGES_ROUTE,
    INFO_ROUTE,
    METADATA_ROUTE,
    PRIMARY_ROUTE,
)


@pytest.fixture()
def client(upstream, test_settings):
    def build_client(_settings):
        return httpx.AsyncClient(transport=httpx.MockTransport(upstream))

    with (
        patch("anime_api.main.settings", test_settings),
        patch("anime_api.app_state.build_http_client", side_effect=build_client),
    ):
        api.limiter.reset()
        with TestClient(api.app) as test_client:
            yield test_client


def test_health_endpoint(client):
    """Test the health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["services"]["cache"]["backend"] == "memory"


def test_root_returns_health(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "services" in response.json()


def test_episodes_endpoint(client):
    response = client.get(f"/api/v1/episodes/{ANIME_ID}")
    assert response.status_code == 200
    payload = response.json()
    assert [bundle["providerId"] for bundle in payload] == ["anirise", "anizone"]
    first = payload[0]["episodes"][0]
    assert first["title"] == "Premiere"
    assert first["description"] == "The crew sets sail."


def test_cached_response_is_identical_and_skips_upstream(client, upstream):
    first = client.get(f"/api/v1/episodes/{ANIME_ID}")
    calls_after_first = len(upstream.calls)

    second = client.get(f"/api/v1/episodes/{ANIME_ID}")

    assert second.status_code == 200
    assert second.content == first.content
    assert len(upstream.calls) == calls_after_first


def test_cache_entry_written_under_episode_key(client):
    client.get(f"/api/v1/episodes/{ANIME_ID}")
    cache = api.app.state.app_state.cache
    cached = client.portal.call(cache.get, f"episodesData:{ANIME_ID}")
    assert cached is not None


def test_primary_failure_returns_fallback_bundle(client, upstream):
    upstream.fail(PRIMARY_ROUTE)
    response = client.get(f"/api/v1/episodes/{ANIME_ID}")
    assert response.status_code == 200
    payload = response.json()
    assert len(payload) == 1
    assert payload[0]["providerId"] == "anizone"
    assert payload[0]["episodes"][0]["id"] == "c-1"


def test_all_providers_fail_returns_500(client, upstream):
    upstream.fail(PRIMARY_ROUTE)
    upstream.fail(FALLBACK_ROUTE, httpx.ConnectError("refused"))
    response = client.get(f"/api/v1/episodes/{ANIME_ID}")
    assert response.status_code == 500
    assert response.json() == {"message": "Internal Server Error", "status": 500}


def test_failure_is_not_cached(client, upstream):
    upstream.fail(PRIMARY_ROUTE)
    upstream.fail(FALLBACK_ROUTE)
    assert client.get(f"/api/v1/episodes/{ANIME_ID}").status_code == 500

    upstream.failures.clear()
    response = client.get(f"/api/v1/episodes/{ANIME_ID}")
    assert response.status_code == 200


def test_metadata_unavailable_returns_500(client, upstream):
    upstream.fail(METADATA_ROUTE)
    upstream.fail(INFO_ROUTE)
    response = client.get(f"/api/v1/episodes/{ANIME_ID}")
    assert response.status_code == 500
    assert response.json()["message"] == "Internal Server Error"


def test_image_source_timeout_still_serves_episodes(client, upstream):
    upstream.fail(IMAGES_ROUTE, httpx.ReadTimeout("slow"))
    response = client.get(f"/api/v1/episodes/{ANIME_ID}")
    assert response.status_code == 200
    assert response.json()[0]["episodes"][0]["title"] == "Meta One"


def test_unexpected_error_returns_500(client):
    with patch(
        "anime_api.episodes.aggregator.EpisodeAggregator.aggregate",
        side_effect=RuntimeError("boom"),
    ):
        response = client.get("/api/v1/episodes/unknown")
    assert response.status_code == 500
    assert response.json() == {"message": "Internal Server Error", "status": 500}
