"""
Pytest configuration and shared fixtures.

Upstream providers are replaced by an in-process httpx.MockTransport so no
test touches the network; FakeUpstream records every request it serves.
"""
import os
import sys

import httpx
import pytest

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..'))
sys.path.insert(0, PROJECT_ROOT)

# Force the in-memory cache backend regardless of the developer environment
os.environ.pop("REDIS_URL", None)

from anime_api.settings import Settings

ANIME_ID = "21"

ANIFY = "api.anify.tv"
METADATA = "metadata.test"
CONSUMET = "consumet.test"


def episode_images_payload():
    return [
        {
            "providerId": "tvdb",
            "data": [
                {"id": "t1", "number": 1, "img": "https://img.test/tvdb-1.jpg",
                 "title": "Premiere", "description": "The crew sets sail."},
                {"id": "t2", "number": 2, "img": "https://img.test/tvdb-2.jpg",
                 "title": "The Hunter", "description": None},
            ],
        },
        {
            "providerId": "kitsu",
            "data": [
                {"id": "k1", "number": 1, "img": "https://img.test/kitsu-1.jpg",
                 "title": "Kitsu Premiere", "description": "Kitsu text."},
            ],
        },
    ]


def episode_metadata_payload():
    return {
        "metadatas": [
            {"number": 1, "title": "Meta One", "fullTitle": "Meta One Full",
             "thumbnail": "https://img.test/meta-1.jpg"},
            {"number": 3, "title": "Meta Three", "fullTitle": "Meta Three Full",
             "thumbnail": "https://img.test/meta-3.jpg"},
        ],
        "title": {"english": "One Piece", "romaji": "One Piece", "native": "ワンピース"},
    }


def information_payload():
    return {
        "id": ANIME_ID,
        "coverImage": "https://img.test/cover.jpg",
        "title": {"english": "One Piece", "romaji": "One Piece", "native": "ワンピース"},
    }


def primary_payload():
    def episode(number, title, description=None, img=None):
        return {
            "id": f"ep-{number}", "img": img, "title": title, "hasDub": False,
            "number": number, "rating": None, "isFiller": False,
            "updatedAt": 1700000000000, "description": description,
        }

    return {
        "episodes": {
            "latest": {"updatedAt": 1700000000000, "latestTitle": "EP3", "latestEpisode": 3},
            "data": [
                {"providerId": "zoro", "episodes": [
                    episode(1, "EP1"),
                    episode(2, "The Beginning", description="Raw description."),
                    episode(3, "EP3"),
                ]},
                {"providerId": "gogoanime", "episodes": [episode(1, "EP1")]},
            ],
        }
    }


def fallback_payload():
    return [
        {"id": "c-1", "title": "Romance Dawn", "number": 1, "description": None,
         "image": "https://img.test/c-1.jpg", "airDate": "1999-10-20T00:00:00Z"},
        {"id": "c-4", "title": None, "number": 4, "description": "Fallback text.",
         "image": None, "airDate": None},
    ]


class FakeUpstream:
    """MockTransport handler serving canned provider payloads."""

    def __init__(self):
        self.routes = {
            f"{ANIFY}/content-metadata/{ANIME_ID}": episode_images_payload,
            f"{METADATA}/api/v1/episodesMetadata/{ANIME_ID}": episode_metadata_payload,
            f"{METADATA}/api/v1/info/{ANIME_ID}": information_payload,
            f"{ANIFY}/info/{ANIME_ID}": primary_payload,
            f"{CONSUMET}/meta/anilist/episodes/{ANIME_ID}": fallback_payload,
        }
        self.failures = {}
        self.calls = []

    def fail(self, route: str, error=None):
        """Make route fail with an exception, or with HTTP 500 when error is None."""
        self.failures[route] = error

    def __call__(self, request: httpx.Request) -> httpx.Response:
        route = f"{request.url.host}{request.url.path}"
        self.calls.append(route)
        if route in self.failures:
            error = self.failures[route]
            if error is not None:
                raise error
            return httpx.Response(500, json={"error": "upstream down"})
        factory = self.routes.get(route)
        if factory is None:
            return httpx.Response(404, json={"error": "not found"})
        return httpx.Response(200, json=factory())

    def calls_to(self, route: str) -> int:
        return self.calls.count(route)


IMAGES_ROUTE = f"{ANIFY}/content-metadata/{ANIME_ID}"
METADATA_ROUTE = f"{METADATA}/api/v1/episodesMetadata/{ANIME_ID}"
INFO_ROUTE = f"{METADATA}/api/v1/info/{ANIME_ID}"
PRIMARY_ROUTE = f"{ANIFY}/info/{ANIME_ID}"
FALLBACK_ROUTE = f"{CONSUMET}/meta/anilist/episodes/{ANIME_ID}"


@pytest.fixture()
def test_settings():
    return Settings(
        _env_file=None,
        anify_base_url=f"https://{ANIFY}",
        metadata_base_url=f"http://{METADATA}/",
        consumet_api=f"http://{CONSUMET}",
        redis_url=None,
    )


@pytest.fixture()
def upstream():
    return FakeUpstream()


@pytest.fixture()
def mock_http_client(upstream):
    return httpx.AsyncClient(transport=httpx.MockTransport(upstream))
