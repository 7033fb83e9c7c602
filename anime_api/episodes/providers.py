"""HTTP clients for the upstream episode, image and metadata providers."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from anime_api.episodes.schemas import (
    AnimeInformation,
    AnimeMetadata,
    Episode,
    EpisodeImages,
    FallbackEpisode,
    PrimaryEpisodesResponse,
)
from anime_api.exceptions import ProviderError
from anime_api.settings import Settings

logger = logging.getLogger(__name__)

_episode_images_adapter = TypeAdapter(list[EpisodeImages])
_fallback_episodes_adapter = TypeAdapter(list[FallbackEpisode])


def build_http_client(settings: Settings) -> httpx.AsyncClient:
    """Shared async client used for every outbound request."""
    return httpx.AsyncClient(
        timeout=settings.http_timeout_seconds,
        follow_redirects=True,
        headers={"User-Agent": "anime-episodes-api/1.0", "Accept": "application/json"},
    )


async def _get_json(
    client: httpx.AsyncClient,
    provider: str,
    url: str,
    timeout: Optional[float] = None,
) -> Any:
    """GET url and decode its JSON body, raising ProviderError on any failure."""
    kwargs = {"timeout": timeout} if timeout is not None else {}
    logger.debug(f"GET {url}")
    try:
        response = await client.get(url, **kwargs)
        response.raise_for_status()
        return response.json()
    except httpx.HTTPStatusError as e:
        raise ProviderError(provider, f"HTTP {e.response.status_code} from {url}") from e
    except httpx.HTTPError as e:
        raise ProviderError(provider, f"request to {url} failed: {e!r}") from e
    except ValueError as e:
        raise ProviderError(provider, f"invalid JSON from {url}") from e


def _parse(provider: str, model: type[BaseModel] | TypeAdapter, payload: Any):
    if payload is None:
        raise ProviderError(provider, "no data")
    try:
        if isinstance(model, TypeAdapter):
            return model.validate_python(payload)
        return model.model_validate(payload)
    except ValidationError as e:
        raise ProviderError(provider, f"unexpected response shape: {e.error_count()} errors") from e


class ProviderClient:
    """Fetches and validates upstream payloads for a single anime."""

    def __init__(self, client: httpx.AsyncClient, settings: Settings):
        self.client = client
        self.settings = settings

    async def fetch_episode_images(self, anime_id: str) -> list[EpisodeImages]:
        """Per-provider episode images and titles from the content metadata source."""
        url = f"{self.settings.anify_base_url}/content-metadata/{anime_id}"
        payload = await _get_json(
            self.client, "content-metadata", url, timeout=self.settings.image_timeout_seconds
        )
        return _parse("content-metadata", _episode_images_adapter, payload)

    async def fetch_episode_metadata(self, anime_id: str) -> AnimeMetadata:
        url = f"{self.settings.metadata_base_url}/api/v1/episodesMetadata/{anime_id}"
        payload = await _get_json(self.client, "episodes-metadata", url)
        return _parse("episodes-metadata", AnimeMetadata, payload)

    async def fetch_information(self, anime_id: str) -> AnimeInformation:
        url = f"{self.settings.metadata_base_url}/api/v1/info/{anime_id}"
        payload = await _get_json(self.client, "info", url)
        return _parse("info", AnimeInformation, payload)

    async def fetch_primary_episodes(self, anime_id: str) -> PrimaryEpisodesResponse:
        """Combined info+episodes endpoint of the primary provider."""
        url = f"{self.settings.anify_base_url}/info/{anime_id}?fields=[episodes]"
        payload = await _get_json(self.client, "anify", url)
        return _parse("anify", PrimaryEpisodesResponse, payload)

    async def fetch_fallback_episodes(self, anime_id: str) -> list[Episode]:
        """Episode list of the fallback provider, converted to Episode."""
        url = f"{self.settings.consumet_api}/meta/anilist/episodes/{anime_id}"
        payload = await _get_json(self.client, "consumet", url)
        episodes = _parse("consumet", _fallback_episodes_adapter, payload)
        return [convert_fallback_episode(episode) for episode in episodes]


def convert_fallback_episode(episode: FallbackEpisode) -> Episode:
    """Map the fallback provider's episode shape onto Episode."""
    return Episode(
        id=episode.id,
        img=episode.image,
        title=episode.title,
        has_dub=episode.has_dub,
        number=episode.number,
        rating=None,
        is_filler=episode.is_filler,
        updated_at=_air_date_timestamp(episode.air_date),
        description=episode.description,
    )


def _air_date_timestamp(air_date: Optional[str]) -> float:
    """Milliseconds since epoch for an ISO air date, 0 when missing or unparseable."""
    if not air_date:
        return 0
    try:
        parsed = datetime.fromisoformat(air_date.replace("Z", "+00:00"))
    except ValueError:
        return 0
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp() * 1000
