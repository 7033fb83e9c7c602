"""Episode aggregation across the primary and fallback episode providers."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from anime_api.config import (
    ANIRISE_PROVIDER_ID,
    ANIZONE_PROVIDER_ID,
    CACHE_KEY_PREFIX,
    PRIMARY_ZORO_ID,
)
from anime_api.episodes.merge import find_episode_data
from anime_api.episodes.providers import ProviderClient
from anime_api.episodes.schemas import (
    AnimeInformation,
    AnimeMetadata,
    EpisodeImages,
    ProviderBundle,
)
from anime_api.exceptions import AggregationError, ProviderError

logger = logging.getLogger(__name__)


def cache_key(anime_id: str) -> str:
    return f"{CACHE_KEY_PREFIX}:{anime_id}"


def map_provider_id(provider_id: str) -> str:
    """Public provider name for a primary provider group."""
    return ANIRISE_PROVIDER_ID if provider_id == PRIMARY_ZORO_ID else ANIZONE_PROVIDER_ID


class EpisodeAggregator:
    """
    Builds normalized per-provider episode lists for an anime.

    Auxiliary sources (episode images, episode metadata, anime info) are
    fetched concurrently. If any of them fails the fetch is retried once
    without the episode images. Episodes come from the primary provider,
    or from the fallback provider when the primary fails.
    """

    def __init__(self, providers: ProviderClient):
        self.providers = providers

    async def aggregate(self, anime_id: str) -> list[dict[str, Any]]:
        """
        Aggregate episodes for anime_id as JSON-ready provider bundles.

        Raises:
            AggregationError: If no provider could supply episodes, or the
                metadata sources are unavailable even without images.
        """
        try:
            episode_images, metadata, information = await asyncio.gather(
                self.providers.fetch_episode_images(anime_id),
                self.providers.fetch_episode_metadata(anime_id),
                self.providers.fetch_information(anime_id),
            )
        except ProviderError as e:
            logger.warning(f"Auxiliary fetch failed for {anime_id}, retrying without episode images: {e}")
            try:
                metadata, information = await asyncio.gather(
                    self.providers.fetch_episode_metadata(anime_id),
                    self.providers.fetch_information(anime_id),
                )
            except ProviderError as retry_error:
                logger.error(f"Metadata sources unavailable for {anime_id}: {retry_error}")
                raise AggregationError(f"metadata unavailable for {anime_id}") from retry_error
            episode_images = None

        bundles = await self._collect_bundles(anime_id, metadata, information, episode_images)
        return [bundle.model_dump(by_alias=True) for bundle in bundles]

    async def _collect_bundles(
        self,
        anime_id: str,
        metadata: AnimeMetadata,
        information: AnimeInformation,
        episode_images: Optional[list[EpisodeImages]],
    ) -> list[ProviderBundle]:
        try:
            primary = await self.providers.fetch_primary_episodes(anime_id)
        except ProviderError as e:
            logger.warning(f"Primary provider failed for {anime_id}, using fallback: {e}")
        else:
            return [
                ProviderBundle(
                    episodes=find_episode_data(group.episodes, metadata, information, episode_images),
                    provider_id=map_provider_id(group.provider_id),
                )
                for group in primary.episodes.data
            ]

        try:
            fallback_episodes = await self.providers.fetch_fallback_episodes(anime_id)
        except ProviderError as e:
            logger.error(f"Error fetching episodes from fallback provider for {anime_id}: {e}")
            raise AggregationError(f"no episode provider available for {anime_id}") from e

        return [
            ProviderBundle(
                episodes=find_episode_data(fallback_episodes, metadata, information, episode_images),
                provider_id=ANIZONE_PROVIDER_ID,
            )
        ]
