"""Field-level merge of raw provider episodes with auxiliary metadata sources."""
from __future__ import annotations

from typing import Optional

from anime_api.config import IMAGE_PROVIDER_ID, PLACEHOLDER_TITLE_PREFIX
from anime_api.episodes.schemas import (
    AnimeInformation,
    AnimeMetadata,
    Episode,
    EpisodeImages,
    EpisodeMetadata,
    MergedEpisode,
    MetadataEpisode,
)


def ordinal(number: int) -> str:
    """Ordinal label used in synthesized descriptions: 1st, 2nd, 3rd, then Nth."""
    if number == 1:
        return "1st"
    if number == 2:
        return "2nd"
    if number == 3:
        return "3rd"
    return f"{number}th"


def is_placeholder_title(title: Optional[str]) -> bool:
    """Empty titles and provider placeholders such as "EP1" carry no information."""
    return not title or title.startswith(PLACEHOLDER_TITLE_PREFIX)


def select_image_source(episode_images: list[EpisodeImages]) -> Optional[EpisodeImages]:
    """Prefer the tvdb bundle of the image source, else its first bundle."""
    for bundle in episode_images:
        if bundle.provider_id == IMAGE_PROVIDER_ID:
            return bundle
    return episode_images[0] if episode_images else None


def _find_by_number(items, number: int):
    return next((item for item in items if item.number == number), None)


def resolve_image(
    episode: Episode,
    found_image: Optional[MetadataEpisode],
    found_metadata: Optional[EpisodeMetadata],
    information: AnimeInformation,
) -> Optional[str]:
    candidates = (
        found_image.img if found_image else None,
        found_metadata.thumbnail if found_metadata else None,
        information.cover_image,
        episode.img,
    )
    return next((c for c in candidates if c is not None), None)


def resolve_title(
    episode: Episode,
    found_image: Optional[MetadataEpisode],
    found_metadata: Optional[EpisodeMetadata],
) -> str:
    if not is_placeholder_title(episode.title):
        return episode.title
    if found_image and found_image.title is not None:
        return found_image.title
    if found_metadata and found_metadata.title is not None:
        return found_metadata.title
    return f"Episode {episode.number}"


def resolve_description(
    episode: Episode,
    found_image: Optional[MetadataEpisode],
    information: AnimeInformation,
) -> str:
    if episode.description is not None:
        return episode.description
    if found_image and found_image.description is not None:
        return found_image.description
    anime_title = information.title.preferred() if information.title else None
    if anime_title is None:
        return f"{ordinal(episode.number)} Episode"
    return f"{ordinal(episode.number)} Episode of {anime_title}"


def merge_episode(
    episode: Episode,
    metadata: AnimeMetadata,
    information: AnimeInformation,
    image_source: Optional[EpisodeImages] = None,
) -> MergedEpisode:
    """Resolve image, title and description of one episode by source precedence."""
    found_image = _find_by_number(image_source.data, episode.number) if image_source else None
    found_metadata = _find_by_number(metadata.metadatas, episode.number)

    return MergedEpisode(
        id=episode.id,
        img=resolve_image(episode, found_image, found_metadata, information),
        title=resolve_title(episode, found_image, found_metadata),
        description=resolve_description(episode, found_image, information),
        number=episode.number,
    )


def find_episode_data(
    episodes: list[Episode],
    metadata: AnimeMetadata,
    information: AnimeInformation,
    episode_images: Optional[list[EpisodeImages]] = None,
) -> list[MergedEpisode]:
    """Merge every episode with the auxiliary sources; images are optional."""
    image_source = select_image_source(episode_images) if episode_images else None
    return [merge_episode(e, metadata, information, image_source) for e in episodes]
