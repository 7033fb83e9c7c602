"""Pydantic schemas for upstream provider payloads and episode responses."""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _Upstream(BaseModel):
    """Base for upstream payloads: unknown fields are ignored, aliases accepted."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)


class Episode(_Upstream):
    """Raw episode as produced by an episode-list provider."""

    id: str
    img: Optional[str] = None
    title: Optional[str] = None
    has_dub: bool = Field(default=False, alias="hasDub")
    number: int
    rating: Optional[float] = None
    is_filler: bool = Field(default=False, alias="isFiller")
    updated_at: float = Field(default=0, alias="updatedAt")
    description: Optional[str] = None

    @field_validator("has_dub", "is_filler", mode="before")
    @classmethod
    def null_flags(cls, v):
        return False if v is None else v

    @field_validator("updated_at", mode="before")
    @classmethod
    def null_timestamp(cls, v):
        return 0 if v is None else v

    @field_validator("rating", mode="before")
    @classmethod
    def unrated(cls, v):
        try:
            return None if v is None else float(v)
        except (TypeError, ValueError):
            return None


class ProviderEpisodes(_Upstream):
    """Episodes of a single provider in the primary provider response."""

    provider_id: str = Field(alias="providerId")
    episodes: list[Episode] = []

    @field_validator("episodes", mode="before")
    @classmethod
    def null_episodes(cls, v):
        return v or []


class EpisodesData(_Upstream):
    data: list[ProviderEpisodes] = []

    @field_validator("data", mode="before")
    @classmethod
    def null_data(cls, v):
        return v or []


class PrimaryEpisodesResponse(_Upstream):
    """Combined info+episodes response of the primary provider."""

    episodes: EpisodesData


class MetadataEpisode(_Upstream):
    """Episode entry of the image source (content metadata)."""

    id: Optional[str] = None
    number: int
    img: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None


class EpisodeImages(_Upstream):
    """Image source bundle: per-provider episode metadata."""

    provider_id: str = Field(alias="providerId")
    data: list[MetadataEpisode] = []


class EpisodeMetadata(_Upstream):
    number: int
    title: Optional[str] = None
    full_title: Optional[str] = Field(default=None, alias="fullTitle")
    thumbnail: Optional[str] = None


class AnimeTitle(_Upstream):
    english: Optional[str] = None
    romaji: Optional[str] = None
    native: Optional[str] = None

    def preferred(self) -> Optional[str]:
        """First non-null of English, Romaji, Native."""
        return next((t for t in (self.english, self.romaji, self.native) if t is not None), None)


class AnimeMetadata(_Upstream):
    """Per-episode thumbnails and titles, used as a fallback data source."""

    metadatas: list[EpisodeMetadata] = []
    title: Optional[AnimeTitle] = None

    @field_validator("metadatas", mode="before")
    @classmethod
    def null_metadatas(cls, v):
        return v or []


class AnimeInformation(_Upstream):
    cover_image: Optional[str] = Field(default=None, alias="coverImage")
    title: Optional[AnimeTitle] = None


class FallbackEpisode(_Upstream):
    """Episode shape of the fallback provider."""

    id: str
    title: Optional[str] = None
    number: int
    description: Optional[str] = None
    image: Optional[str] = None
    air_date: Optional[str] = Field(default=None, alias="airDate")
    is_filler: bool = Field(default=False, alias="isFiller")
    has_dub: bool = Field(default=False, alias="hasDub")

    @field_validator("has_dub", "is_filler", mode="before")
    @classmethod
    def null_flags(cls, v):
        return False if v is None else v


class MergedEpisode(BaseModel):
    """Normalized episode returned to API clients."""

    id: str
    img: Optional[str] = None
    title: str
    description: str
    number: int


class ProviderBundle(BaseModel):
    """Normalized episodes of one content source."""

    model_config = ConfigDict(populate_by_name=True)

    episodes: list[MergedEpisode]
    provider_id: str = Field(alias="providerId")


class ErrorResponse(BaseModel):
    message: str
    status: int
