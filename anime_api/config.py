"""Application configuration constants."""
from __future__ import annotations

HTTP_INTERNAL_ERROR = 500
INTERNAL_ERROR_MESSAGE = "Internal Server Error"

CACHE_KEY_PREFIX = "episodesData"
DEFAULT_CACHE_TTL_SECONDS = 5 * 60 * 60

IMAGE_PROVIDER_ID = "tvdb"
PRIMARY_ZORO_ID = "zoro"
ANIRISE_PROVIDER_ID = "anirise"
ANIZONE_PROVIDER_ID = "anizone"

PLACEHOLDER_TITLE_PREFIX = "EP"
