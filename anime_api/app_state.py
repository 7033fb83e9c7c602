"""
Application state container.

Holds the runtime resources shared across requests: the outbound HTTP
client, the cache backend and the episode aggregator built on top of them.
Resources are created once in the FastAPI lifespan and closed on shutdown.

Usage:
    # In lifespan function:
    state = init_app_state()
    await state.startup(settings)
    app.state.app_state = state

    # In endpoints (via dependency):
    def get_app_state(request: Request) -> AppState:
        return request.app.state.app_state
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import httpx

from anime_api import __version__
from anime_api.cache import Cache, create_cache
from anime_api.config import DEFAULT_CACHE_TTL_SECONDS
from anime_api.episodes.aggregator import EpisodeAggregator
from anime_api.episodes.providers import ProviderClient, build_http_client

if TYPE_CHECKING:
    from anime_api.settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class AppState:
    """
    Container for all application runtime state.

    Attributes:
        http_client: Shared async client for upstream providers
        cache: Cache backend memoizing aggregated episodes
        aggregator: Episode aggregator bound to the HTTP client
        cache_ttl_seconds: Lifetime of cached episode data
        is_initialized: Whether all components have been created
    """

    http_client: httpx.AsyncClient | None = None
    cache: Cache | None = None
    aggregator: EpisodeAggregator | None = None
    cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS
    is_initialized: bool = False

    async def startup(self, settings: "Settings") -> None:
        """Create the HTTP client, cache backend and aggregator."""
        self.http_client = build_http_client(settings)
        self.cache = create_cache(settings.redis_url)
        self.aggregator = EpisodeAggregator(ProviderClient(self.http_client, settings))
        self.cache_ttl_seconds = settings.cache_ttl_seconds
        self.is_initialized = True

    async def shutdown(self) -> None:
        """Release the HTTP client and cache connections."""
        if self.http_client is not None:
            await self.http_client.aclose()
        if self.cache is not None:
            await self.cache.close()
        self.is_initialized = False

    async def get_health_status(self) -> dict[str, Any]:
        """
        Generate health check status for all components.

        Returns:
            Dictionary with status of the HTTP client and cache backend
        """
        status = {
            "status": "ok",
            "version": __version__,
            "services": {}
        }

        if self.http_client is not None and not self.http_client.is_closed:
            status["services"]["http_client"] = {"status": "ok"}
        else:
            status["services"]["http_client"] = {"status": "error", "error": "HTTP client not available"}
            status["status"] = "degraded"

        if self.cache is not None and await self.cache.ping():
            status["services"]["cache"] = {"status": "ok", "backend": self.cache.name}
        else:
            status["services"]["cache"] = {"status": "error", "error": "Cache not available"}
            status["status"] = "degraded"

        return status


# Singleton instance for direct imports (use sparingly - prefer dependency injection)
_app_state: AppState | None = None


def get_app_state() -> AppState:
    """
    Get the global AppState instance.

    Raises:
        RuntimeError: If AppState hasn't been initialized
    """
    if _app_state is None:
        raise RuntimeError("AppState not initialized. Call init_app_state() first.")
    return _app_state


def init_app_state() -> AppState:
    """Initialize the global AppState instance. Called once during startup."""
    global _app_state
    _app_state = AppState()
    return _app_state
