"""Key-value cache used to memoize aggregated episode data."""
from __future__ import annotations

import json
import logging
import time
from typing import Any, Awaitable, Callable, Protocol

import redis.asyncio as redis

logger = logging.getLogger(__name__)


class Cache(Protocol):
    """Minimal async cache contract: string values with a TTL."""

    name: str

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str, ttl_seconds: int) -> None: ...

    async def ping(self) -> bool: ...

    async def close(self) -> None: ...


class MemoryCache:
    """
    In-process cache with per-entry expiry. Last write wins.

    Expired entries are dropped when read and on every write, so keys that
    are never requested again do not accumulate.
    """

    name = "memory"

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, tuple[float, str]] = {}

    async def get(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        now = self._clock()
        self._purge_expired(now)
        self._entries[key] = (now + ttl_seconds, value)

    def _purge_expired(self, now: float) -> None:
        expired = [key for key, (expires_at, _) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class RedisCache:
    """Cache backed by Redis; expiry is handled by the server."""

    name = "redis"

    def __init__(self, client: redis.Redis):
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisCache":
        return cls(redis.Redis.from_url(url, decode_responses=True))

    async def get(self, key: str) -> str | None:
        return await self._client.get(key)

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        await self._client.setex(key, ttl_seconds, value)

    async def ping(self) -> bool:
        try:
            return bool(await self._client.ping())
        except redis.RedisError as e:
            logger.warning(f"Redis ping failed: {e}")
            return False

    async def close(self) -> None:
        await self._client.aclose()


def create_cache(redis_url: str | None) -> Cache:
    """Build the Redis cache when a URL is configured, else an in-memory one."""
    if redis_url:
        logger.info("Using Redis cache backend")
        return RedisCache.from_url(redis_url)
    logger.info("REDIS_URL not set, using in-memory cache backend")
    return MemoryCache()


async def get_or_set(
    cache: Cache,
    key: str,
    fetch_data: Callable[[], Awaitable[Any]],
    ttl_seconds: int,
) -> Any:
    """
    Return the cached JSON value for key, or compute, store and return it.

    Exceptions raised by fetch_data propagate and nothing is stored.
    """
    cached = await cache.get(key)
    if cached:
        logger.debug(f"Cache hit for {key}")
        return json.loads(cached)

    fresh = await fetch_data()
    await cache.set(key, json.dumps(fresh), ttl_seconds)
    return fresh
