"""TTL caches for upstream data.

Each entry carries its own expiry. Reads of an expired entry evict it and
report a miss, so callers never see stale data. Values must be JSON-compatible
so that the in-memory and Redis backends are interchangeable.
"""

import json
import logging
import time
from typing import Any, Callable, Protocol, runtime_checkable

import redis.asyncio as redis

from propcast.config import settings

logger = logging.getLogger(__name__)

KEY_PREFIX = "propcast"


@runtime_checkable
class DataCache(Protocol):
    async def get(self, key: str) -> Any | None:
        """Return the cached value, or None if missing or expired."""
        ...

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        """Store a value that expires after ttl_seconds."""
        ...

    async def delete(self, key: str) -> None:
        """Drop a key if present."""
        ...


class MemoryCache:
    """Process-local cache. Unbounded; entries leave only by expiry or delete."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, tuple[Any, float]] = {}

    async def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        logger.debug("Cache hit: %s", key)
        return value

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        self._entries[key] = (value, self._clock() + ttl_seconds)

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)


class RedisCache:
    """Shared cache backed by Redis SETEX. Redis outages behave as misses."""

    def __init__(self, client: redis.Redis | None = None, url: str | None = None):
        self._client = client
        self._url = url or settings.redis_url

    def _redis(self) -> redis.Redis:
        if self._client is None:
            self._client = redis.from_url(self._url, decode_responses=True)
        return self._client

    @staticmethod
    def _key(key: str) -> str:
        return f"{KEY_PREFIX}:{key}"

    async def get(self, key: str) -> Any | None:
        try:
            raw = await self._redis().get(self._key(key))
        except redis.RedisError as e:
            logger.warning("Redis unavailable, skipping cache read for %s: %s", key, e)
            return None
        if raw is None:
            return None
        try:
            value = json.loads(raw)
        except ValueError as e:
            logger.warning("Discarding undecodable cache entry for %s: %s", key, e)
            return None
        logger.debug("Cache hit: %s", key)
        return value

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        try:
            await self._redis().setex(self._key(key), ttl_seconds, json.dumps(value))
        except redis.RedisError as e:
            logger.warning("Failed to write cache for %s: %s", key, e)

    async def delete(self, key: str) -> None:
        try:
            await self._redis().delete(self._key(key))
        except redis.RedisError as e:
            logger.warning("Failed to delete cache key %s: %s", key, e)


def build_cache(backend: str | None = None) -> DataCache:
    """Create the cache configured by settings.cache_backend."""
    backend = backend or settings.cache_backend
    if backend == "redis":
        return RedisCache()
    if backend == "memory":
        return MemoryCache()
    raise ValueError(f"Unknown cache backend: {backend}")
