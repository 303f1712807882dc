"""Page-cache invalidation keyed by route path."""

from __future__ import annotations

from typing import Protocol

import redis.asyncio as redis
import structlog

log = structlog.get_logger()


class RouteCache(Protocol):
    async def revalidate(self, path: str) -> None: ...


class RedisRouteCache:
    """Drops the cached render of a route and tells frontends about it."""

    def __init__(self, client: redis.Redis, key_prefix: str, channel: str):
        self._client = client
        self._key_prefix = key_prefix
        self._channel = channel

    async def revalidate(self, path: str) -> None:
        await self._client.delete(f"{self._key_prefix}{path}")
        await self._client.publish(self._channel, path)


async def revalidate_paths(cache: RouteCache, *paths: str) -> None:
    """Invalidate each path. Failures are logged, never raised."""
    for path in paths:
        try:
            await cache.revalidate(path)
        except Exception:
            log.warning("cache.revalidate_failed", path=path, exc_info=True)
