"""Route cache: rendered views keyed by route path, dropped after mutations"""

import time
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple

from redis import asyncio as aioredis

from app.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

KEY_PREFIX = "route:"
GENERATION_PREFIX = "route-gen:"


def cache_key(path: str, generation: int, variant: str = "") -> str:
    """Key for one generation of a route, with an optional variant such as a query string"""
    key = f"{KEY_PREFIX}{path}@{generation}"
    return f"{key}?{variant}" if variant else key


class RouteCache(ABC):
    """Cached renderings of routes.

    Every route has a generation number that ``invalidate`` bumps. Entries are
    stored under the generation current when the reader started, so a page
    rendered before a mutation can never be served after it. A route may be
    cached under several variants (one per query string); ``invalidate``
    drops all of them.
    """

    @abstractmethod
    async def generation(self, path: str) -> int:
        ...

    @abstractmethod
    async def _get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    async def _set(self, key: str, value: str, ttl: int) -> None:
        ...

    @abstractmethod
    async def invalidate(self, path: str) -> None:
        ...

    default_ttl: int = 300

    async def get(self, path: str, variant: str = "", generation: Optional[int] = None) -> Optional[str]:
        if generation is None:
            generation = await self.generation(path)
        return await self._get(cache_key(path, generation, variant))

    async def set(
        self,
        path: str,
        value: str,
        variant: str = "",
        ttl: Optional[int] = None,
        generation: Optional[int] = None,
    ) -> None:
        if generation is None:
            generation = await self.generation(path)
        await self._set(
            cache_key(path, generation, variant),
            value,
            ttl if ttl is not None else self.default_ttl,
        )

    async def close(self) -> None:
        pass


class MemoryRouteCache(RouteCache):
    """Per-process cache, used when no Redis URL is configured.

    Holds at most ``max_entries`` values; expired entries are swept on every
    write and the oldest entry is evicted when full.
    """

    def __init__(self, default_ttl: int = 300, max_entries: int = 1024):
        self.default_ttl = default_ttl
        self.max_entries = max_entries
        self._entries: Dict[str, Tuple[float, str]] = {}
        self._generations: Dict[str, int] = {}

    async def generation(self, path: str) -> int:
        return self._generations.get(path, 0)

    async def _get(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if expires_at <= time.monotonic():
            del self._entries[key]
            return None
        return value

    async def _set(self, key: str, value: str, ttl: int) -> None:
        now = time.monotonic()
        self._entries.pop(key, None)
        self._sweep(now)
        while len(self._entries) >= self.max_entries:
            del self._entries[next(iter(self._entries))]
        self._entries[key] = (now + ttl, value)

    def _sweep(self, now: float) -> None:
        expired = [k for k, (expires_at, _) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]

    async def invalidate(self, path: str) -> None:
        self._generations[path] = self._generations.get(path, 0) + 1
        prefix = f"{KEY_PREFIX}{path}@"
        stale = [k for k in self._entries if k.startswith(prefix)]
        for key in stale:
            del self._entries[key]
        logger.debug("Route cache invalidated", extra={"path": path, "keys": len(stale)})


class RedisRouteCache(RouteCache):
    """Cache shared by all workers through Redis"""

    def __init__(self, client: aioredis.Redis, default_ttl: int = 300):
        self.client = client
        self.default_ttl = default_ttl

    @classmethod
    def from_url(cls, url: str, default_ttl: int = 300) -> "RedisRouteCache":
        return cls(aioredis.from_url(url, decode_responses=True), default_ttl)

    async def generation(self, path: str) -> int:
        return int(await self.client.get(f"{GENERATION_PREFIX}{path}") or 0)

    async def _get(self, key: str) -> Optional[str]:
        return await self.client.get(key)

    async def _set(self, key: str, value: str, ttl: int) -> None:
        await self.client.set(key, value, ex=ttl)

    async def invalidate(self, path: str) -> None:
        await self.client.incr(f"{GENERATION_PREFIX}{path}")
        # Older generations are unreachable now; delete them rather than wait for the TTL
        keys: List[str] = []
        async for key in self.client.scan_iter(match=f"{KEY_PREFIX}{path}@*"):
            keys.append(key)
        if keys:
            await self.client.delete(*keys)
        logger.debug("Route cache invalidated", extra={"path": path, "keys": len(keys)})

    async def close(self) -> None:
        await self.client.aclose()


_route_cache: Optional[RouteCache] = None


def get_route_cache() -> RouteCache:
    """Process-wide route cache, built from settings on first use"""
    global _route_cache
    if _route_cache is None:
        if settings.REDIS_URL:
            _route_cache = RedisRouteCache.from_url(settings.REDIS_URL, settings.ROUTE_CACHE_TTL)
        else:
            _route_cache = MemoryRouteCache(settings.ROUTE_CACHE_TTL, settings.ROUTE_CACHE_MAX_ENTRIES)
    return _route_cache


async def close_route_cache() -> None:
    global _route_cache
    if _route_cache is not None:
        await _route_cache.close()
        _route_cache = None
