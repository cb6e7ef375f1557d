"""
Redis cache for KPI responses.

Provides:
- Async Redis client (redis.asyncio)
- JSON serialization of cached values
- TTL-based expiration (the KPI freshness window)
- Pattern-based invalidation
- Graceful no-op fallback when Redis is disabled or unreachable

Usage:
    from core.cache import cache

    await cache.set("kpi:1234567890:camp1:7j", payload, ttl=300)
    payload = await cache.get("kpi:1234567890:camp1:7j")
    await cache.invalidate_pattern("kpi:1234567890:*")
"""
import asyncio
import json
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from core.config import CacheConfig, config
from core.observability import Timer, get_logger

logger = get_logger(__name__)

DEFAULT_TTL = 300  # 5 minutes


@dataclass
class CacheStats:
    """Cache statistics for monitoring."""

    hits: int = 0
    misses: int = 0
    errors: int = 0
    sets: int = 0
    invalidations: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return (self.hits / total * 100) if total > 0 else 0.0

    def to_dict(self) -> dict:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "errors": self.errors,
            "sets": self.sets,
            "invalidations": self.invalidations,
            "hit_rate_percent": round(self.hit_rate, 2),
        }


class RedisCache:
    """
    Async Redis cache that degrades to a no-op.

    Every operation reports a miss / False / 0 instead of raising when
    Redis is not connected, so callers never need a second code path.
    """

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        enabled: bool = True,
        default_ttl: int = DEFAULT_TTL,
    ):
        self.url = url
        self.enabled = enabled
        self.default_ttl = default_ttl
        self._client = None
        self._connected = False
        self._stats = CacheStats()
        self._lock = asyncio.Lock()

    @classmethod
    def from_config(cls, cache_config: CacheConfig) -> "RedisCache":
        return cls(
            url=cache_config.redis_url,
            enabled=cache_config.enabled,
            default_ttl=cache_config.kpi_ttl_seconds,
        )

    async def connect(self) -> bool:
        """
        Connect to Redis.

        Returns:
            True if connected, False if disabled or unreachable
        """
        if not self.enabled:
            logger.info("Redis cache disabled by configuration")
            return False

        import redis.asyncio as redis
        from redis.exceptions import RedisError

        async with self._lock:
            if self._connected:
                return True
            try:
                self._client = redis.from_url(
                    self.url,
                    encoding="utf-8",
                    decode_responses=True,
                    socket_timeout=5.0,
                    socket_connect_timeout=5.0,
                )
                await self._client.ping()
            except (RedisError, OSError) as e:
                logger.warning(f"Redis connection failed: {e}")
                self._client = None
                self._connected = False
                return False

            self._connected = True
            logger.info(f"Redis connected: {self.url}")
            return True

    async def disconnect(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
            self._connected = False
            logger.info("Redis disconnected")

    @property
    def is_connected(self) -> bool:
        return self._connected and self._client is not None

    async def get(self, key: str) -> Optional[Any]:
        """Cached value, or None if missing, expired or unavailable."""
        if not self.is_connected:
            self._stats.misses += 1
            return None

        try:
            with Timer("cache_get"):
                value = await self._client.get(key)
        except Exception as e:
            self._stats.errors += 1
            logger.debug(f"Cache get error for {key}: {e}")
            return None

        if value is None:
            self._stats.misses += 1
            return None

        self._stats.hits += 1
        return json.loads(value)

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Store a JSON-serializable value for ttl seconds (default_ttl if omitted)."""
        if not self.is_connected:
            return False

        try:
            with Timer("cache_set"):
                await self._client.setex(key, ttl or self.default_ttl, json.dumps(value, default=str))
        except Exception as e:
            self._stats.errors += 1
            logger.debug(f"Cache set error for {key}: {e}")
            return False

        self._stats.sets += 1
        return True

    async def delete(self, key: str) -> bool:
        if not self.is_connected:
            return False

        try:
            await self._client.delete(key)
        except Exception as e:
            self._stats.errors += 1
            logger.debug(f"Cache delete error for {key}: {e}")
            return False

        self._stats.invalidations += 1
        return True

    async def invalidate_pattern(self, pattern: str) -> int:
        """
        Delete every key matching a glob pattern (e.g. "kpi:*").

        Returns:
            Number of keys deleted
        """
        if not self.is_connected:
            return 0

        deleted = 0
        try:
            # SCAN instead of KEYS to avoid blocking Redis
            async for key in self._client.scan_iter(match=pattern, count=100):
                await self._client.delete(key)
                deleted += 1
        except Exception as e:
            self._stats.errors += 1
            logger.debug(f"Cache invalidate pattern error for {pattern}: {e}")
            return deleted

        if deleted:
            self._stats.invalidations += deleted
            logger.debug(f"Invalidated {deleted} keys matching '{pattern}'")
        return deleted

    async def get_or_set(
        self,
        key: str,
        factory: Callable[[], Awaitable[Any]],
        ttl: Optional[int] = None,
    ) -> Any:
        """Cached value, or await factory(), cache and return its result."""
        value = await self.get(key)
        if value is not None:
            return value

        value = await factory()
        await self.set(key, value, ttl)
        return value

    def get_stats(self) -> dict:
        return {
            "enabled": self.enabled,
            "connected": self.is_connected,
            "url": self.url if self.is_connected else None,
            **self._stats.to_dict(),
        }


# Global cache instance
cache = RedisCache.from_config(config.cache)
