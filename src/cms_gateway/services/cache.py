"""Cache backends for CMS payloads.

Payloads are opaque bytes (the raw upstream JSON); services decode them
after retrieval. Two backends satisfy the ``Cache`` protocol:

- ``RedisCache``: Redis with a key namespace, TTL jitter and SCAN-based
  pattern deletion
- ``NoOpCache``: caching disabled (every read misses, writes succeed)

The backend is chosen once at startup and injected into ``CMSClient``;
nothing downstream knows which one it got.

Key Namespace:
    Every key is stored as ``{prefix}{key}`` (default prefix ``cms:``), so
    ``cms_brands:page:1`` lives at ``cms:cms_brands:page:1`` and patterns
    passed to ``delete_pattern`` are scoped to the same namespace.
"""

import random
from typing import Protocol, runtime_checkable

import structlog
from redis.asyncio import Redis
from redis.exceptions import RedisError

from cms_gateway.config import Settings
from cms_gateway.core.exceptions import CacheError

logger = structlog.get_logger(__name__)


@runtime_checkable
class Cache(Protocol):
    """Storage contract used by the CMS client."""

    async def get(self, key: str) -> bytes | None:
        """Return the stored payload, or None on a miss.

        An empty stored payload is returned as ``b""``, not None.
        """
        ...

    async def set(self, key: str, value: bytes, ttl: int) -> None: ...

    async def delete(self, *keys: str) -> None: ...

    async def delete_pattern(self, pattern: str) -> int:
        """Delete every key matching a glob pattern; return how many."""
        ...

    async def exists(self, key: str) -> bool: ...


class RedisCache:
    """Redis-backed cache.

    Usage:
        ```python
        redis = Redis.from_url(settings.redis_url)
        cache = RedisCache(redis, prefix="cms:")
        await cache.set("cms_brands", b"{...}", ttl=300)
        ```
    """

    DEFAULT_PREFIX = "cms:"
    DEFAULT_SCAN_COUNT = 100

    def __init__(
        self,
        redis: Redis,
        prefix: str = DEFAULT_PREFIX,
        ttl_jitter: float = 0.1,
        scan_count: int = DEFAULT_SCAN_COUNT,
    ) -> None:
        """Initialize the cache.

        Args:
            redis: Async Redis client (must not decode responses)
            prefix: Namespace prepended to every key
            ttl_jitter: Relative TTL jitter (0.1 = ±10%); 0 disables it
            scan_count: SCAN page size used by pattern deletion
        """
        self.redis = redis
        self.prefix = prefix
        self.ttl_jitter = ttl_jitter
        self.scan_count = scan_count

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    async def get(self, key: str) -> bytes | None:
        try:
            value = await self.redis.get(self._key(key))
        except RedisError as e:
            raise CacheError(f"Cache read failed: {e}") from e
        if value is None:
            return None
        if isinstance(value, str):
            return value.encode()
        return bytes(value)

    async def set(self, key: str, value: bytes, ttl: int) -> None:
        ttl = self._jitter_ttl(ttl)
        try:
            await self.redis.set(self._key(key), value, ex=ttl)
        except RedisError as e:
            raise CacheError(f"Cache write failed: {e}") from e
        logger.debug("cache_set", cache_key=key, ttl=ttl)

    async def delete(self, *keys: str) -> None:
        if not keys:
            return
        try:
            await self.redis.delete(*(self._key(k) for k in keys))
        except RedisError as e:
            raise CacheError(f"Cache delete failed: {e}") from e

    async def delete_pattern(self, pattern: str) -> int:
        """Delete all keys matching pattern, one SCAN page at a time.

        Args:
            pattern: Glob pattern relative to the prefix (e.g., "cms_brands*")

        Returns:
            Number of keys deleted
        """
        match = self._key(pattern)
        deleted = 0
        cursor = 0
        try:
            while True:
                cursor, keys = await self.redis.scan(
                    cursor=cursor, match=match, count=self.scan_count
                )
                if keys:
                    deleted += await self.redis.delete(*keys)
                if not cursor:
                    break
        except RedisError as e:
            raise CacheError(f"Cache pattern delete failed: {e}") from e

        logger.info("cache_pattern_invalidated", pattern=match, count=deleted)
        return deleted

    async def exists(self, key: str) -> bool:
        try:
            return bool(await self.redis.exists(self._key(key)))
        except RedisError as e:
            raise CacheError(f"Cache exists check failed: {e}") from e

    def _jitter_ttl(self, base_ttl: int) -> int:
        """Add random jitter to prevent cache stampede.

        Args:
            base_ttl: Base TTL in seconds

        Returns:
            Jittered TTL, never below one second
        """
        if self.ttl_jitter <= 0:
            return max(1, int(base_ttl))
        jitter = random.uniform(-self.ttl_jitter, self.ttl_jitter)
        return max(1, int(base_ttl * (1 + jitter)))


class NoOpCache:
    """Cache used when Redis is disabled or unreachable."""

    async def get(self, key: str) -> bytes | None:
        return None

    async def set(self, key: str, value: bytes, ttl: int) -> None:
        return None

    async def delete(self, *keys: str) -> None:
        return None

    async def delete_pattern(self, pattern: str) -> int:
        return 0

    async def exists(self, key: str) -> bool:
        return False


async def connect_cache(settings: Settings) -> tuple[Redis | None, Cache]:
    """Connect to Redis and pick the cache backend.

    Call this in your FastAPI lifespan:
        ```python
        redis, cache = await connect_cache(settings)
        ...
        if redis is not None:
            await redis.aclose()
        ```

    Returns:
        ``(redis, RedisCache)`` when Redis answers a ping, otherwise
        ``(None, NoOpCache)``
    """
    if not settings.cache_enabled:
        logger.info("cache_disabled")
        return None, NoOpCache()

    password = (
        settings.redis_password.get_secret_value() if settings.redis_password else None
    )
    redis = Redis.from_url(
        settings.redis_url,
        password=password,
        socket_timeout=settings.redis_socket_timeout,
        socket_connect_timeout=settings.redis_socket_timeout,
    )
    try:
        await redis.ping()
    except (RedisError, OSError) as e:
        logger.warning("redis_unavailable_caching_disabled", error=str(e))
        await redis.aclose()
        return None, NoOpCache()

    logger.info("redis_connected", redis_url=settings.redis_url)
    cache = RedisCache(
        redis, prefix=settings.cache_prefix, ttl_jitter=settings.cache_ttl_jitter
    )
    return redis, cache
