"""Tests for the cache backends.

RedisCache is tested against a mocked async Redis client.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from cms_gateway.config import Settings
from cms_gateway.core.exceptions import CacheError
from cms_gateway.services.cache import (
    Cache,
    NoOpCache,
    RedisCache,
    connect_cache,
)

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def mock_redis() -> MagicMock:
    """Create a mock async Redis client."""
    redis = MagicMock()
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock(return_value=True)
    redis.delete = AsyncMock(return_value=1)
    redis.exists = AsyncMock(return_value=0)
    redis.scan = AsyncMock(return_value=(0, []))
    redis.ping = AsyncMock(return_value=True)
    redis.aclose = AsyncMock(return_value=None)
    return redis


@pytest.fixture
def cache(mock_redis: MagicMock) -> RedisCache:
    return RedisCache(mock_redis, prefix="cms:", ttl_jitter=0)


# =============================================================================
# RedisCache Tests
# =============================================================================


class TestRedisCacheGet:
    """Tests for RedisCache.get()."""

    @pytest.mark.asyncio
    async def test_miss_returns_none(
        self, cache: RedisCache, mock_redis: MagicMock
    ) -> None:
        assert await cache.get("cms_brands") is None
        mock_redis.get.assert_called_once_with("cms:cms_brands")

    @pytest.mark.asyncio
    async def test_hit_returns_bytes(
        self, cache: RedisCache, mock_redis: MagicMock
    ) -> None:
        mock_redis.get.return_value = b'{"data":[]}'

        assert await cache.get("cms_brands") == b'{"data":[]}'

    @pytest.mark.asyncio
    async def test_empty_payload_is_a_hit(
        self, cache: RedisCache, mock_redis: MagicMock
    ) -> None:
        """An empty stored value is distinct from a miss."""
        mock_redis.get.return_value = b""

        result = await cache.get("cms_brands")

        assert result == b""
        assert result is not None

    @pytest.mark.asyncio
    async def test_redis_error_raises_cache_error(
        self, cache: RedisCache, mock_redis: MagicMock
    ) -> None:
        mock_redis.get.side_effect = RedisConnectionError("connection refused")

        with pytest.raises(CacheError, match="read failed"):
            await cache.get("cms_brands")


class TestRedisCacheSet:
    """Tests for RedisCache.set()."""

    @pytest.mark.asyncio
    async def test_set_uses_prefixed_key_and_ttl(
        self, cache: RedisCache, mock_redis: MagicMock
    ) -> None:
        await cache.set("graphql:brands:abc", b"{}", ttl=300)

        mock_redis.set.assert_called_once_with("cms:graphql:brands:abc", b"{}", ex=300)

    @pytest.mark.asyncio
    async def test_redis_error_raises_cache_error(
        self, cache: RedisCache, mock_redis: MagicMock
    ) -> None:
        mock_redis.set.side_effect = RedisConnectionError("down")

        with pytest.raises(CacheError, match="write failed"):
            await cache.set("cms_brands", b"{}", ttl=60)


class TestTTLJitter:
    """Tests for TTL jitter on writes."""

    def test_jitter_within_bounds(self, mock_redis: MagicMock) -> None:
        cache = RedisCache(mock_redis, ttl_jitter=0.1)

        for _ in range(100):
            ttl = cache._jitter_ttl(1000)
            assert 900 <= ttl <= 1100

    def test_jitter_disabled(self, cache: RedisCache) -> None:
        assert cache._jitter_ttl(1000) == 1000

    def test_never_below_one_second(self, mock_redis: MagicMock) -> None:
        cache = RedisCache(mock_redis, ttl_jitter=0.5)

        for _ in range(50):
            assert cache._jitter_ttl(1) >= 1


class TestRedisCacheDeletePattern:
    """Tests for SCAN-based pattern deletion."""

    @pytest.mark.asyncio
    async def test_deletes_every_scan_page(
        self, cache: RedisCache, mock_redis: MagicMock
    ) -> None:
        mock_redis.scan.side_effect = [
            (17, [b"cms:graphql:brands:a", b"cms:graphql:brands:b"]),
            (42, []),
            (0, [b"cms:graphql:brands:c"]),
        ]
        mock_redis.delete.side_effect = [2, 1]

        deleted = await cache.delete_pattern("graphql:brands:*")

        assert deleted == 3
        assert mock_redis.scan.await_count == 3
        first_scan = mock_redis.scan.await_args_list[0]
        assert first_scan.kwargs == {
            "cursor": 0,
            "match": "cms:graphql:brands:*",
            "count": 100,
        }
        assert mock_redis.scan.await_args_list[1].kwargs["cursor"] == 17
        assert mock_redis.delete.await_count == 2

    @pytest.mark.asyncio
    async def test_no_matches(self, cache: RedisCache, mock_redis: MagicMock) -> None:
        assert await cache.delete_pattern("cms_cities*") == 0
        mock_redis.delete.assert_not_called()

    @pytest.mark.asyncio
    async def test_redis_error_raises_cache_error(
        self, cache: RedisCache, mock_redis: MagicMock
    ) -> None:
        mock_redis.scan.side_effect = RedisConnectionError("down")

        with pytest.raises(CacheError):
            await cache.delete_pattern("*")


class TestRedisCacheDeleteAndExists:
    @pytest.mark.asyncio
    async def test_delete_prefixes_keys(
        self, cache: RedisCache, mock_redis: MagicMock
    ) -> None:
        await cache.delete("a", "b")

        mock_redis.delete.assert_called_once_with("cms:a", "cms:b")

    @pytest.mark.asyncio
    async def test_delete_nothing_skips_redis(
        self, cache: RedisCache, mock_redis: MagicMock
    ) -> None:
        await cache.delete()

        mock_redis.delete.assert_not_called()

    @pytest.mark.asyncio
    async def test_exists(self, cache: RedisCache, mock_redis: MagicMock) -> None:
        mock_redis.exists.return_value = 1

        assert await cache.exists("cms_brands") is True
        mock_redis.exists.assert_called_once_with("cms:cms_brands")


# =============================================================================
# NoOpCache Tests
# =============================================================================


class TestNoOpCache:
    """Tests for the disabled cache."""

    @pytest.mark.asyncio
    async def test_always_misses(self) -> None:
        cache = NoOpCache()

        await cache.set("cms_brands", b"{}", ttl=60)

        assert await cache.get("cms_brands") is None
        assert await cache.exists("cms_brands") is False
        assert await cache.delete_pattern("*") == 0

    def test_satisfies_protocol(self, mock_redis: MagicMock) -> None:
        assert isinstance(NoOpCache(), Cache)
        assert isinstance(RedisCache(mock_redis), Cache)


# =============================================================================
# connect_cache Tests
# =============================================================================


class TestConnectCache:
    """Tests for backend selection at startup."""

    @pytest.mark.asyncio
    async def test_disabled_returns_noop(self) -> None:
        settings = Settings(_env_file=None, cache_enabled=False)  # type: ignore[call-arg]

        redis, cache = await connect_cache(settings)

        assert redis is None
        assert isinstance(cache, NoOpCache)

    @pytest.mark.asyncio
    async def test_unreachable_redis_falls_back_to_noop(
        self, mock_redis: MagicMock
    ) -> None:
        settings = Settings(_env_file=None, cache_enabled=True)  # type: ignore[call-arg]
        mock_redis.ping.side_effect = RedisConnectionError("refused")

        with patch("cms_gateway.services.cache.Redis.from_url", return_value=mock_redis):
            redis, cache = await connect_cache(settings)

        assert redis is None
        assert isinstance(cache, NoOpCache)
        mock_redis.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_reachable_redis_returns_redis_cache(
        self, mock_redis: MagicMock
    ) -> None:
        settings = Settings(  # type: ignore[call-arg]
            _env_file=None, cache_enabled=True, cache_prefix="gw:"
        )

        with patch("cms_gateway.services.cache.Redis.from_url", return_value=mock_redis):
            redis, cache = await connect_cache(settings)

        assert redis is mock_redis
        assert isinstance(cache, RedisCache)
        assert cache.prefix == "gw:"
