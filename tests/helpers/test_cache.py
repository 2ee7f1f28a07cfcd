"""
Tests for the cache key generator and both cache backends
"""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
import redis.asyncio as aioredis

from src.helpers.cache import (
    CacheKeyGenerator,
    InMemoryTTLCache,
    RedisCache,
    create_cache,
    make_redis_url,
)
from src.utils.config import Settings


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


# ============================================================================
# KEYS
# ============================================================================

class TestCacheKeyGenerator:

    def test_news_key(self):
        assert CacheKeyGenerator.news("Bank of America", 10) == "news:bank_of_america:10"

    def test_company_search_key_normalizes_whitespace(self):
        assert CacheKeyGenerator.company_search("  Apple   Inc ") == "company_search:apple_inc"

    def test_health_key(self):
        assert CacheKeyGenerator.health("service") == "health:service"


# ============================================================================
# IN-MEMORY
# ============================================================================

class TestInMemoryTTLCache:

    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    def cache(self, clock):
        return InMemoryTTLCache(default_ttl=60, clock=clock)

    @pytest.mark.asyncio
    async def test_get_set(self, cache):
        assert await cache.get("k") is None
        assert await cache.set("k", {"a": 1})
        assert await cache.get("k") == {"a": 1}
        assert await cache.exists("k")

    @pytest.mark.asyncio
    async def test_default_ttl_expiry(self, cache, clock):
        await cache.set("k", "v")

        clock.now = 59.9
        assert await cache.get("k") == "v"

        clock.now = 60
        assert await cache.get("k") is None
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_explicit_ttl(self, cache, clock):
        await cache.set("k", "v", ttl=5)

        clock.now = 5
        assert not await cache.exists("k")

    @pytest.mark.asyncio
    async def test_writes_sweep_expired_entries(self, cache, clock):
        await cache.set("one-off", "v", ttl=5)

        clock.now = 10
        await cache.set("fresh", "v")

        assert len(cache) == 1
        assert await cache.get("fresh") == "v"

    @pytest.mark.asyncio
    async def test_oldest_entry_evicted_past_capacity(self, clock):
        cache = InMemoryTTLCache(default_ttl=60, clock=clock, max_entries=2)
        await cache.set("a", 1)
        await cache.set("b", 2)
        await cache.set("a", 3)
        await cache.set("c", 4)

        assert len(cache) == 2
        assert await cache.get("b") is None
        assert await cache.get("a") == 3
        assert await cache.get("c") == 4

    @pytest.mark.asyncio
    async def test_delete_and_clear(self, cache):
        await cache.set("a", 1)
        await cache.set("b", 2)

        assert await cache.delete("a")
        assert not await cache.delete("a")

        await cache.clear()
        assert len(cache) == 0


# ============================================================================
# REDIS
# ============================================================================

def mock_redis():
    client = MagicMock()
    client.get = AsyncMock(return_value=None)
    client.set = AsyncMock(return_value=True)
    client.delete = AsyncMock(return_value=1)
    client.exists = AsyncMock(return_value=1)
    client.aclose = AsyncMock()
    return client


class TestRedisCache:

    def test_requires_client_or_url(self):
        with pytest.raises(ValueError):
            RedisCache()

    @pytest.mark.asyncio
    async def test_set_encodes_json_with_prefix_and_ttl(self):
        client = mock_redis()
        cache = RedisCache(client=client, default_ttl=900)

        assert await cache.set("news:apple:10", {"articles": []}, ttl=30)

        client.set.assert_awaited_once_with("news_service:news:apple:10", json.dumps({"articles": []}), ex=30)

    @pytest.mark.asyncio
    async def test_get_decodes_json(self):
        client = mock_redis()
        client.get = AsyncMock(return_value=b'{"a": 1}')
        cache = RedisCache(client=client)

        assert await cache.get("k") == {"a": 1}
        client.get.assert_awaited_once_with("news_service:k")

    @pytest.mark.asyncio
    async def test_miss(self):
        assert await RedisCache(client=mock_redis()).get("k") is None

    @pytest.mark.asyncio
    async def test_backend_failures_are_misses(self):
        client = mock_redis()
        client.get = AsyncMock(side_effect=aioredis.ConnectionError("refused"))
        client.set = AsyncMock(side_effect=aioredis.TimeoutError("slow"))
        client.delete = AsyncMock(side_effect=aioredis.ConnectionError("refused"))
        client.exists = AsyncMock(side_effect=aioredis.ConnectionError("refused"))
        cache = RedisCache(client=client)

        assert await cache.get("k") is None
        assert await cache.set("k", 1) is False
        assert await cache.delete("k") is False
        assert await cache.exists("k") is False

    @pytest.mark.asyncio
    async def test_corrupt_value_is_a_miss(self):
        client = mock_redis()
        client.get = AsyncMock(return_value="not json")
        assert await RedisCache(client=client).get("k") is None

    @pytest.mark.asyncio
    async def test_clear_deletes_prefixed_keys(self):
        client = mock_redis()

        async def scan_iter(match):
            assert match == "news_service:*"
            for key in ("news_service:a", "news_service:b"):
                yield key

        client.scan_iter = scan_iter
        cache = RedisCache(client=client)

        await cache.clear()

        client.delete.assert_awaited_once_with("news_service:a", "news_service:b")

    @pytest.mark.asyncio
    async def test_close(self):
        client = mock_redis()
        cache = RedisCache(client=client)

        await cache.close()
        await cache.close()

        client.aclose.assert_awaited_once()


# ============================================================================
# FACTORY
# ============================================================================

class TestFactory:

    def test_redis_url(self):
        settings = Settings(REDIS_HOST="cache", REDIS_PORT=6380, REDIS_DB=2, REDIS_PASSWORD="")
        assert make_redis_url(settings) == "redis://cache:6380/2"

        secured = Settings(REDIS_HOST="cache", REDIS_PORT=6380, REDIS_DB=2, REDIS_PASSWORD="pw")
        assert make_redis_url(secured) == "redis://:pw@cache:6380/2"

    def test_backend_selection(self):
        assert isinstance(create_cache(Settings(CACHE_BACKEND="memory")), InMemoryTTLCache)
        assert isinstance(create_cache(Settings(CACHE_BACKEND="redis")), RedisCache)
