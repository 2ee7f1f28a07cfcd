"""
Cache collaborator.

Two backends behind one interface: an in-process TTL cache (default) and a
Redis cache. Caching is best-effort: every backend failure is logged and
reported as a miss or a no-op, never raised to the caller.
"""
import asyncio
import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, Tuple

import redis.asyncio as aioredis

from src.utils.config import Settings
from src.utils.logger.custom_logging import LoggerMixin

logger = logging.getLogger(__name__)

# Timeout settings
REDIS_CONNECT_TIMEOUT = 5   # seconds
REDIS_SOCKET_TIMEOUT = 5    # seconds
REDIS_CLOSE_TIMEOUT = 5     # seconds - for graceful close


# =============================================================================
# KEYS
# =============================================================================

class CacheKeyGenerator:
    """Builds the cache keys used across the service."""

    @staticmethod
    def _part(value: str) -> str:
        return "_".join((value or "").lower().split())

    @classmethod
    def news(cls, company: str, limit: int) -> str:
        return f"news:{cls._part(company)}:{limit}"

    @classmethod
    def company_search(cls, query: str) -> str:
        return f"company_search:{cls._part(query)}"

    @classmethod
    def health(cls, component: str) -> str:
        return f"health:{cls._part(component)}"


# =============================================================================
# BACKENDS
# =============================================================================

class CacheBackend(LoggerMixin, ABC):
    """get / set / delete / exists / clear, all best-effort."""

    def __init__(self, default_ttl: int = 900):
        super().__init__()
        self.default_ttl = default_ttl

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        pass

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        pass

    @abstractmethod
    async def exists(self, key: str) -> bool:
        pass

    @abstractmethod
    async def clear(self) -> None:
        pass

    async def close(self):
        """Cleanup resources"""
        pass


class InMemoryTTLCache(CacheBackend):
    """
    Per-process cache with monotonic-clock expiry.

    Values are stored as given; callers must not mutate what they get back.
    Expired entries are dropped on access and swept on every write. Past
    ``max_entries`` the oldest written entry is evicted.
    """

    def __init__(
        self,
        default_ttl: int = 900,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int = 10_000,
    ):
        super().__init__(default_ttl)
        self._clock = clock
        self.max_entries = max_entries
        self._entries: Dict[str, Tuple[float, Any]] = {}

    def _live_entry(self, key: str) -> Optional[Tuple[float, Any]]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry[0]:
            self._entries.pop(key, None)
            return None
        return entry

    async def get(self, key: str) -> Optional[Any]:
        entry = self._live_entry(key)
        if entry is None:
            self.logger.debug(f"[Cache] MISS {key}")
            return None
        self.logger.debug(f"[Cache] HIT {key}")
        return entry[1]

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        ttl = self.default_ttl if ttl is None else ttl
        now = self._clock()
        self._prune(now)
        self._entries.pop(key, None)
        while self._entries and len(self._entries) >= self.max_entries:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
            self.logger.debug(f"[Cache] EVICT {oldest}")
        self._entries[key] = (now + ttl, value)
        return True

    def _prune(self, now: float) -> None:
        expired = [k for k, (expires_at, _) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]

    async def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    async def exists(self, key: str) -> bool:
        return self._live_entry(key) is not None

    async def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class RedisCache(CacheBackend):
    """
    Redis-backed cache. Values are JSON-encoded; pydantic models should be
    dumped with ``model_dump(mode="json")`` before caching.
    """

    def __init__(
        self,
        client: Optional[aioredis.Redis] = None,
        redis_url: Optional[str] = None,
        default_ttl: int = 900,
        key_prefix: str = "news_service:",
    ):
        super().__init__(default_ttl)
        if client is None and not redis_url:
            raise ValueError("Either a Redis client or a redis_url is required")
        self.redis_url = redis_url
        self.key_prefix = key_prefix
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "RedisCache":
        return cls(redis_url=make_redis_url(settings), default_ttl=settings.CACHE_DEFAULT_TTL)

    def _get_client(self) -> aioredis.Redis:
        if self._client is None:
            self._client = aioredis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=REDIS_CONNECT_TIMEOUT,
                socket_timeout=REDIS_SOCKET_TIMEOUT,
            )
        return self._client

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    async def get(self, key: str) -> Optional[Any]:
        try:
            raw = await self._get_client().get(self._key(key))
            if raw is None:
                self.logger.debug(f"[Cache] MISS {key}")
                return None
            if isinstance(raw, bytes):
                raw = raw.decode("utf-8")
            self.logger.debug(f"[Cache] HIT {key}")
            return json.loads(raw)
        except (aioredis.RedisError, json.JSONDecodeError, OSError) as e:
            self.logger.warning(f"[Cache] GET failed for {key}: {e}")
            return None

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        ttl = self.default_ttl if ttl is None else ttl
        try:
            await self._get_client().set(self._key(key), json.dumps(value, default=str), ex=ttl)
            return True
        except (aioredis.RedisError, TypeError, ValueError, OSError) as e:
            self.logger.warning(f"[Cache] SET failed for {key}: {e}")
            return False

    async def delete(self, key: str) -> bool:
        try:
            return bool(await self._get_client().delete(self._key(key)))
        except (aioredis.RedisError, OSError) as e:
            self.logger.warning(f"[Cache] DELETE failed for {key}: {e}")
            return False

    async def exists(self, key: str) -> bool:
        try:
            return bool(await self._get_client().exists(self._key(key)))
        except (aioredis.RedisError, OSError) as e:
            self.logger.warning(f"[Cache] EXISTS failed for {key}: {e}")
            return False

    async def clear(self) -> None:
        """Delete every key under this cache's prefix."""
        try:
            client = self._get_client()
            keys = [k async for k in client.scan_iter(match=f"{self.key_prefix}*")]
            if keys:
                await client.delete(*keys)
        except (aioredis.RedisError, OSError) as e:
            self.logger.warning(f"[Cache] CLEAR failed: {e}")

    async def close(self):
        if self._client is None:
            return
        try:
            await asyncio.wait_for(self._client.aclose(), timeout=REDIS_CLOSE_TIMEOUT)
        except asyncio.TimeoutError:
            self.logger.warning("[Cache] Redis close timed out, connection may leak")
        except (aioredis.RedisError, OSError) as e:
            self.logger.warning(f"[Cache] Error closing Redis connection: {e}")
        finally:
            self._client = None


# =============================================================================
# FACTORY
# =============================================================================

def make_redis_url(settings: Settings) -> str:
    """Build Redis URL from settings"""
    if settings.REDIS_PASSWORD:
        return f"redis://:{settings.REDIS_PASSWORD}@{settings.REDIS_HOST}:{settings.REDIS_PORT}/{settings.REDIS_DB}"
    return f"redis://{settings.REDIS_HOST}:{settings.REDIS_PORT}/{settings.REDIS_DB}"


def create_cache(settings: Settings) -> CacheBackend:
    if settings.CACHE_BACKEND == "redis":
        logger.info(f"[Cache] Using Redis at {settings.REDIS_HOST}:{settings.REDIS_PORT}/{settings.REDIS_DB}")
        return RedisCache.from_settings(settings)
    logger.info(f"[Cache] Using in-memory TTL cache (ttl={settings.CACHE_DEFAULT_TTL}s)")
    return InMemoryTTLCache(default_ttl=settings.CACHE_DEFAULT_TTL)
