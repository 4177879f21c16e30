"""Cache store interface and implementations.

Provides a key/value store for serialized search results with a
Redis-first approach and in-memory fallback. Tag flush is an optional
capability: callers check ``isinstance(store, SupportsTagFlush)``.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from typing import Any, Protocol, runtime_checkable

from loguru import logger

from src.user_directory.runtime.config.config_data import RedisConfig


class CacheStoreError(RuntimeError):
    """Raised by a cache backend when an operation cannot be completed."""


class CacheStore(ABC):
    """Abstract interface for cache backends storing text values."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Retrieve a value.

        Args:
            key: Cache key

        Returns:
            Stored text or None if not found/expired
        """
        pass

    @abstractmethod
    async def set(
        self,
        key: str,
        value: str,
        ttl_seconds: int,
        tags: Iterable[str] = (),
    ) -> None:
        """Store a value with TTL.

        Args:
            key: Cache key
            value: Serialized value
            ttl_seconds: Time to live in seconds
            tags: Group labels for bulk invalidation, ignored by backends
                without tag support
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Delete a value.

        Args:
            key: Cache key
        """
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the backend is healthy and available."""
        pass


@runtime_checkable
class SupportsTagFlush(Protocol):
    """Backends able to drop every entry carrying a tag."""

    async def flush_by_tags(self, tags: Iterable[str]) -> int:
        """Delete all entries tagged with any of ``tags``. Returns the count."""
        ...


class InMemoryCacheStore(CacheStore):
    """In-memory cache with TTL and tag support.

    Expired entries are swept on writes at most once per ``sweep_interval``
    seconds, and the store never holds more than ``maxsize`` entries: when
    full, the entry closest to expiry is evicted. The clock is injectable so
    expiry can be tested without sleeping.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        maxsize: int = 10_000,
        sweep_interval: float = 60.0,
    ):
        if maxsize < 1:
            raise ValueError("maxsize must be positive")
        self._clock = clock
        self._maxsize = maxsize
        self._sweep_interval = sweep_interval
        self._next_sweep_at = clock() + sweep_interval
        self._data: dict[str, dict[str, Any]] = {}
        self._tags: dict[str, set[str]] = {}

    @property
    def maxsize(self) -> int:
        return self._maxsize

    async def get(self, key: str) -> str | None:
        entry = self._data.get(key)
        if entry is None:
            return None

        if self._clock() >= entry["expires_at"]:
            self._drop(key)
            return None

        return entry["value"]

    async def set(
        self,
        key: str,
        value: str,
        ttl_seconds: int,
        tags: Iterable[str] = (),
    ) -> None:
        now = self._clock()
        if now >= self._next_sweep_at:
            self._remove_expired(now)
            self._next_sweep_at = now + self._sweep_interval

        self._drop(key)
        if len(self._data) >= self._maxsize:
            self._evict_soonest_expiring()

        tag_list = list(tags)
        self._data[key] = {
            "value": value,
            "expires_at": now + ttl_seconds,
            "tags": tag_list,
        }
        for tag in tag_list:
            self._tags.setdefault(tag, set()).add(key)

    async def delete(self, key: str) -> None:
        self._drop(key)

    async def flush_by_tags(self, tags: Iterable[str]) -> int:
        keys: set[str] = set()
        for tag in tags:
            keys |= self._tags.pop(tag, set())

        removed = 0
        for key in keys:
            if key in self._data:
                self._drop(key)
                removed += 1
        return removed

    async def cleanup_expired(self) -> int:
        """Remove expired entries from memory."""
        return self._remove_expired(self._clock())

    def is_available(self) -> bool:
        """In-memory storage is always available."""
        return True

    def __len__(self) -> int:
        return len(self._data)

    def _remove_expired(self, now: float) -> int:
        expired_keys = [
            key for key, entry in self._data.items() if now >= entry["expires_at"]
        ]
        for key in expired_keys:
            self._drop(key)
        if expired_keys:
            logger.debug("Swept {} expired cache entries", len(expired_keys))
        return len(expired_keys)

    def _evict_soonest_expiring(self) -> None:
        victim = min(self._data, key=lambda key: self._data[key]["expires_at"])
        self._drop(victim)

    def _drop(self, key: str) -> None:
        entry = self._data.pop(key, None)
        if entry is None:
            return
        for tag in entry["tags"]:
            members = self._tags.get(tag)
            if members is not None:
                members.discard(key)
                if not members:
                    del self._tags[tag]


class RedisCacheStore(CacheStore):
    """Redis-based cache. Tags are Redis sets named ``tag:{name}``."""

    TAG_KEY_PREFIX = "tag:"

    def __init__(self, redis_client):
        self._redis = redis_client
        self._available = True

    @classmethod
    def tag_key(cls, tag: str) -> str:
        return f"{cls.TAG_KEY_PREFIX}{tag}"

    async def get(self, key: str) -> str | None:
        try:
            data = await self._redis.get(key)
            self._available = True
        except Exception as e:
            self._available = False
            raise CacheStoreError(f"Redis get failed: {e}") from e

        if isinstance(data, bytes):
            data = data.decode("utf-8")
        return data

    async def set(
        self,
        key: str,
        value: str,
        ttl_seconds: int,
        tags: Iterable[str] = (),
    ) -> None:
        try:
            async with self._redis.pipeline(transaction=False) as pipe:
                pipe.setex(key, ttl_seconds, value)
                for tag in tags:
                    tag_key = self.tag_key(tag)
                    pipe.sadd(tag_key, key)
                    # Members share the search TTL, so the set can go with its newest entry
                    pipe.expire(tag_key, ttl_seconds)
                await pipe.execute()
            self._available = True
        except Exception as e:
            self._available = False
            raise CacheStoreError(f"Redis set failed: {e}") from e

    async def delete(self, key: str) -> None:
        try:
            await self._redis.delete(key)
            self._available = True
        except Exception as e:
            self._available = False
            raise CacheStoreError(f"Redis delete failed: {e}") from e

    async def flush_by_tags(self, tags: Iterable[str]) -> int:
        try:
            tag_keys = [self.tag_key(tag) for tag in tags]
            keys: set[Any] = set()
            for tag_key in tag_keys:
                keys |= set(await self._redis.smembers(tag_key))

            removed = 0
            if keys:
                removed = await self._redis.delete(*keys)
            if tag_keys:
                await self._redis.delete(*tag_keys)
            self._available = True
            return int(removed)
        except Exception as e:
            self._available = False
            raise CacheStoreError(f"Redis tag flush failed: {e}") from e

    def is_available(self) -> bool:
        """Check if Redis connection is healthy."""
        return self._available

    async def ping(self) -> bool:
        """Test Redis connection health."""
        try:
            await self._redis.ping()
            self._available = True
            return True
        except Exception:
            self._available = False
            return False


async def create_cache_store(
    redis_config: RedisConfig,
    redis_client: Any | None = None,
    memory_maxsize: int = 10_000,
) -> CacheStore:
    """Build the shared cache store: Redis when reachable, otherwise in-memory."""
    if not redis_config.enabled or redis_client is None:
        logger.info("Redis not configured, using in-memory cache store")
        return InMemoryCacheStore(maxsize=memory_maxsize)

    redis_store = RedisCacheStore(redis_client)
    if await redis_store.ping():
        logger.info(
            "Cache store: Redis connected at {}",
            redis_config.sanitized_connection_string,
        )
        return redis_store

    logger.warning("Redis unavailable, using in-memory cache store")
    return InMemoryCacheStore(maxsize=memory_maxsize)
