"""Get-or-compute caching for search results.

L1: In-process cache (cachetools TTLCache), short TTL, per worker
L2: Shared cache store (Redis, or in-memory when Redis is not configured)
L3: Database, via the caller's compute function

Values are stored as JSON text so repeated hits return identical payloads.
Cache failures never reach the caller: they are logged and the compute
function is used instead.
"""

import hashlib
import time
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, TypeVar

from cachetools import TTLCache
from loguru import logger
from pydantic import TypeAdapter

from src.user_directory.core.cache.cache_store import CacheStore, SupportsTagFlush
from src.user_directory.runtime.config.config_data import CacheConfig

T = TypeVar("T")

ALL_QUERIES = "all"


def query_fingerprint(query: str | None) -> str:
    """Stable digest of a trimmed query, or ``all`` for the unfiltered listing."""
    trimmed = (query or "").strip()
    if not trimmed:
        return ALL_QUERIES
    return hashlib.md5(trimmed.encode("utf-8")).hexdigest()


class SearchCache:
    """Two-tier get-or-compute cache with tag invalidation."""

    def __init__(
        self,
        store: CacheStore,
        ttl_seconds: int = 60,
        key_prefix: str = "user-search",
        default_tags: Iterable[str] = ("users", "user-search", "index"),
        l1: TTLCache | None = None,
    ):
        self._store = store
        self._ttl_seconds = ttl_seconds
        self._key_prefix = key_prefix
        self._default_tags = tuple(default_tags)
        self._l1 = l1

    @classmethod
    def from_config(
        cls,
        store: CacheStore,
        config: CacheConfig,
        timer: Callable[[], float] = time.monotonic,
    ) -> "SearchCache":
        l1 = (
            TTLCache(maxsize=config.l1_maxsize, ttl=config.l1_ttl_seconds, timer=timer)
            if config.l1_enabled
            else None
        )
        return cls(
            store,
            ttl_seconds=config.search_ttl_seconds,
            key_prefix=config.key_prefix,
            default_tags=config.invalidation_tags,
            l1=l1,
        )

    @property
    def store(self) -> CacheStore:
        return self._store

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    @property
    def default_tags(self) -> tuple[str, ...]:
        return self._default_tags

    @property
    def supports_tag_flush(self) -> bool:
        return isinstance(self._store, SupportsTagFlush)

    def make_key(
        self, kind: str, query: str | None, per_page: int, page: int | None = None
    ) -> str:
        """Deterministic key for a search variant.

        ``kind`` is ``paginated`` or ``collection``; the page number is part of
        the key only for paginated results.
        """
        key = f"{self._key_prefix}:{kind}:{query_fingerprint(query)}:{per_page}"
        if page is not None:
            key = f"{key}:{page}"
        return key

    async def get_or_compute(
        self,
        key: str,
        compute_fn: Callable[[], Awaitable[T]],
        *,
        adapter: TypeAdapter[T],
        ttl: int | None = None,
        tags: Iterable[str] | None = None,
    ) -> T:
        """Return the cached value for ``key`` or compute, store and return it."""
        if self._l1 is not None:
            cached_text = self._l1.get(key)
            if cached_text is not None:
                return adapter.validate_json(cached_text)

        try:
            cached_text = await self._store.get(key)
        except Exception as e:
            logger.warning(
                "Cache read failed for {}, computing directly: {}", key, e
            )
            return await compute_fn()

        if cached_text is not None:
            try:
                value = adapter.validate_json(cached_text)
            except Exception as e:
                logger.warning("Discarding unreadable cache entry {}: {}", key, e)
                await self.forget(key)
            else:
                if self._l1 is not None:
                    self._l1[key] = cached_text
                return value

        value = await compute_fn()
        text = adapter.dump_json(value).decode("utf-8")
        try:
            await self._store.set(
                key,
                text,
                ttl if ttl is not None else self._ttl_seconds,
                tags if tags is not None else self._default_tags,
            )
        except Exception as e:
            logger.warning("Cache write failed for {}: {}", key, e)
        else:
            if self._l1 is not None:
                self._l1[key] = text
        return value

    async def invalidate(self, tags: Iterable[str] | None = None) -> bool:
        """Flush every entry carrying any of ``tags``.

        Returns True when the backend flushed. Backends without tag support
        are left alone; their entries age out within the TTL.
        """
        if self._l1 is not None:
            self._l1.clear()

        tag_list = list(tags if tags is not None else self._default_tags)
        if not isinstance(self._store, SupportsTagFlush):
            logger.debug(
                "Cache store {} has no tag support, skipping flush of {}",
                type(self._store).__name__,
                tag_list,
            )
            return False

        try:
            removed = await self._store.flush_by_tags(tag_list)
        except Exception as e:
            logger.warning("Cache tag flush failed for {}: {}", tag_list, e)
            return False

        logger.debug("Flushed {} cache entries for tags {}", removed, tag_list)
        return True

    async def forget(self, key: str) -> None:
        """Drop a single key from both tiers."""
        if self._l1 is not None:
            self._l1.pop(key, None)
        try:
            await self._store.delete(key)
        except Exception as e:
            logger.warning("Cache delete failed for {}: {}", key, e)

    def describe(self) -> dict[str, Any]:
        return {
            "backend": type(self._store).__name__,
            "available": self._store.is_available(),
            "tag_flush": self.supports_tag_flush,
            "l1": self._l1 is not None,
            "ttl_seconds": self._ttl_seconds,
        }
