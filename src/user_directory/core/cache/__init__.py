from .cache_store import (
    CacheStore,
    CacheStoreError,
    InMemoryCacheStore,
    RedisCacheStore,
    SupportsTagFlush,
    create_cache_store,
)
from .search_cache import SearchCache, query_fingerprint

__all__ = [
    "CacheStore",
    "CacheStoreError",
    "InMemoryCacheStore",
    "RedisCacheStore",
    "SearchCache",
    "SupportsTagFlush",
    "create_cache_store",
    "query_fingerprint",
]
