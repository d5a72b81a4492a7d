"""
Catalog caching package.

Provides the key-value cache stores the catalog coordinator reads through.
Stores are TTL-agnostic; freshness is decided by the refresh policy, not by
key expiry.
"""

from .cache_store import CacheStore, CacheStoreError, InMemoryCacheStore, RedisCacheStore

__all__ = ["CacheStore", "CacheStoreError", "InMemoryCacheStore", "RedisCacheStore"]
