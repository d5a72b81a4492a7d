"""
Key-value cache stores for the catalog service.
"""

from typing import Dict, Optional, Protocol, Union

import redis.asyncio as redis

from shared.logging import get_logger


class CacheStoreError(Exception):
    """Raised when the backing store cannot serve a get or set."""


class CacheStore(Protocol):
    """Process-wide shared byte store addressed by string keys."""

    async def get(self, key: str) -> Optional[bytes]:
        ...

    async def set(self, key: str, value: bytes) -> None:
        ...

    async def ping(self) -> bool:
        ...

    async def close(self) -> None:
        ...


def _to_bytes(value: Union[bytes, str]) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else bytes(value)


class InMemoryCacheStore:
    """Dictionary-backed store for single-process deployments and tests."""

    def __init__(self):
        self._data: Dict[str, bytes] = {}

    async def get(self, key: str) -> Optional[bytes]:
        return self._data.get(key)

    async def set(self, key: str, value: Union[bytes, str]) -> None:
        self._data[key] = _to_bytes(value)

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        self._data.clear()


class RedisCacheStore:
    """Redis-backed store shared across service instances."""

    def __init__(self, redis_url: str):
        self.redis_url = redis_url
        self.logger = get_logger("catalog.cache_store")
        self._redis: Optional[redis.Redis] = None

    async def _get_redis(self) -> redis.Redis:
        """Get Redis connection."""
        if self._redis is None:
            self._redis = redis.from_url(self.redis_url)
        return self._redis

    async def get(self, key: str) -> Optional[bytes]:
        try:
            redis_client = await self._get_redis()
            value = await redis_client.get(key)
        except redis.RedisError as exc:
            raise CacheStoreError(f"get {key!r} failed: {exc}") from exc

        if value is None:
            return None
        return _to_bytes(value)

    async def set(self, key: str, value: Union[bytes, str]) -> None:
        try:
            redis_client = await self._get_redis()
            await redis_client.set(key, _to_bytes(value))
        except redis.RedisError as exc:
            raise CacheStoreError(f"set {key!r} failed: {exc}") from exc

    async def ping(self) -> bool:
        try:
            redis_client = await self._get_redis()
            return bool(await redis_client.ping())
        except redis.RedisError as exc:
            self.logger.warning("Redis ping failed", error=str(exc))
            return False

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
