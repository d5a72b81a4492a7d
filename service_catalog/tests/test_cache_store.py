"""
Unit tests for catalog cache stores.
"""

from unittest.mock import AsyncMock, patch

import pytest
import redis.asyncio as redis

from service_catalog.app.caching.cache_store import CacheStoreError, InMemoryCacheStore, RedisCacheStore


class TestInMemoryCacheStore:
    """Test cases for InMemoryCacheStore."""

    @pytest.mark.asyncio
    async def test_get_missing_key(self):
        assert await InMemoryCacheStore().get("absent") is None

    @pytest.mark.asyncio
    async def test_set_then_get(self):
        store = InMemoryCacheStore()

        await store.set("key", b"value")
        await store.set("text", "café")

        assert await store.get("key") == b"value"
        assert await store.get("text") == "café".encode("utf-8")

    @pytest.mark.asyncio
    async def test_close_clears_entries(self):
        store = InMemoryCacheStore()
        await store.set("key", b"value")

        await store.close()

        assert await store.get("key") is None
        assert await store.ping() is True


class TestRedisCacheStore:
    """Test cases for RedisCacheStore."""

    @pytest.fixture
    def store(self):
        return RedisCacheStore("redis://localhost:6379/0")

    @pytest.mark.asyncio
    async def test_get_returns_bytes(self, store):
        with patch.object(store, "_get_redis", new_callable=AsyncMock) as mock_get_redis:
            mock_redis = AsyncMock()
            mock_redis.get.return_value = "payload"
            mock_get_redis.return_value = mock_redis

            result = await store.get("openrouter:models:simple:v1")

            assert result == b"payload"
            mock_redis.get.assert_awaited_once_with("openrouter:models:simple:v1")

    @pytest.mark.asyncio
    async def test_get_missing(self, store):
        with patch.object(store, "_get_redis", new_callable=AsyncMock) as mock_get_redis:
            mock_redis = AsyncMock()
            mock_redis.get.return_value = None
            mock_get_redis.return_value = mock_redis

            assert await store.get("absent") is None

    @pytest.mark.asyncio
    async def test_set_without_ttl(self, store):
        with patch.object(store, "_get_redis", new_callable=AsyncMock) as mock_get_redis:
            mock_redis = AsyncMock()
            mock_get_redis.return_value = mock_redis

            await store.set("key", "1700000000.5")

            mock_redis.set.assert_awaited_once_with("key", b"1700000000.5")

    @pytest.mark.asyncio
    async def test_errors_are_wrapped(self, store):
        with patch.object(store, "_get_redis", new_callable=AsyncMock) as mock_get_redis:
            mock_redis = AsyncMock()
            mock_redis.get.side_effect = redis.ConnectionError("refused")
            mock_redis.set.side_effect = redis.ConnectionError("refused")
            mock_get_redis.return_value = mock_redis

            with pytest.raises(CacheStoreError):
                await store.get("key")
            with pytest.raises(CacheStoreError):
                await store.set("key", b"value")

    @pytest.mark.asyncio
    async def test_ping_failure_reports_false(self, store):
        with patch.object(store, "_get_redis", new_callable=AsyncMock) as mock_get_redis:
            mock_redis = AsyncMock()
            mock_redis.ping.side_effect = redis.ConnectionError("refused")
            mock_get_redis.return_value = mock_redis

            assert await store.ping() is False
