"""Unit tests for cache service implementations"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from src.adapter.services.cache_service import (
    LoggingCacheService,
    RedisCacheService,
    create_cache_service,
)
from src.app.services.cache_service import invalidate_quietly, invoice_cache_key, order_cache_key


@pytest.mark.asyncio
class TestRedisCacheService:

    async def test_invalidate_deletes_prefixed_key(self):
        client = MagicMock()
        client.delete = AsyncMock(return_value=1)
        cache = RedisCacheService(client, key_prefix="gas:")

        await cache.invalidate(invoice_cache_key(7))

        client.delete.assert_awaited_once_with("gas:invoice:7")


@pytest.mark.asyncio
class TestInvalidateQuietly:

    async def test_invalidates_every_key(self, mock_cache):
        await invalidate_quietly(mock_cache, order_cache_key(1), invoice_cache_key(2))

        assert [c.args[0] for c in mock_cache.invalidate.await_args_list] == ["order:1", "invoice:2"]

    async def test_cache_failure_is_swallowed(self, mock_cache):
        mock_cache.invalidate = AsyncMock(side_effect=ConnectionError("redis down"))

        await invalidate_quietly(mock_cache, "order:1", "order:2")

        assert mock_cache.invalidate.await_count == 2

    async def test_no_cache_is_a_noop(self):
        await invalidate_quietly(None, "order:1")

    async def test_logging_cache_accepts_any_key(self):
        await LoggingCacheService().invalidate("invoice:1")


class TestCreateCacheService:

    def test_logging_backend_by_default(self):
        assert isinstance(create_cache_service(), LoggingCacheService)

    def test_redis_backend_without_url_falls_back_to_logging(self):
        assert isinstance(create_cache_service("redis", None), LoggingCacheService)

    def test_redis_backend(self):
        cache = create_cache_service("redis", "redis://localhost:6379/0", key_prefix="gas:")

        assert isinstance(cache, RedisCacheService)
        assert cache.key_prefix == "gas:"
