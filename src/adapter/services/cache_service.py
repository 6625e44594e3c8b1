"""Cache Service Implementations"""

import logging
from typing import Optional
from redis import asyncio as aioredis
from src.app.services.cache_service import CacheService

logger = logging.getLogger(__name__)


class LoggingCacheService(CacheService):
    """
    Cache service that only logs invalidations

    Used when no cache backend is configured, and in tests.
    """

    async def invalidate(self, key: str) -> None:
        logger.debug(f"Cache invalidation requested for {key}")


class RedisCacheService(CacheService):
    """Deletes cached documents from Redis"""

    def __init__(self, client: aioredis.Redis, key_prefix: str = ""):
        self.client = client
        self.key_prefix = key_prefix

    @classmethod
    def from_url(cls, url: str, key_prefix: str = "") -> "RedisCacheService":
        return cls(aioredis.from_url(url), key_prefix=key_prefix)

    async def invalidate(self, key: str) -> None:
        full_key = f"{self.key_prefix}{key}"
        deleted = await self.client.delete(full_key)
        logger.debug(f"Invalidated cache key {full_key} (deleted={deleted})")


def create_cache_service(
    backend: Optional[str] = None,
    redis_url: Optional[str] = None,
    key_prefix: str = "",
) -> CacheService:
    """
    Factory function to create the configured cache service

    Args:
        backend: "redis" or anything else for the logging service
        redis_url: Redis connection URL, required for the redis backend
        key_prefix: Prepended to every key

    Returns:
        Configured CacheService
    """
    if backend == "redis" and redis_url:
        return RedisCacheService.from_url(redis_url, key_prefix=key_prefix)
    return LoggingCacheService()
