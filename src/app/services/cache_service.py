"""Cache Service Interface

Write paths only invalidate; reads never go through this service.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

logger = logging.getLogger(__name__)


def order_cache_key(order_id: int) -> str:
    return f"order:{order_id}"


def invoice_cache_key(invoice_id: int) -> str:
    return f"invoice:{invoice_id}"


class CacheService(ABC):

    @abstractmethod
    async def invalidate(self, key: str) -> None:
        """
        Drop a cached document

        Args:
            key: Cache key, e.g. "invoice:42"

        Raises:
            Any transport error; callers log and continue
        """
        pass


async def invalidate_quietly(cache: Optional[CacheService], *keys: str) -> None:
    """Invalidate after commit; a cache failure never fails the operation"""
    if cache is None:
        return
    for key in keys:
        try:
            await cache.invalidate(key)
        except Exception as e:
            logger.warning(f"Cache invalidation failed for {key}: {e}")
