"""Order Detail Repository Interface"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from src.domain.order_detail import OrderDetail


class OrderDetailRepository(ABC):
    """Persistence for order lines"""

    @abstractmethod
    async def create(self, detail: OrderDetail) -> OrderDetail:
        pass

    @abstractmethod
    async def bulk_create(self, details: List[OrderDetail]) -> List[OrderDetail]:
        """Insert several lines in one flush"""
        pass

    @abstractmethod
    async def get_by_id(self, detail_id: int) -> Optional[OrderDetail]:
        pass

    @abstractmethod
    async def get_by_order_id(self, order_id: int) -> List[OrderDetail]:
        """All lines of an order, oldest first"""
        pass

    @abstractmethod
    async def update(self, detail_id: int, fields: Dict[str, Any]) -> Optional[OrderDetail]:
        pass

    @abstractmethod
    async def delete(self, detail_id: int) -> bool:
        """
        Remove a line

        Returns:
            True if a row was deleted
        """
        pass
