"""Order Repository Interface

Defines the contract for order header persistence.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple
from src.app.repositories.filters import OrderFilters
from src.domain.order import Order


class OrderRepository(ABC):
    """
    Repository interface for Order persistence

    Implementations share the caller's transaction and never commit.
    """

    @abstractmethod
    async def create(self, order: Order) -> Order:
        """
        Create a new order

        Args:
            order: Order entity to persist

        Returns:
            Created Order with generated ID
        """
        pass

    @abstractmethod
    async def get_by_id(self, order_id: int, for_update: bool = False) -> Optional[Order]:
        """
        Retrieve order by ID

        Args:
            order_id: Order ID
            for_update: Lock the row for the rest of the transaction

        Returns:
            Order if found, None otherwise
        """
        pass

    @abstractmethod
    async def update(self, order_id: int, fields: Dict[str, Any]) -> Optional[Order]:
        """
        Apply a partial update to an order

        Args:
            order_id: Order ID
            fields: Column name to new value

        Returns:
            Updated Order, None if it does not exist
        """
        pass

    @abstractmethod
    async def list(
        self,
        filters: OrderFilters,
        limit: Optional[int] = 20,
        offset: int = 0,
        sort_by: str = "created_at",
        descending: bool = True,
    ) -> Tuple[List[Order], int]:
        """
        List orders matching filters

        Returns:
            Tuple of (page of orders, total matching count)
        """
        pass
