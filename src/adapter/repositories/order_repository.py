"""SQLAlchemy Order Repository Implementation

Implements order persistence using SQLAlchemy async session.
"""

from typing import Any, Dict, List, Optional, Tuple
from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.filters import OrderFilters, ORDER_SORT_FIELDS
from src.app.repositories.order_repository import OrderRepository
from src.domain.base import utcnow
from src.domain.order import Order


class SqlAlchemyOrderRepository(OrderRepository):
    """
    SQLAlchemy implementation of OrderRepository

    Features:
    - Pessimistic locking via SELECT FOR UPDATE
    - Partial updates that bump updated_at
    - Filtered, paginated listing with total count
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, order: Order) -> Order:
        self.session.add(order)
        await self.session.flush()
        await self.session.refresh(order)
        return order

    async def get_by_id(self, order_id: int, for_update: bool = False) -> Optional[Order]:
        """
        Retrieve order by ID with optional row-level locking

        Args:
            order_id: Order ID
            for_update: If True, locks the row with SELECT FOR UPDATE and
                reloads it from the database

        Returns:
            Order if found, None otherwise
        """
        stmt = select(Order).where(Order.id == order_id)

        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def update(self, order_id: int, fields: Dict[str, Any]) -> Optional[Order]:
        order = await self.session.get(Order, order_id)
        if order is None:
            return None

        for name, value in fields.items():
            setattr(order, name, value)
        order.updated_at = utcnow()

        self.session.add(order)
        await self.session.flush()
        await self.session.refresh(order)
        return order

    async def list(
        self,
        filters: OrderFilters,
        limit: Optional[int] = 20,
        offset: int = 0,
        sort_by: str = "created_at",
        descending: bool = True,
    ) -> Tuple[List[Order], int]:
        conditions = self._conditions(filters)

        count_stmt = select(func.count()).select_from(Order).where(*conditions)
        total = (await self.session.execute(count_stmt)).scalar_one()

        column = getattr(Order, sort_by if sort_by in ORDER_SORT_FIELDS else "created_at")
        stmt = select(Order).where(*conditions)
        stmt = stmt.order_by(column.desc() if descending else column.asc(), Order.id.desc())
        if limit is not None:
            stmt = stmt.limit(limit)
        stmt = stmt.offset(offset)

        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    @staticmethod
    def _conditions(filters: OrderFilters) -> list:
        conditions = []
        if filters.customer_id is not None:
            conditions.append(Order.customer_id == filters.customer_id)
        if filters.driver_id is not None:
            conditions.append(Order.driver_id == filters.driver_id)
        if filters.order_status is not None:
            conditions.append(Order.order_status == filters.order_status)
        if filters.payment_status is not None:
            conditions.append(Order.payment_status == filters.payment_status)
        if filters.delivery_method is not None:
            conditions.append(Order.delivery_method == filters.delivery_method)
        if filters.from_date is not None:
            conditions.append(Order.created_at >= filters.from_date)
        if filters.to_date is not None:
            conditions.append(Order.created_at <= filters.to_date)
        if filters.min_amount is not None:
            conditions.append(Order.total_amount >= filters.min_amount)
        if filters.max_amount is not None:
            conditions.append(Order.total_amount <= filters.max_amount)
        return conditions
