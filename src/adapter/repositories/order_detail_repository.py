"""SQLAlchemy Order Detail Repository Implementation"""

from typing import Any, Dict, List, Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.order_detail_repository import OrderDetailRepository
from src.domain.base import utcnow
from src.domain.order_detail import OrderDetail


class SqlAlchemyOrderDetailRepository(OrderDetailRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, detail: OrderDetail) -> OrderDetail:
        self.session.add(detail)
        await self.session.flush()
        await self.session.refresh(detail)
        return detail

    async def bulk_create(self, details: List[OrderDetail]) -> List[OrderDetail]:
        self.session.add_all(details)
        await self.session.flush()
        for detail in details:
            await self.session.refresh(detail)
        return details

    async def get_by_id(self, detail_id: int) -> Optional[OrderDetail]:
        stmt = select(OrderDetail).where(OrderDetail.id == detail_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_order_id(self, order_id: int) -> List[OrderDetail]:
        stmt = (
            select(OrderDetail)
            .where(OrderDetail.order_id == order_id)
            .order_by(OrderDetail.id.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update(self, detail_id: int, fields: Dict[str, Any]) -> Optional[OrderDetail]:
        detail = await self.session.get(OrderDetail, detail_id)
        if detail is None:
            return None

        for name, value in fields.items():
            setattr(detail, name, value)
        detail.updated_at = utcnow()

        self.session.add(detail)
        await self.session.flush()
        await self.session.refresh(detail)
        return detail

    async def delete(self, detail_id: int) -> bool:
        detail = await self.session.get(OrderDetail, detail_id)
        if detail is None:
            return False
        await self.session.delete(detail)
        await self.session.flush()
        return True
