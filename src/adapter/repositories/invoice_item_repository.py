"""SQLAlchemy Invoice Item Repository Implementation"""

from typing import Any, Dict, List, Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.invoice_item_repository import InvoiceItemRepository
from src.domain.base import utcnow
from src.domain.invoice_item import InvoiceItem


class SqlAlchemyInvoiceItemRepository(InvoiceItemRepository):
    """
    SQLAlchemy implementation of InvoiceItemRepository

    Uses async session for database operations.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, item: InvoiceItem) -> InvoiceItem:
        self.session.add(item)
        await self.session.flush()
        await self.session.refresh(item)
        return item

    async def bulk_create(self, items: List[InvoiceItem]) -> List[InvoiceItem]:
        self.session.add_all(items)
        await self.session.flush()
        for item in items:
            await self.session.refresh(item)
        return items

    async def get_by_id(self, item_id: int) -> Optional[InvoiceItem]:
        stmt = select(InvoiceItem).where(InvoiceItem.id == item_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_invoice_id(self, invoice_id: int) -> List[InvoiceItem]:
        stmt = (
            select(InvoiceItem)
            .where(InvoiceItem.invoice_id == invoice_id)
            .order_by(InvoiceItem.id.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update(self, item_id: int, fields: Dict[str, Any]) -> Optional[InvoiceItem]:
        item = await self.session.get(InvoiceItem, item_id)
        if item is None:
            return None

        for name, value in fields.items():
            setattr(item, name, value)
        item.updated_at = utcnow()

        self.session.add(item)
        await self.session.flush()
        await self.session.refresh(item)
        return item

    async def delete(self, item_id: int) -> bool:
        item = await self.session.get(InvoiceItem, item_id)
        if item is None:
            return False
        await self.session.delete(item)
        await self.session.flush()
        return True
