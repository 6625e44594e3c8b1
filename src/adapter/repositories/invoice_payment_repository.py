"""SQLAlchemy Invoice Payment Repository Implementation

Append-only: payments are inserted and read, never updated or deleted.
"""

from decimal import Decimal
from typing import List
from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.invoice_payment_repository import InvoicePaymentRepository
from src.domain.invoice_payment import InvoicePayment
from src.domain.totals import money


class SqlAlchemyInvoicePaymentRepository(InvoicePaymentRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, payment: InvoicePayment) -> InvoicePayment:
        self.session.add(payment)
        await self.session.flush()
        await self.session.refresh(payment)
        return payment

    async def get_by_invoice_id(self, invoice_id: int) -> List[InvoicePayment]:
        stmt = (
            select(InvoicePayment)
            .where(InvoicePayment.invoice_id == invoice_id)
            .order_by(InvoicePayment.payment_date.asc(), InvoicePayment.id.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def sum_by_invoice_id(self, invoice_id: int) -> Decimal:
        stmt = (
            select(func.coalesce(func.sum(InvoicePayment.amount), 0))
            .where(InvoicePayment.invoice_id == invoice_id)
        )
        result = await self.session.execute(stmt)
        # SQLite returns the aggregate as float or int, normalise to cents
        return money(str(result.scalar_one()))
