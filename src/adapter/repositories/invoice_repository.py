"""SQLAlchemy Invoice Repository Implementation

Implements invoice persistence using SQLAlchemy async session.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy import and_, case, not_, or_
from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.filters import InvoiceFilters, INVOICE_SORT_FIELDS
from src.app.repositories.invoice_repository import InvoiceAggregates, InvoiceRepository
from src.domain.base import utcnow
from src.domain.invoice import CLOSED_STATUSES, Invoice, InvoiceStatus

# Statuses in which an unpaid invoice past its due date counts as overdue
OPEN_STATUSES = (
    InvoiceStatus.ISSUED,
    InvoiceStatus.SENT,
    InvoiceStatus.PARTIALLY_PAID,
)


class SqlAlchemyInvoiceRepository(InvoiceRepository):
    """
    SQLAlchemy implementation of InvoiceRepository

    Uses async session for database operations.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, invoice: Invoice) -> Invoice:
        """
        Create a new invoice

        Args:
            invoice: Invoice entity to persist

        Returns:
            Created Invoice with generated ID
        """
        self.session.add(invoice)
        await self.session.flush()
        await self.session.refresh(invoice)
        return invoice

    async def get_by_id(self, invoice_id: int, for_update: bool = False) -> Optional[Invoice]:
        """
        Retrieve invoice by ID

        Args:
            invoice_id: Invoice ID
            for_update: If True, locks the row with SELECT FOR UPDATE and
                reloads it from the database

        Returns:
            Invoice if found, None otherwise
        """
        statement = select(Invoice).where(Invoice.id == invoice_id)

        if for_update:
            statement = statement.with_for_update().execution_options(populate_existing=True)

        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_by_invoice_number(self, invoice_number: str) -> Optional[Invoice]:
        statement = select(Invoice).where(Invoice.invoice_number == invoice_number)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def update(self, invoice_id: int, fields: Dict[str, Any]) -> Optional[Invoice]:
        """
        Apply a partial update to an invoice

        Args:
            invoice_id: Invoice ID
            fields: Column name to new value

        Returns:
            Updated Invoice, None if it does not exist
        """
        invoice = await self.session.get(Invoice, invoice_id)
        if invoice is None:
            return None

        for name, value in fields.items():
            setattr(invoice, name, value)
        invoice.updated_at = utcnow()

        self.session.add(invoice)
        await self.session.flush()
        await self.session.refresh(invoice)
        return invoice

    async def list(
        self,
        filters: InvoiceFilters,
        limit: Optional[int] = 20,
        offset: int = 0,
        sort_by: str = "created_at",
        descending: bool = True,
    ) -> Tuple[List[Invoice], int]:
        """
        List invoices matching filters

        Args:
            filters: InvoiceFilters
            limit: Page size, None for every match
            offset: Offset for pagination

        Returns:
            Tuple of (page of invoices, total matching count)
        """
        conditions = self._conditions(filters)

        count_statement = select(func.count()).select_from(Invoice).where(*conditions)
        total = (await self.session.execute(count_statement)).scalar_one()

        column = getattr(Invoice, sort_by if sort_by in INVOICE_SORT_FIELDS else "created_at")
        statement = select(Invoice).where(*conditions)
        statement = statement.order_by(column.desc() if descending else column.asc(), Invoice.id.desc())
        if limit is not None:
            statement = statement.limit(limit)
        statement = statement.offset(offset)

        result = await self.session.execute(statement)
        return list(result.scalars().all()), total

    async def aggregate(self, filters: InvoiceFilters, as_of: date) -> InvoiceAggregates:
        paid = Invoice.is_paid == True  # noqa: E712
        unpaid = and_(Invoice.is_paid == False, Invoice.status.not_in(CLOSED_STATUSES))  # noqa: E712
        overdue = and_(unpaid, Invoice.due_date < as_of)

        def total_where(condition):
            return func.coalesce(func.sum(case((condition, Invoice.total_amount), else_=0)), 0)

        statement = select(
            func.count(Invoice.id),
            total_where(paid),
            total_where(unpaid),
            total_where(overdue),
            func.avg(case((and_(paid, Invoice.paid_date.is_not(None)), self._payment_days()))),
        ).where(*self._conditions(filters))

        row = (await self.session.execute(statement)).one()
        count, total_paid, total_unpaid, total_overdue, average_days = row
        return InvoiceAggregates(
            invoice_count=count,
            total_paid=Decimal(str(total_paid)),
            total_unpaid=Decimal(str(total_unpaid)),
            total_overdue=Decimal(str(total_overdue)),
            average_payment_days=None if average_days is None else Decimal(str(average_days)),
        )

    def _payment_days(self):
        bind = self.session.bind
        if bind is not None and bind.dialect.name == "sqlite":
            return func.julianday(Invoice.paid_date) - func.julianday(Invoice.issue_date)
        # date - date is an integer number of days in PostgreSQL
        return Invoice.paid_date - Invoice.issue_date

    async def find_overdue(self, as_of: date, limit: int = 500) -> List[Invoice]:
        statement = (
            select(Invoice)
            .where(Invoice.status.in_(OPEN_STATUSES))
            .where(Invoice.is_paid == False)  # noqa: E712
            .where(Invoice.due_date < as_of)
            .order_by(Invoice.due_date.asc())
            .limit(limit)
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def generate_invoice_number(self, prefix: str = "INV") -> str:
        """
        Generate a unique invoice number

        Format: INV-YYYY-NNNNNN (e.g., INV-2024-000001)

        Returns:
            Unique invoice number string
        """
        year = utcnow().year
        number_prefix = f"{prefix}-{year}-"

        # Get the highest invoice number for this year
        statement = (
            select(func.max(Invoice.invoice_number))
            .where(Invoice.invoice_number.like(f"{number_prefix}%"))
        )
        result = await self.session.execute(statement)
        max_number = result.scalar_one_or_none()

        if max_number:
            # Extract the sequence number and increment
            sequence = int(max_number.split("-")[-1]) + 1
        else:
            sequence = 1

        return f"{number_prefix}{sequence:06d}"

    @staticmethod
    def _conditions(filters: InvoiceFilters) -> list:
        conditions = []
        if filters.status is not None:
            conditions.append(Invoice.status == filters.status)
        if filters.customer_id is not None:
            conditions.append(Invoice.customer_id == filters.customer_id)
        if filters.start_date is not None:
            conditions.append(Invoice.issue_date >= filters.start_date)
        if filters.end_date is not None:
            conditions.append(Invoice.issue_date <= filters.end_date)
        if filters.min_amount is not None:
            conditions.append(Invoice.total_amount >= filters.min_amount)
        if filters.max_amount is not None:
            conditions.append(Invoice.total_amount <= filters.max_amount)
        if filters.is_paid is not None:
            conditions.append(Invoice.is_paid == filters.is_paid)
        if filters.is_overdue is not None:
            as_of = filters.as_of or utcnow().date()
            overdue = or_(
                Invoice.status == InvoiceStatus.OVERDUE,
                and_(
                    Invoice.status.in_(OPEN_STATUSES),
                    Invoice.is_paid == False,  # noqa: E712
                    Invoice.due_date < as_of,
                ),
            )
            conditions.append(overdue if filters.is_overdue else not_(overdue))
        return conditions
