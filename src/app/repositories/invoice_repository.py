"""Persistence port for invoice headers."""

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple
from pydantic import BaseModel
from src.app.repositories.filters import InvoiceFilters
from src.domain.invoice import Invoice


class InvoiceAggregates(BaseModel):
    invoice_count: int = 0
    total_paid: Decimal = Decimal("0")
    total_unpaid: Decimal = Decimal("0")
    total_overdue: Decimal = Decimal("0")
    # mean days from issue_date to paid_date, None when nothing is paid
    average_payment_days: Optional[Decimal] = None


class InvoiceRepository(ABC):
    """
    Invoice header storage.

    Implementations share the caller's transaction and never commit.
    """

    @abstractmethod
    async def create(self, invoice: Invoice) -> Invoice:
        """Insert the invoice and flush so its id is populated."""
        pass

    @abstractmethod
    async def get_by_id(self, invoice_id: int, for_update: bool = False) -> Optional[Invoice]:
        """
        Load an invoice header.

        With for_update the row stays locked until the transaction ends, which
        the payment ledger relies on for its balance check.
        """
        pass

    @abstractmethod
    async def get_by_invoice_number(self, invoice_number: str) -> Optional[Invoice]:
        pass

    @abstractmethod
    async def update(self, invoice_id: int, fields: Dict[str, Any]) -> Optional[Invoice]:
        """Write the given columns; None when the invoice is missing."""
        pass

    @abstractmethod
    async def list(
        self,
        filters: InvoiceFilters,
        limit: Optional[int] = 20,
        offset: int = 0,
        sort_by: str = "created_at",
        descending: bool = True,
    ) -> Tuple[List[Invoice], int]:
        """
        One page of matching invoices plus the unpaged match count.

        A limit of None returns every match.
        """
        pass

    @abstractmethod
    async def aggregate(self, filters: InvoiceFilters, as_of: date) -> InvoiceAggregates:
        """
        Amounts over every invoice matching filters, computed by the database.

        Paid means is_paid. Unpaid excludes cancelled and void invoices, and
        overdue is the unpaid part due before as_of.
        """
        pass

    @abstractmethod
    async def find_overdue(self, as_of: date, limit: int = 500) -> List[Invoice]:
        """Unsettled invoices due before as_of that are not marked overdue yet."""
        pass

    @abstractmethod
    async def generate_invoice_number(self, prefix: str = "INV") -> str:
        """Next number of the form PREFIX-YYYY-NNNNNN, counted per year."""
        pass
