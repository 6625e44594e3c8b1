"""Invoice Item Repository Interface"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from src.domain.invoice_item import InvoiceItem


class InvoiceItemRepository(ABC):
    """Persistence for invoice line items"""

    @abstractmethod
    async def create(self, item: InvoiceItem) -> InvoiceItem:
        pass

    @abstractmethod
    async def bulk_create(self, items: List[InvoiceItem]) -> List[InvoiceItem]:
        """Insert several items in one flush"""
        pass

    @abstractmethod
    async def get_by_id(self, item_id: int) -> Optional[InvoiceItem]:
        pass

    @abstractmethod
    async def get_by_invoice_id(self, invoice_id: int) -> List[InvoiceItem]:
        """
        All items of an invoice

        Read inside the caller's transaction, so recalculation sees the
        mutation it is following.
        """
        pass

    @abstractmethod
    async def update(self, item_id: int, fields: Dict[str, Any]) -> Optional[InvoiceItem]:
        pass

    @abstractmethod
    async def delete(self, item_id: int) -> bool:
        pass
