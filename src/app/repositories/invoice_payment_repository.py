"""Invoice Payment Repository Interface

Payments are append-only: there is no update or delete.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import List
from src.domain.invoice_payment import InvoicePayment


class InvoicePaymentRepository(ABC):

    @abstractmethod
    async def create(self, payment: InvoicePayment) -> InvoicePayment:
        """
        Record a payment

        Args:
            payment: InvoicePayment entity to persist

        Returns:
            Created InvoicePayment with generated ID
        """
        pass

    @abstractmethod
    async def get_by_invoice_id(self, invoice_id: int) -> List[InvoicePayment]:
        """Payments of an invoice, oldest first"""
        pass

    @abstractmethod
    async def sum_by_invoice_id(self, invoice_id: int) -> Decimal:
        """
        Total amount paid against an invoice

        Returns:
            Sum of payment amounts, Decimal("0.00") when there are none
        """
        pass
