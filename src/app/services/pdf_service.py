"""Port for rendering invoice documents."""

from abc import ABC, abstractmethod
from typing import List
from src.domain.invoice import Invoice
from src.domain.invoice_item import InvoiceItem
from src.domain.invoice_payment import InvoicePayment


class PdfService(ABC):
    """Turns an invoice with its items and payments into a printable PDF."""

    @abstractmethod
    def generate_invoice(
        self,
        invoice: Invoice,
        items: List[InvoiceItem],
        payments: List[InvoicePayment],
        company_name: str,
        company_address: str,
    ) -> bytes:
        """
        Render an invoice PDF

        Args:
            invoice: Header with totals and payment position
            items: Line items of the invoice
            payments: Payments recorded so far
            company_name: Seller name printed in the header
            company_address: Seller address printed under the name

        Returns:
            Raw PDF bytes
        """
        pass
