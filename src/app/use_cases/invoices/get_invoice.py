"""Invoice read Use Cases

GetInvoice, GetInvoiceByNumber, GetInvoiceItems and GetInvoicePayments.
"""

from typing import List
from libs.result import Result, Return
from src.app.repositories.invoice_item_repository import InvoiceItemRepository
from src.app.repositories.invoice_payment_repository import InvoicePaymentRepository
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.use_cases.shared import unexpected
from src.domain.errors import NotFoundError
from .dtos import InvoiceItemDTO, InvoicePaymentDTO, InvoiceResponseDTO


def _not_found(invoice_ref) -> Result:
    return Return.err(
        NotFoundError(
            f"Invoice {invoice_ref} not found",
            code="INVOICE_NOT_FOUND",
            invoice=str(invoice_ref),
        ).to_error()
    )


class GetInvoice:
    """
    Use Case: Fetch an invoice with its items and payments

    Read-only; no transaction or rollback needed.
    """

    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        item_repo: InvoiceItemRepository,
        payment_repo: InvoicePaymentRepository,
    ):
        self.invoice_repo = invoice_repo
        self.item_repo = item_repo
        self.payment_repo = payment_repo

    async def execute(self, invoice_id: int) -> Result[InvoiceResponseDTO]:
        try:
            invoice = await self.invoice_repo.get_by_id(invoice_id)
            if not invoice:
                return _not_found(f"with ID {invoice_id}")
            return Return.ok(await self._with_children(invoice))
        except Exception as e:
            return unexpected(e, "retrieve invoice", invoice_id=invoice_id)

    async def by_number(self, invoice_number: str) -> Result[InvoiceResponseDTO]:
        try:
            invoice = await self.invoice_repo.get_by_invoice_number(invoice_number)
            if not invoice:
                return _not_found(invoice_number)
            return Return.ok(await self._with_children(invoice))
        except Exception as e:
            return unexpected(e, "retrieve invoice", invoice_number=invoice_number)

    async def _with_children(self, invoice) -> InvoiceResponseDTO:
        items = await self.item_repo.get_by_invoice_id(invoice.id)
        payments = await self.payment_repo.get_by_invoice_id(invoice.id)
        return InvoiceResponseDTO.from_entity(invoice, items, payments)


class GetInvoiceItems:

    def __init__(self, invoice_repo: InvoiceRepository, item_repo: InvoiceItemRepository):
        self.invoice_repo = invoice_repo
        self.item_repo = item_repo

    async def execute(self, invoice_id: int) -> Result[List[InvoiceItemDTO]]:
        try:
            if not await self.invoice_repo.get_by_id(invoice_id):
                return _not_found(f"with ID {invoice_id}")
            items = await self.item_repo.get_by_invoice_id(invoice_id)
            return Return.ok([InvoiceItemDTO.model_validate(i) for i in items])
        except Exception as e:
            return unexpected(e, "retrieve invoice items", invoice_id=invoice_id)


class GetInvoicePayments:

    def __init__(self, invoice_repo: InvoiceRepository, payment_repo: InvoicePaymentRepository):
        self.invoice_repo = invoice_repo
        self.payment_repo = payment_repo

    async def execute(self, invoice_id: int) -> Result[List[InvoicePaymentDTO]]:
        try:
            if not await self.invoice_repo.get_by_id(invoice_id):
                return _not_found(f"with ID {invoice_id}")
            payments = await self.payment_repo.get_by_invoice_id(invoice_id)
            return Return.ok([InvoicePaymentDTO.model_validate(p) for p in payments])
        except Exception as e:
            return unexpected(e, "retrieve invoice payments", invoice_id=invoice_id)
