"""Invoice item Use Cases

AddInvoiceItem, UpdateInvoiceItem and RemoveInvoiceItem. Each mutates one
item and rebuilds the header totals from the full item set in the same
transaction.
"""

from typing import List, Optional
from libs.result import Result, Return
from src.app.repositories.invoice_item_repository import InvoiceItemRepository
from src.app.repositories.invoice_payment_repository import InvoicePaymentRepository
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.services.cache_service import CacheService, invalidate_quietly, invoice_cache_key
from src.app.services.payment_ledger import PaymentLedger
from src.app.services.reference_validator import ReferenceKind, ReferenceValidator
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.shared import ensure_reference, fail, set_fields
from src.domain.errors import NotFoundError
from src.domain.invoice import Invoice
from src.domain.invoice_item import InvoiceItem
from src.domain.totals import calculate_invoice_line, money, to_quantity
from .common import ensure_editable, get_invoice_for_update, refresh_invoice_totals
from .dtos import InvoiceItemInputDTO, InvoiceResponseDTO, UpdateInvoiceItemCommandDTO


class _InvoiceItemUseCase:
    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        item_repo: InvoiceItemRepository,
        payment_repo: InvoicePaymentRepository,
        reference_validator: Optional[ReferenceValidator] = None,
        cache: Optional[CacheService] = None,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.item_repo = item_repo
        self.ledger = PaymentLedger(invoice_repo, payment_repo)
        self.reference_validator = reference_validator
        self.cache = cache

    async def _locked_invoice(self, invoice_id: int) -> Invoice:
        invoice = await get_invoice_for_update(self.invoice_repo, invoice_id)
        ensure_editable(invoice)
        return invoice

    async def _get_item(self, invoice_id: int, item_id: int) -> InvoiceItem:
        item = await self.item_repo.get_by_id(item_id)
        if not item or item.invoice_id != invoice_id:
            raise NotFoundError(
                f"Invoice item with ID {item_id} not found on invoice {invoice_id}",
                code="INVOICE_ITEM_NOT_FOUND",
                invoice_id=invoice_id,
                item_id=item_id,
            )
        return item

    async def _finish(self, invoice: Invoice) -> InvoiceResponseDTO:
        invoice = await refresh_invoice_totals(invoice, self.invoice_repo, self.item_repo, self.ledger)
        items: List[InvoiceItem] = await self.item_repo.get_by_invoice_id(invoice.id)
        return InvoiceResponseDTO.from_entity(invoice, items)


class AddInvoiceItem(_InvoiceItemUseCase):
    """
    Use Case: Add a line item to an invoice

    Business Rules:
    1. Paid, cancelled and void invoices are locked
    2. Line totals are derived from quantity, unit price and tax rate
    3. Header totals are rebuilt from every item after the insert
    """

    async def execute(self, invoice_id: int, command: InvoiceItemInputDTO) -> Result[InvoiceResponseDTO]:
        try:
            await self.uow.begin()

            invoice = await self._locked_invoice(invoice_id)
            await ensure_reference(self.reference_validator, ReferenceKind.PRODUCT, command.product_id)

            line = calculate_invoice_line(command.quantity, command.unit_price, command.tax_rate)
            await self.item_repo.create(
                InvoiceItem(
                    invoice_id=invoice_id,
                    product_id=command.product_id,
                    product_name=command.product_name,
                    description=command.description,
                    quantity=to_quantity(command.quantity),
                    unit_price=money(command.unit_price),
                    unit_of_measurement=command.unit_of_measurement,
                    tax_rate=command.tax_rate,
                    subtotal=line.subtotal,
                    tax_amount=line.tax_amount,
                    total=line.total,
                )
            )

            response = await self._finish(invoice)
            await self.uow.commit()
        except Exception as e:
            return await fail(self.uow, e, "add invoice item", invoice_id=invoice_id)

        await invalidate_quietly(self.cache, invoice_cache_key(invoice_id))
        return Return.ok(response)


class UpdateInvoiceItem(_InvoiceItemUseCase):
    """
    Use Case: Edit a line item

    The item's derived totals and the header totals are both recomputed.
    """

    async def execute(
        self, invoice_id: int, item_id: int, command: UpdateInvoiceItemCommandDTO
    ) -> Result[InvoiceResponseDTO]:
        try:
            await self.uow.begin()

            invoice = await self._locked_invoice(invoice_id)
            item = await self._get_item(invoice_id, item_id)

            fields = set_fields(command, InvoiceItem)
            if "product_id" in fields:
                await ensure_reference(self.reference_validator, ReferenceKind.PRODUCT, fields["product_id"])
            if "quantity" in fields:
                fields["quantity"] = to_quantity(fields["quantity"])
            if "unit_price" in fields:
                fields["unit_price"] = money(fields["unit_price"])

            line = calculate_invoice_line(
                fields.get("quantity", item.quantity),
                fields.get("unit_price", item.unit_price),
                fields.get("tax_rate", item.tax_rate),
            )
            fields.update(subtotal=line.subtotal, tax_amount=line.tax_amount, total=line.total)
            await self.item_repo.update(item_id, fields)

            response = await self._finish(invoice)
            await self.uow.commit()
        except Exception as e:
            return await fail(self.uow, e, "update invoice item", invoice_id=invoice_id, item_id=item_id)

        await invalidate_quietly(self.cache, invoice_cache_key(invoice_id))
        return Return.ok(response)


class RemoveInvoiceItem(_InvoiceItemUseCase):

    async def execute(self, invoice_id: int, item_id: int) -> Result[InvoiceResponseDTO]:
        try:
            await self.uow.begin()

            invoice = await self._locked_invoice(invoice_id)
            await self._get_item(invoice_id, item_id)
            await self.item_repo.delete(item_id)

            response = await self._finish(invoice)
            await self.uow.commit()
        except Exception as e:
            return await fail(self.uow, e, "remove invoice item", invoice_id=invoice_id, item_id=item_id)

        await invalidate_quietly(self.cache, invoice_cache_key(invoice_id))
        return Return.ok(response)
