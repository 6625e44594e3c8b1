"""UpdateInvoice Use Case

Partial header edits. Status and payment position are never changed here.
"""

from typing import Optional
from libs.result import Result, Return
from src.app.repositories.invoice_item_repository import InvoiceItemRepository
from src.app.repositories.invoice_payment_repository import InvoicePaymentRepository
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.services.cache_service import CacheService, invalidate_quietly, invoice_cache_key
from src.app.services.payment_ledger import PaymentLedger
from src.app.services.reference_validator import ReferenceKind, ReferenceValidator
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.shared import ensure_reference, fail, set_fields
from src.domain.invoice import Invoice
from .common import ensure_dates, ensure_editable, get_invoice_for_update, refresh_invoice_totals
from .dtos import InvoiceResponseDTO, UpdateInvoiceCommandDTO


class UpdateInvoice:
    """
    Use Case: Update invoice header fields

    Business Rules:
    1. Paid, cancelled and void invoices cannot be edited
    2. due_date >= issue_date after the update
    3. A discount change re-runs the total recalculation in the same transaction
    """

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

    async def execute(self, invoice_id: int, command: UpdateInvoiceCommandDTO) -> Result[InvoiceResponseDTO]:
        try:
            await self.uow.begin()

            invoice = await get_invoice_for_update(self.invoice_repo, invoice_id)
            ensure_editable(invoice)

            fields = set_fields(command, Invoice)
            ensure_dates(
                fields.get("issue_date") or invoice.issue_date,
                fields.get("due_date") or invoice.due_date,
            )
            for key in ("billing_address_id", "shipping_address_id"):
                if key in fields:
                    await ensure_reference(self.reference_validator, ReferenceKind.ADDRESS, fields[key])
            if fields.get("currency"):
                fields["currency"] = fields["currency"].upper()

            if "discount_amount" in fields:
                discount = fields.pop("discount_amount")
                invoice = await refresh_invoice_totals(
                    invoice,
                    self.invoice_repo,
                    self.item_repo,
                    self.ledger,
                    discount=discount,
                    extra_fields=fields,
                )
            elif fields:
                invoice = await self.invoice_repo.update(invoice_id, fields)

            await self.uow.commit()
        except Exception as e:
            return await fail(self.uow, e, "update invoice", invoice_id=invoice_id)

        await invalidate_quietly(self.cache, invoice_cache_key(invoice_id))
        return Return.ok(InvoiceResponseDTO.from_entity(invoice))
