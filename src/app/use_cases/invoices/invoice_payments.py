"""Invoice payment Use Cases

ApplyInvoicePayment records any amount up to the remaining balance.
MarkInvoicePaid records exactly the remaining balance and is refused when
the amount differs. Both go through the PaymentLedger.
"""

from typing import Optional
from libs.result import Result, Return
from src.app.repositories.invoice_item_repository import InvoiceItemRepository
from src.app.repositories.invoice_payment_repository import InvoicePaymentRepository
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.services.cache_service import CacheService, invalidate_quietly, invoice_cache_key
from src.app.services.payment_ledger import PaymentLedger
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.shared import fail
from .dtos import InvoicePaymentDTO, InvoiceResponseDTO, PaymentCommandDTO, PaymentResponseDTO


class ApplyInvoicePayment:
    """
    Use Case: Record a payment against an invoice

    Business Rules:
    1. Cancelled, void and draft invoices refuse payments
    2. amount <= total_amount - paid_amount, checked inside the transaction
    3. Partial payments move issued/sent invoices to partially_paid
    4. The payment that completes the balance moves the invoice to paid

    Flow:
    1. Lock invoice (SELECT FOR UPDATE)
    2. Sum stored payments, check balance
    3. Insert payment, update paid_amount / is_paid / status
    4. Commit, then invalidate cache
    """

    require_exact = False
    action = "apply invoice payment"

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        payment_repo: InvoicePaymentRepository,
        item_repo: Optional[InvoiceItemRepository] = None,
        cache: Optional[CacheService] = None,
    ):
        self.uow = uow
        self.ledger = PaymentLedger(invoice_repo, payment_repo)
        self.payment_repo = payment_repo
        self.item_repo = item_repo
        self.cache = cache

    async def execute(self, invoice_id: int, command: PaymentCommandDTO) -> Result[PaymentResponseDTO]:
        try:
            await self.uow.begin()

            invoice, payment = await self.ledger.apply_payment(
                invoice_id,
                amount=command.amount,
                payment_method=command.payment_method,
                payment_date=command.payment_date,
                reference=command.reference,
                notes=command.notes,
                created_by=command.created_by,
                require_exact=self.require_exact,
            )
            payments = await self.payment_repo.get_by_invoice_id(invoice_id)
            items = await self.item_repo.get_by_invoice_id(invoice_id) if self.item_repo else None

            await self.uow.commit()
        except Exception as e:
            return await fail(self.uow, e, self.action, invoice_id=invoice_id)

        await invalidate_quietly(self.cache, invoice_cache_key(invoice_id))
        return Return.ok(
            PaymentResponseDTO(
                payment=InvoicePaymentDTO.model_validate(payment),
                invoice=InvoiceResponseDTO.from_entity(invoice, items, payments),
            )
        )


class MarkInvoicePaid(ApplyInvoicePayment):
    """
    Use Case: Settle an invoice in full

    The amount must equal the remaining balance exactly; an already paid
    invoice is refused.
    """

    require_exact = True
    action = "mark invoice as paid"
