"""CreateInvoice Use Case

Creates an invoice header and its items in one transaction.
"""

import logging
from datetime import timedelta
from typing import Optional
from libs.result import Result, Return
from src.app.repositories.invoice_item_repository import InvoiceItemRepository
from src.app.repositories.invoice_payment_repository import InvoicePaymentRepository
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.services.cache_service import CacheService, invalidate_quietly, invoice_cache_key
from src.app.services.payment_ledger import PaymentLedger
from src.app.services.reference_validator import ReferenceKind, ReferenceValidator
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.shared import ensure_reference, fail
from src.domain.base import utcnow
from src.domain.errors import ValidationError
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.invoice_item import InvoiceItem
from src.domain.status_machine import INVOICE_TRANSITIONS
from src.domain.totals import ZERO, apply_line_totals, money, to_quantity
from .common import ensure_dates, refresh_invoice_totals
from .dtos import CreateInvoiceCommandDTO, InvoiceResponseDTO

logger = logging.getLogger(__name__)

DEFAULT_DUE_DAYS = 30

# Statuses a new invoice may start in
INITIAL_STATUSES = frozenset({InvoiceStatus.DRAFT}) | (
    INVOICE_TRANSITIONS[InvoiceStatus.DRAFT] - {InvoiceStatus.CANCELLED}
)


class CreateInvoice:
    """
    Use Case: Create an invoice with its items

    Business Rules:
    1. Customer and addresses must exist
    2. due_date >= issue_date (defaults: today, today + 30 days)
    3. Invoice number is generated as PREFIX-YYYY-NNNNNN
    4. Totals are computed from the items and discount, never taken from input
    5. Header and items are created atomically

    Flow:
    1. Validate command and references
    2. Generate invoice number
    3. Insert header with zero totals
    4. Bulk insert items with derived line totals
    5. Recompute header totals from the stored items
    6. Commit, then invalidate cache
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        item_repo: InvoiceItemRepository,
        payment_repo: InvoicePaymentRepository,
        reference_validator: Optional[ReferenceValidator] = None,
        cache: Optional[CacheService] = None,
        invoice_number_prefix: str = "INV",
        default_currency: str = "USD",
        default_payment_terms: str = "Net 30",
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.item_repo = item_repo
        self.ledger = PaymentLedger(invoice_repo, payment_repo)
        self.reference_validator = reference_validator
        self.cache = cache
        self.invoice_number_prefix = invoice_number_prefix
        self.default_currency = default_currency
        self.default_payment_terms = default_payment_terms

    async def execute(self, command: CreateInvoiceCommandDTO) -> Result[InvoiceResponseDTO]:
        try:
            await self.uow.begin()

            # Step 1: Validate command and references
            issue_date = command.issue_date or utcnow().date()
            due_date = command.due_date or issue_date + timedelta(days=DEFAULT_DUE_DAYS)
            ensure_dates(issue_date, due_date)

            if command.status not in INITIAL_STATUSES:
                allowed = ", ".join(sorted(s.value for s in INITIAL_STATUSES))
                raise ValidationError(
                    f"Invoice cannot be created as {command.status.value}. Allowed: {allowed}",
                    code="INVALID_INITIAL_STATUS",
                    field="status",
                )

            await ensure_reference(self.reference_validator, ReferenceKind.CUSTOMER, command.customer_id)
            await ensure_reference(self.reference_validator, ReferenceKind.ADDRESS, command.billing_address_id)
            await ensure_reference(self.reference_validator, ReferenceKind.ADDRESS, command.shipping_address_id)
            for product_id in {i.product_id for i in command.items if i.product_id is not None}:
                await ensure_reference(self.reference_validator, ReferenceKind.PRODUCT, product_id)

            # Step 2: Generate invoice number
            invoice_number = await self.invoice_repo.generate_invoice_number(self.invoice_number_prefix)

            # Step 3: Insert header with zero totals
            invoice = await self.invoice_repo.create(
                Invoice(
                    invoice_number=invoice_number,
                    customer_id=command.customer_id,
                    customer_name=command.customer_name,
                    billing_address_id=command.billing_address_id,
                    shipping_address_id=command.shipping_address_id,
                    issue_date=issue_date,
                    due_date=due_date,
                    status=command.status,
                    subtotal=ZERO,
                    tax_amount=ZERO,
                    discount_amount=ZERO,
                    total_amount=ZERO,
                    paid_amount=ZERO,
                    is_paid=False,
                    notes=command.notes,
                    payment_terms=command.payment_terms or self.default_payment_terms,
                    payment_method=command.payment_method,
                    currency=(command.currency or self.default_currency).upper(),
                    exchange_rate=command.exchange_rate,
                    created_by=command.created_by,
                    updated_by=command.created_by,
                )
            )

            # Step 4: Bulk insert items
            items = []
            for data in command.items:
                item = InvoiceItem(
                    invoice_id=invoice.id,
                    product_id=data.product_id,
                    product_name=data.product_name,
                    description=data.description,
                    quantity=to_quantity(data.quantity),
                    unit_price=money(data.unit_price),
                    unit_of_measurement=data.unit_of_measurement,
                    tax_rate=data.tax_rate,
                )
                apply_line_totals(item)
                items.append(item)
            items = await self.item_repo.bulk_create(items) if items else []

            # Step 5: Recompute totals from the stored items
            invoice = await refresh_invoice_totals(
                invoice,
                self.invoice_repo,
                self.item_repo,
                self.ledger,
                discount=command.discount_amount,
            )

            # Step 6: Commit
            await self.uow.commit()
        except Exception as e:
            return await fail(self.uow, e, "create invoice", customer_id=command.customer_id)

        await invalidate_quietly(self.cache, invoice_cache_key(invoice.id))
        logger.info(
            f"Invoice {invoice.invoice_number} created for customer {invoice.customer_id}, "
            f"total {invoice.total_amount} {invoice.currency}"
        )
        return Return.ok(InvoiceResponseDTO.from_entity(invoice, items, []))
