"""Payment Ledger

Records payments against invoices and keeps the invoice's payment position
(paid_amount, is_paid, paid_date, status) consistent with them. This is the
only code path that moves an invoice into PAID.

Callers own the transaction: nothing here commits or rolls back.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple
from src.app.repositories.invoice_payment_repository import InvoicePaymentRepository
from src.app.repositories.invoice_repository import InvoiceRepository
from src.domain.base import utcnow
from src.domain.errors import (
    AmountExceedsBalanceError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from src.domain.invoice import CLOSED_STATUSES, Invoice, InvoiceStatus, PaymentMethod
from src.domain.invoice_payment import InvoicePayment
from src.domain.status_machine import invoice_status_machine
from src.domain.totals import money, ZERO

logger = logging.getLogger(__name__)

# A partial payment moves these to PARTIALLY_PAID; OVERDUE stays OVERDUE
PARTIAL_PAYMENT_SOURCES = (InvoiceStatus.ISSUED, InvoiceStatus.SENT)


def is_settled(paid_amount: Decimal, total_amount: Decimal) -> bool:
    return paid_amount >= total_amount


def settlement_fields(
    invoice: Invoice,
    paid_amount: Decimal,
    total_amount: Decimal,
    on_date: Optional[date] = None,
) -> Dict[str, Any]:
    """
    Payment position for an invoice given its paid and total amounts

    Returns:
        Fields to write: paid_amount, is_paid and, when they change,
        status and paid_date

    Raises:
        InvalidStateError: paid_amount exceeds total_amount
        InvalidTransitionError: the implied status change is not allowed
    """
    if paid_amount > total_amount:
        raise InvalidStateError(
            f"Invoice {invoice.invoice_number} total {total_amount} would drop below "
            f"the {paid_amount} already paid",
            code="TOTAL_BELOW_PAID_AMOUNT",
            invoice_id=invoice.id,
        )

    settled = is_settled(paid_amount, total_amount)
    fields: Dict[str, Any] = {"paid_amount": paid_amount, "is_paid": settled}

    # a zero-total invoice is settled but only a recorded payment makes it PAID
    target = None
    if settled and paid_amount > ZERO:
        target = InvoiceStatus.PAID
    elif paid_amount > ZERO and invoice.status in PARTIAL_PAYMENT_SOURCES:
        target = InvoiceStatus.PARTIALLY_PAID

    if target is not None and invoice_status_machine.validate(invoice.status, target):
        fields["status"] = target
    if settled and paid_amount > ZERO and invoice.paid_date is None:
        fields["paid_date"] = on_date or utcnow().date()
    return fields


class PaymentLedger:
    """
    Append-only payment ledger for invoices

    Business Rules:
    1. Payments are refused for cancelled, void and draft invoices
    2. A payment may never exceed the remaining balance
    3. mark-as-paid requires the exact remaining balance
    4. PAID is entered only when paid_amount == total_amount
    5. paid_amount is recomputed from the stored payments, never incremented

    The invoice row is locked (SELECT FOR UPDATE) before the balance is read,
    so two concurrent payments cannot both pass the balance check.
    """

    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        payment_repo: InvoicePaymentRepository,
    ):
        self.invoice_repo = invoice_repo
        self.payment_repo = payment_repo

    async def apply_payment(
        self,
        invoice_id: int,
        amount: Decimal,
        payment_method: PaymentMethod,
        payment_date: Optional[date] = None,
        reference: Optional[str] = None,
        notes: Optional[str] = None,
        created_by: Optional[str] = None,
        require_exact: bool = False,
    ) -> Tuple[Invoice, InvoicePayment]:
        """
        Record a payment and update the invoice's payment position

        Args:
            invoice_id: Invoice to pay
            amount: Amount received, > 0
            payment_method: How it was received
            require_exact: Amount must equal the remaining balance (mark as paid)

        Returns:
            Tuple of (updated Invoice, created InvoicePayment)

        Raises:
            NotFoundError, InvalidStateError, AmountExceedsBalanceError,
            ValidationError
        """
        amount = money(amount)
        if amount <= ZERO:
            raise ValidationError("Payment amount must be greater than zero", field="amount")

        invoice = await self.invoice_repo.get_by_id(invoice_id, for_update=True)
        if not invoice:
            raise NotFoundError(
                f"Invoice with ID {invoice_id} not found",
                code="INVOICE_NOT_FOUND",
                invoice_id=invoice_id,
            )

        if invoice.status in CLOSED_STATUSES:
            raise InvalidStateError(
                f"Cannot add payment to a {invoice.status.value} invoice",
                code="INVOICE_CLOSED",
                invoice_id=invoice_id,
                status=invoice.status.value,
            )
        if invoice.status == InvoiceStatus.DRAFT:
            raise InvalidStateError(
                "Invoice must be issued before payments are recorded",
                code="INVOICE_NOT_ISSUED",
                invoice_id=invoice_id,
            )
        if require_exact and (invoice.is_paid or invoice.status == InvoiceStatus.PAID):
            raise InvalidStateError(
                f"Invoice {invoice.invoice_number} is already paid",
                code="INVOICE_ALREADY_PAID",
                invoice_id=invoice_id,
            )

        total = money(invoice.total_amount)
        paid = await self.payment_repo.sum_by_invoice_id(invoice_id)
        remaining = total - paid

        if amount > remaining:
            raise AmountExceedsBalanceError(
                f"Payment amount {amount} exceeds remaining balance {remaining}",
                invoice_id=invoice_id,
                amount=str(amount),
                remaining=str(remaining),
            )
        if require_exact and amount != remaining:
            raise ValidationError(
                f"Payment amount {amount} must equal the remaining balance {remaining}",
                code="AMOUNT_MISMATCH",
                invoice_id=invoice_id,
                amount=str(amount),
                remaining=str(remaining),
            )

        payment_date = payment_date or utcnow().date()
        payment = await self.payment_repo.create(
            InvoicePayment(
                invoice_id=invoice_id,
                amount=amount,
                payment_date=payment_date,
                payment_method=payment_method,
                reference=reference,
                notes=notes,
                created_by=created_by,
            )
        )

        fields = settlement_fields(invoice, paid + amount, total, on_date=payment_date)
        if created_by:
            fields["updated_by"] = created_by
        updated = await self.invoice_repo.update(invoice_id, fields)

        logger.info(
            f"Payment {payment.id} of {amount} recorded on invoice {invoice.invoice_number}, "
            f"paid {fields['paid_amount']}/{total}"
        )
        return updated, payment

    async def reconcile(self, invoice: Invoice, total_amount: Decimal) -> Dict[str, Any]:
        """
        Payment position after the invoice total changed

        Used by item and discount edits so that is_paid and status follow the
        new total inside the same transaction.

        Returns:
            Fields to merge into the invoice update

        Raises:
            InvalidStateError: the new total is below the amount already paid
        """
        paid = await self.payment_repo.sum_by_invoice_id(invoice.id)
        return settlement_fields(invoice, paid, money(total_amount))
