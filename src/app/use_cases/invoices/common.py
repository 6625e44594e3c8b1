"""Helpers shared by invoice use cases, all running in the caller's transaction"""

from decimal import Decimal
from typing import Any, Dict, Optional
from src.app.repositories.invoice_item_repository import InvoiceItemRepository
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.services.payment_ledger import PaymentLedger
from src.domain.errors import InvalidStateError, NotFoundError, ValidationError
from src.domain.invoice import Invoice
from src.domain.totals import recalculate


async def get_invoice_for_update(invoice_repo: InvoiceRepository, invoice_id: int) -> Invoice:
    """Lock and return the invoice, NotFoundError if it does not exist"""
    invoice = await invoice_repo.get_by_id(invoice_id, for_update=True)
    if not invoice:
        raise NotFoundError(
            f"Invoice with ID {invoice_id} not found",
            code="INVOICE_NOT_FOUND",
            invoice_id=invoice_id,
        )
    return invoice


def ensure_editable(invoice: Invoice) -> None:
    """Paid, cancelled and void invoices are read-only"""
    if invoice.is_locked():
        raise InvalidStateError(
            f"Cannot modify a {invoice.status.value} invoice",
            code="INVOICE_LOCKED",
            invoice_id=invoice.id,
            status=invoice.status.value,
        )


def ensure_dates(issue_date, due_date) -> None:
    if due_date < issue_date:
        raise ValidationError(
            f"Due date {due_date} is before issue date {issue_date}",
            code="INVALID_DUE_DATE",
            field="due_date",
        )


async def refresh_invoice_totals(
    invoice: Invoice,
    invoice_repo: InvoiceRepository,
    item_repo: InvoiceItemRepository,
    ledger: PaymentLedger,
    discount: Optional[Decimal] = None,
    extra_fields: Optional[Dict[str, Any]] = None,
) -> Invoice:
    """
    Rebuild header totals from every stored item and persist them

    The payment position is reconciled against the new total in the same
    write, so is_paid and status never lag behind the totals.
    """
    items = await item_repo.get_by_invoice_id(invoice.id)
    totals = recalculate(items, invoice.discount_amount if discount is None else discount)

    fields: Dict[str, Any] = {
        "subtotal": totals.subtotal,
        "tax_amount": totals.tax_amount,
        "discount_amount": totals.discount_amount,
        "total_amount": totals.total_amount,
    }
    fields.update(await ledger.reconcile(invoice, totals.total_amount))
    fields.update(extra_fields or {})
    return await invoice_repo.update(invoice.id, fields)
