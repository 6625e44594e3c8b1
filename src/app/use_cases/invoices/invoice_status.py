"""Invoice status Use Cases

UpdateInvoiceStatus is the generic transition; MarkInvoiceSent,
CancelInvoice and DeleteInvoice are the named ones. PAID and PARTIALLY_PAID
are never set here: only the PaymentLedger can establish them.
"""

import logging
from typing import Any, Dict, Optional
from libs.result import Result, Return
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.services.cache_service import CacheService, invalidate_quietly, invoice_cache_key
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.shared import append_note, fail
from src.domain.errors import InvalidStateError, InvalidTransitionError
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.status_machine import LEDGER_ONLY_INVOICE_STATUSES, invoice_status_machine
from .common import get_invoice_for_update
from .dtos import CancelInvoiceCommandDTO, InvoiceResponseDTO, UpdateInvoiceStatusCommandDTO

logger = logging.getLogger(__name__)


def transition_fields(invoice: Invoice, target: InvoiceStatus) -> Dict[str, Any]:
    """
    Fields to write for a bare status transition, empty for a same-status request

    Raises:
        InvalidTransitionError: target is ledger-only or not in the table
        InvalidStateError: cancelling or voiding an invoice that is paid
    """
    if target in LEDGER_ONLY_INVOICE_STATUSES and invoice.status != target:
        raise InvalidTransitionError(
            "invoice",
            invoice.status.value,
            target.value,
            reason="Payment statuses are set by recording payments",
        )
    if not invoice_status_machine.validate(invoice.status, target):
        return {}
    if target in (InvoiceStatus.CANCELLED, InvoiceStatus.VOID) and invoice.is_paid_off():
        raise InvalidStateError(
            f"Cannot {'cancel' if target == InvoiceStatus.CANCELLED else 'void'} a paid invoice",
            code="INVOICE_ALREADY_PAID",
            invoice_id=invoice.id,
        )
    return {"status": target}


class _InvoiceTransition:
    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        cache: Optional[CacheService] = None,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.cache = cache

    def _check(self, invoice: Invoice, target: InvoiceStatus) -> None:
        """Extra preconditions of a named transition"""
        pass

    async def _transition(
        self,
        invoice_id: int,
        target: Any,
        note: Optional[str] = None,
        updated_by: Optional[str] = None,
    ) -> Result[InvoiceResponseDTO]:
        try:
            await self.uow.begin()

            # Validate against the state read inside this transaction
            target = invoice_status_machine.parse(target)
            invoice = await get_invoice_for_update(self.invoice_repo, invoice_id)
            self._check(invoice, target)
            fields = transition_fields(invoice, target)

            if fields:
                if note:
                    fields["notes"] = append_note(invoice.notes, note)
                if updated_by:
                    fields["updated_by"] = updated_by
                invoice = await self.invoice_repo.update(invoice_id, fields)
            await self.uow.commit()
        except Exception as e:
            return await fail(self.uow, e, "update invoice status", invoice_id=invoice_id, target_status=str(target))

        if fields:
            await invalidate_quietly(self.cache, invoice_cache_key(invoice_id))
            logger.info(f"Invoice {invoice.invoice_number} moved to {invoice.status.value}")
        return Return.ok(InvoiceResponseDTO.from_entity(invoice))


class UpdateInvoiceStatus(_InvoiceTransition):
    """
    Use Case: Move an invoice to another status

    Business Rules:
    1. Only transitions in the invoice table are allowed
    2. paid / partially_paid are refused (payment path only)
    3. Same-status requests succeed without writing anything
    4. Optional notes are appended to the invoice notes
    """

    async def execute(self, invoice_id: int, command: UpdateInvoiceStatusCommandDTO) -> Result[InvoiceResponseDTO]:
        return await self._transition(
            invoice_id, command.status, note=command.notes, updated_by=command.updated_by
        )


class MarkInvoiceSent(_InvoiceTransition):

    async def execute(self, invoice_id: int, updated_by: Optional[str] = None) -> Result[InvoiceResponseDTO]:
        return await self._transition(invoice_id, InvoiceStatus.SENT, updated_by=updated_by)


class CancelInvoice(_InvoiceTransition):
    """
    Use Case: Cancel an invoice

    Only unpaid invoices can be cancelled. The reason is appended to the
    notes as "CANCELLATION: <reason>".
    """

    def _check(self, invoice: Invoice, target: InvoiceStatus) -> None:
        if invoice.is_paid_off():
            raise InvalidStateError(
                "Cannot cancel a paid invoice",
                code="INVOICE_ALREADY_PAID",
                invoice_id=invoice.id,
            )

    async def execute(self, invoice_id: int, command: CancelInvoiceCommandDTO) -> Result[InvoiceResponseDTO]:
        return await self._transition(
            invoice_id,
            InvoiceStatus.CANCELLED,
            note=f"CANCELLATION: {command.reason}" if command.reason else None,
            updated_by=command.updated_by,
        )


class DeleteInvoice(_InvoiceTransition):
    """
    Use Case: Delete a draft invoice

    Invoices are never removed from the database; a draft is cancelled.
    """

    def _check(self, invoice: Invoice, target: InvoiceStatus) -> None:
        if invoice.status != InvoiceStatus.DRAFT:
            raise InvalidStateError(
                f"Only draft invoices can be deleted (invoice is {invoice.status.value})",
                code="INVOICE_NOT_DRAFT",
                invoice_id=invoice.id,
            )

    async def execute(self, invoice_id: int, updated_by: Optional[str] = None) -> Result[InvoiceResponseDTO]:
        return await self._transition(invoice_id, InvoiceStatus.CANCELLED, updated_by=updated_by)
