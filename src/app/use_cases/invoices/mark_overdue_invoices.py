"""MarkOverdueInvoices Use Case

Moves unpaid invoices past their due date to OVERDUE.
"""

import logging
from datetime import date
from typing import Optional
from libs.result import Result, Return
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.services.cache_service import CacheService, invalidate_quietly, invoice_cache_key
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.shared import fail
from src.domain.base import utcnow
from src.domain.invoice import InvoiceStatus
from src.domain.status_machine import invoice_status_machine
from .dtos import MarkOverdueResultDTO

logger = logging.getLogger(__name__)


class MarkOverdueInvoices:
    """
    Use Case: Sweep overdue invoices

    Business Rules:
    1. Candidates are issued, sent or partially paid, unpaid, due before as_of
    2. Each candidate is re-read with a row lock and re-checked
    3. The transition goes through the invoice state machine
    4. One transaction for the whole batch
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        cache: Optional[CacheService] = None,
        batch_size: int = 500,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.cache = cache
        self.batch_size = batch_size

    async def execute(self, as_of: Optional[date] = None) -> Result[MarkOverdueResultDTO]:
        as_of = as_of or utcnow().date()
        try:
            await self.uow.begin()

            candidates = await self.invoice_repo.find_overdue(as_of, limit=self.batch_size)
            marked = []
            for candidate in candidates:
                invoice = await self.invoice_repo.get_by_id(candidate.id, for_update=True)
                if not invoice or invoice.status == InvoiceStatus.OVERDUE or not invoice.is_overdue(as_of):
                    continue
                if not invoice_status_machine.can_transition(invoice.status, InvoiceStatus.OVERDUE):
                    continue
                await self.invoice_repo.update(invoice.id, {"status": InvoiceStatus.OVERDUE})
                marked.append(invoice.id)

            await self.uow.commit()
        except Exception as e:
            return await fail(self.uow, e, "mark overdue invoices", as_of=as_of.isoformat())

        for invoice_id in marked:
            await invalidate_quietly(self.cache, invoice_cache_key(invoice_id))
        if marked:
            logger.info(f"Marked {len(marked)} invoice(s) overdue as of {as_of}")

        return Return.ok(
            MarkOverdueResultDTO(
                as_of=as_of,
                invoices_checked=len(candidates),
                invoices_marked=len(marked),
                invoice_ids=marked,
            )
        )
