"""GetInvoiceStatistics Use Case"""

from datetime import date
from typing import Optional
from libs.result import Result, Return
from src.app.repositories.filters import InvoiceFilters
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.use_cases.shared import unexpected
from src.domain.base import utcnow
from src.domain.totals import ZERO, money
from .dtos import InvoiceStatisticsDTO


class GetInvoiceStatistics:
    """
    Use Case: Aggregate amounts over invoices matching filters

    - total_paid: totals of paid invoices
    - total_unpaid: totals of unpaid invoices that are not cancelled or void
    - total_overdue: the unpaid ones past their due date
    - average_payment_time: mean days from issue_date to paid_date

    The sums run in the database; no invoice rows are loaded.
    """

    def __init__(self, invoice_repo: InvoiceRepository):
        self.invoice_repo = invoice_repo

    async def execute(
        self, filters: Optional[InvoiceFilters] = None, as_of: Optional[date] = None
    ) -> Result[InvoiceStatisticsDTO]:
        try:
            as_of = as_of or utcnow().date()
            aggregates = await self.invoice_repo.aggregate(filters or InvoiceFilters(), as_of)

            average = aggregates.average_payment_days
            return Return.ok(
                InvoiceStatisticsDTO(
                    total_paid=money(aggregates.total_paid),
                    total_unpaid=money(aggregates.total_unpaid),
                    total_overdue=money(aggregates.total_overdue),
                    average_payment_time=money(average) if average is not None else ZERO,
                    invoice_count=aggregates.invoice_count,
                )
            )
        except Exception as e:
            return unexpected(e, "calculate invoice statistics")
