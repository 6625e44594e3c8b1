"""ListInvoices Use Case

Paginated, filtered invoice listing. The per-customer listing is the same
query with customer_id set.
"""

from libs.result import Result, Return
from src.app.repositories.filters import InvoiceFilters
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.use_cases.shared import pagination_meta, unexpected
from .dtos import InvoiceListResponseDTO, InvoiceResponseDTO, ListInvoicesQueryDTO


class ListInvoices:

    def __init__(self, invoice_repo: InvoiceRepository):
        self.invoice_repo = invoice_repo

    async def execute(self, query: ListInvoicesQueryDTO) -> Result[InvoiceListResponseDTO]:
        """
        Args:
            query: Filters plus page, limit, sort_by and sort_order

        Returns:
            Result[InvoiceListResponseDTO]: page of invoice headers and page meta
        """
        try:
            filters = InvoiceFilters(**query.model_dump(include=set(InvoiceFilters.model_fields)))
            invoices, total = await self.invoice_repo.list(
                filters,
                limit=query.limit,
                offset=query.offset,
                sort_by=query.sort_by,
                descending=query.descending,
            )
            return Return.ok(
                InvoiceListResponseDTO(
                    items=[InvoiceResponseDTO.from_entity(invoice) for invoice in invoices],
                    meta=pagination_meta(query.page, query.limit, total),
                )
            )
        except Exception as e:
            return unexpected(e, "list invoices")
