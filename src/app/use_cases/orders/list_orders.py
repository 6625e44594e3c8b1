"""ListOrders Use Case

Paginated, filtered order listing. Per-customer and per-driver listings are
the same query with customer_id or driver_id set.
"""

from libs.result import Result, Return
from src.app.repositories.filters import OrderFilters
from src.app.repositories.order_repository import OrderRepository
from src.app.use_cases.shared import pagination_meta, unexpected
from .dtos import ListOrdersQueryDTO, OrderListResponseDTO, OrderResponseDTO


class ListOrders:

    def __init__(self, order_repo: OrderRepository):
        self.order_repo = order_repo

    async def execute(self, query: ListOrdersQueryDTO) -> Result[OrderListResponseDTO]:
        """
        Args:
            query: Filters plus page, limit, sort_by and sort_order

        Returns:
            Result[OrderListResponseDTO]: page of orders (without details) and page meta
        """
        try:
            filters = OrderFilters(**query.model_dump(include=set(OrderFilters.model_fields)))
            orders, total = await self.order_repo.list(
                filters,
                limit=query.limit,
                offset=query.offset,
                sort_by=query.sort_by,
                descending=query.descending,
            )
            return Return.ok(
                OrderListResponseDTO(
                    items=[OrderResponseDTO.from_entity(order) for order in orders],
                    meta=pagination_meta(query.page, query.limit, total),
                )
            )
        except Exception as e:
            return unexpected(e, "list orders")
