"""GetOrder / GetOrderDetail Use Cases"""

from libs.result import Result, Return
from src.app.repositories.order_detail_repository import OrderDetailRepository
from src.app.repositories.order_repository import OrderRepository
from src.app.use_cases.shared import unexpected
from src.domain.errors import NotFoundError
from .dtos import OrderDetailDTO, OrderResponseDTO


class GetOrder:
    """
    Use Case: Fetch an order with its details

    Read-only; no transaction or rollback needed.
    """

    def __init__(self, order_repo: OrderRepository, detail_repo: OrderDetailRepository):
        self.order_repo = order_repo
        self.detail_repo = detail_repo

    async def execute(self, order_id: int) -> Result[OrderResponseDTO]:
        try:
            order = await self.order_repo.get_by_id(order_id)
            if not order:
                return Return.err(
                    NotFoundError(
                        f"Order with ID {order_id} not found",
                        code="ORDER_NOT_FOUND",
                        order_id=order_id,
                    ).to_error()
                )

            details = await self.detail_repo.get_by_order_id(order_id)
            return Return.ok(OrderResponseDTO.from_entity(order, details))

        except Exception as e:
            return unexpected(e, "retrieve order", order_id=order_id)


class GetOrderDetail:

    def __init__(self, detail_repo: OrderDetailRepository):
        self.detail_repo = detail_repo

    async def execute(self, detail_id: int) -> Result[OrderDetailDTO]:
        try:
            detail = await self.detail_repo.get_by_id(detail_id)
            if not detail:
                return Return.err(
                    NotFoundError(
                        f"Order detail with ID {detail_id} not found",
                        code="ORDER_DETAIL_NOT_FOUND",
                        detail_id=detail_id,
                    ).to_error()
                )
            return Return.ok(OrderDetailDTO.from_entity(detail))

        except Exception as e:
            return unexpected(e, "retrieve order detail", detail_id=detail_id)
