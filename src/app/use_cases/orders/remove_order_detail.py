"""RemoveOrderDetail Use Case"""

from typing import Optional
from libs.result import Result, Return
from src.app.repositories.order_detail_repository import OrderDetailRepository
from src.app.repositories.order_repository import OrderRepository
from src.app.services.cache_service import CacheService, invalidate_quietly, order_cache_key
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.shared import fail
from src.domain.errors import InvalidStateError, NotFoundError
from src.domain.order import OrderStatus
from .common import get_order_for_update, refresh_order_total
from .dtos import OrderResponseDTO


class RemoveOrderDetail:
    """
    Use Case: Delete one line of a pending order

    Business Rules:
    1. Only pending orders may lose lines
    2. The order total is rebuilt from the remaining details
    """

    def __init__(
        self,
        uow: UnitOfWork,
        order_repo: OrderRepository,
        detail_repo: OrderDetailRepository,
        cache: Optional[CacheService] = None,
    ):
        self.uow = uow
        self.order_repo = order_repo
        self.detail_repo = detail_repo
        self.cache = cache

    async def execute(self, order_id: int, detail_id: int) -> Result[OrderResponseDTO]:
        try:
            await self.uow.begin()

            order = await get_order_for_update(self.order_repo, order_id)
            detail = await self.detail_repo.get_by_id(detail_id)
            if not detail or detail.order_id != order_id:
                raise NotFoundError(
                    f"Order detail with ID {detail_id} not found on order {order_id}",
                    code="ORDER_DETAIL_NOT_FOUND",
                    order_id=order_id,
                    detail_id=detail_id,
                )
            if order.order_status != OrderStatus.PENDING:
                raise InvalidStateError(
                    f"Details can only be removed from pending orders (order is {order.order_status.value})",
                    code="ORDER_NOT_PENDING",
                    order_id=order_id,
                )

            await self.detail_repo.delete(detail_id)
            order = await refresh_order_total(order_id, self.order_repo, self.detail_repo)
            details = await self.detail_repo.get_by_order_id(order_id)

            await self.uow.commit()
        except Exception as e:
            return await fail(self.uow, e, "remove order detail", order_id=order_id, detail_id=detail_id)

        await invalidate_quietly(self.cache, order_cache_key(order_id))
        return Return.ok(OrderResponseDTO.from_entity(order, details))
