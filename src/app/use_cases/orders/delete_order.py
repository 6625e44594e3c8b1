"""DeleteOrder Use Case

Orders are never removed from the database. Deleting a pending order
cancels it the same way CancelOrder does.
"""

from typing import Optional
from libs.result import Result, Return
from src.app.repositories.order_repository import OrderRepository
from src.app.services.cache_service import CacheService, invalidate_quietly, order_cache_key
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.shared import fail
from src.domain.errors import InvalidStateError
from src.domain.order import OrderStatus, PaymentStatus
from .common import get_order_for_update
from .dtos import OrderResponseDTO
from .update_order_status import transition_fields


class DeleteOrder:

    def __init__(
        self,
        uow: UnitOfWork,
        order_repo: OrderRepository,
        cache: Optional[CacheService] = None,
    ):
        self.uow = uow
        self.order_repo = order_repo
        self.cache = cache

    async def execute(self, order_id: int) -> Result[OrderResponseDTO]:
        try:
            await self.uow.begin()

            order = await get_order_for_update(self.order_repo, order_id)
            if order.order_status != OrderStatus.PENDING:
                raise InvalidStateError(
                    f"Only pending orders can be deleted (order is {order.order_status.value})",
                    code="ORDER_NOT_PENDING",
                    order_id=order_id,
                )

            fields = transition_fields(order, OrderStatus.CANCELLED)
            fields["payment_status"] = PaymentStatus.CANCELLED
            order = await self.order_repo.update(order_id, fields)
            await self.uow.commit()
        except Exception as e:
            return await fail(self.uow, e, "delete order", order_id=order_id)

        await invalidate_quietly(self.cache, order_cache_key(order_id))
        return Return.ok(OrderResponseDTO.from_entity(order))
