"""UpdatePaymentStatus Use Case

Orders carry a payment status flag with no ledger behind it.
"""

from typing import Optional
from libs.result import Result, Return
from src.app.repositories.order_repository import OrderRepository
from src.app.services.cache_service import CacheService, invalidate_quietly, order_cache_key
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.shared import append_note, fail
from .common import get_order_for_update
from .dtos import OrderResponseDTO, UpdatePaymentStatusCommandDTO


class UpdatePaymentStatus:

    def __init__(
        self,
        uow: UnitOfWork,
        order_repo: OrderRepository,
        cache: Optional[CacheService] = None,
    ):
        self.uow = uow
        self.order_repo = order_repo
        self.cache = cache

    async def execute(self, order_id: int, command: UpdatePaymentStatusCommandDTO) -> Result[OrderResponseDTO]:
        try:
            await self.uow.begin()

            order = await get_order_for_update(self.order_repo, order_id)
            fields = {"payment_status": command.payment_status}
            if command.notes:
                fields["notes"] = append_note(order.notes, command.notes)

            order = await self.order_repo.update(order_id, fields)
            await self.uow.commit()
        except Exception as e:
            return await fail(self.uow, e, "update order payment status", order_id=order_id)

        await invalidate_quietly(self.cache, order_cache_key(order_id))
        return Return.ok(OrderResponseDTO.from_entity(order))
