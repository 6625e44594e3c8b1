"""AddOrderDetail Use Case"""

from typing import Optional
from libs.result import Result, Return
from src.app.repositories.order_detail_repository import OrderDetailRepository
from src.app.repositories.order_repository import OrderRepository
from src.app.services.cache_service import CacheService, invalidate_quietly, order_cache_key
from src.app.services.reference_validator import ReferenceKind, ReferenceValidator
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.shared import ensure_reference, fail
from src.domain.errors import InvalidStateError
from src.domain.order_detail import OrderDetail
from src.domain.totals import calculate_order_line
from .common import get_order_for_update, refresh_order_total
from .dtos import OrderDetailInputDTO, OrderResponseDTO


class AddOrderDetail:
    """
    Use Case: Add a cylinder line to an order

    Business Rules:
    1. Completed and cancelled orders are locked
    2. The cylinder category must exist
    3. The order total is rebuilt from every detail after the insert

    Flow:
    1. Lock order, check status
    2. Insert detail with computed subtotal
    3. Recompute and persist order total
    4. Commit, then invalidate cache
    """

    def __init__(
        self,
        uow: UnitOfWork,
        order_repo: OrderRepository,
        detail_repo: OrderDetailRepository,
        reference_validator: Optional[ReferenceValidator] = None,
        cache: Optional[CacheService] = None,
    ):
        self.uow = uow
        self.order_repo = order_repo
        self.detail_repo = detail_repo
        self.reference_validator = reference_validator
        self.cache = cache

    async def execute(self, order_id: int, command: OrderDetailInputDTO) -> Result[OrderResponseDTO]:
        try:
            await self.uow.begin()

            # Step 1: Lock order and check it accepts new lines
            order = await get_order_for_update(self.order_repo, order_id)
            if order.is_terminal():
                raise InvalidStateError(
                    f"Cannot add details to a {order.order_status.value} order",
                    code="ORDER_LOCKED",
                    order_id=order_id,
                )
            await ensure_reference(
                self.reference_validator, ReferenceKind.CYLINDER_CATEGORY, command.cylinder_category_id
            )

            # Step 2: Insert detail
            await self.detail_repo.create(
                OrderDetail(
                    order_id=order_id,
                    cylinder_category_id=command.cylinder_category_id,
                    transaction_type=command.transaction_type,
                    quantity=command.quantity,
                    unit_price=command.unit_price,
                    subtotal=calculate_order_line(command.quantity, command.unit_price),
                    cylinder_condition=command.cylinder_condition,
                    notes=command.notes,
                )
            )

            # Step 3: Recompute total
            order = await refresh_order_total(order_id, self.order_repo, self.detail_repo)
            details = await self.detail_repo.get_by_order_id(order_id)

            # Step 4: Commit
            await self.uow.commit()
        except Exception as e:
            return await fail(self.uow, e, "add order detail", order_id=order_id)

        await invalidate_quietly(self.cache, order_cache_key(order_id))
        return Return.ok(OrderResponseDTO.from_entity(order, details))
