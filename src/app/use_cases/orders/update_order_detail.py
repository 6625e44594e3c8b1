"""UpdateOrderDetail Use Case"""

from typing import Optional
from libs.result import Result, Return
from src.app.repositories.order_detail_repository import OrderDetailRepository
from src.app.repositories.order_repository import OrderRepository
from src.app.services.cache_service import CacheService, invalidate_quietly, order_cache_key
from src.app.services.reference_validator import ReferenceKind, ReferenceValidator
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.shared import ensure_reference, fail, set_fields
from src.domain.errors import InvalidStateError, NotFoundError
from src.domain.order_detail import OrderDetail
from src.domain.totals import calculate_order_line
from .common import get_order_for_update, refresh_order_total
from .dtos import OrderResponseDTO, UpdateOrderDetailCommandDTO


class UpdateOrderDetail:
    """
    Use Case: Edit one line of an order

    Business Rules:
    1. The detail must belong to the order
    2. Completed and cancelled orders are locked
    3. subtotal and the order total are recomputed in the same transaction
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

    async def execute(
        self, order_id: int, detail_id: int, command: UpdateOrderDetailCommandDTO
    ) -> Result[OrderResponseDTO]:
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
            if order.is_terminal():
                raise InvalidStateError(
                    f"Cannot modify details of a {order.order_status.value} order",
                    code="ORDER_LOCKED",
                    order_id=order_id,
                )

            fields = set_fields(command, OrderDetail)
            if "cylinder_category_id" in fields:
                await ensure_reference(
                    self.reference_validator, ReferenceKind.CYLINDER_CATEGORY, fields["cylinder_category_id"]
                )
            quantity = fields.get("quantity", detail.quantity)
            unit_price = fields.get("unit_price", detail.unit_price)
            fields["subtotal"] = calculate_order_line(quantity, unit_price)

            await self.detail_repo.update(detail_id, fields)
            order = await refresh_order_total(order_id, self.order_repo, self.detail_repo)
            details = await self.detail_repo.get_by_order_id(order_id)

            await self.uow.commit()
        except Exception as e:
            return await fail(self.uow, e, "update order detail", order_id=order_id, detail_id=detail_id)

        await invalidate_quietly(self.cache, order_cache_key(order_id))
        return Return.ok(OrderResponseDTO.from_entity(order, details))
