"""UpdateOrder / AssignDriver Use Cases

Partial header edits. Status is never changed here; see UpdateOrderStatus.
"""

import logging
from typing import Optional
from libs.result import Result, Return
from src.app.repositories.order_repository import OrderRepository
from src.app.services.cache_service import CacheService, invalidate_quietly, order_cache_key
from src.app.services.reference_validator import ReferenceKind, ReferenceValidator
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.shared import ensure_reference, fail, set_fields
from src.domain.errors import InvalidStateError, ValidationError
from src.domain.order import DeliveryMethod, Order
from .common import get_order_for_update
from .dtos import OrderResponseDTO, UpdateOrderCommandDTO

logger = logging.getLogger(__name__)


def _ensure_editable(order: Order) -> None:
    if order.is_terminal():
        raise InvalidStateError(
            f"Cannot modify a {order.order_status.value} order",
            code="ORDER_LOCKED",
            order_id=order.id,
            status=order.order_status.value,
        )


class UpdateOrder:
    """
    Use Case: Update order header fields

    Business Rules:
    1. Completed and cancelled orders cannot be edited
    2. A new delivery address or driver must exist
    3. A delivery order must end up with a delivery address
    """

    def __init__(
        self,
        uow: UnitOfWork,
        order_repo: OrderRepository,
        reference_validator: Optional[ReferenceValidator] = None,
        cache: Optional[CacheService] = None,
    ):
        self.uow = uow
        self.order_repo = order_repo
        self.reference_validator = reference_validator
        self.cache = cache

    async def execute(self, order_id: int, command: UpdateOrderCommandDTO) -> Result[OrderResponseDTO]:
        try:
            await self.uow.begin()

            order = await get_order_for_update(self.order_repo, order_id)
            _ensure_editable(order)

            fields = set_fields(command, Order)
            if "delivery_address_id" in fields:
                await ensure_reference(
                    self.reference_validator, ReferenceKind.ADDRESS, fields["delivery_address_id"]
                )
            if "driver_id" in fields:
                await ensure_reference(self.reference_validator, ReferenceKind.DRIVER, fields["driver_id"])

            method = fields.get("delivery_method", order.delivery_method)
            address_id = fields.get("delivery_address_id", order.delivery_address_id)
            if method == DeliveryMethod.DELIVERY and not address_id:
                raise ValidationError(
                    "Delivery address is required for delivery orders",
                    code="DELIVERY_ADDRESS_REQUIRED",
                    field="delivery_address_id",
                )

            if fields:
                order = await self.order_repo.update(order_id, fields)
            await self.uow.commit()
        except Exception as e:
            return await fail(self.uow, e, "update order", order_id=order_id)

        await invalidate_quietly(self.cache, order_cache_key(order_id))
        return Return.ok(OrderResponseDTO.from_entity(order))


class AssignDriver:
    """
    Use Case: Assign a driver to an order

    The driver must exist and the order must not be completed or cancelled.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        order_repo: OrderRepository,
        reference_validator: Optional[ReferenceValidator] = None,
        cache: Optional[CacheService] = None,
    ):
        self.uow = uow
        self.order_repo = order_repo
        self.reference_validator = reference_validator
        self.cache = cache

    async def execute(self, order_id: int, driver_id: int) -> Result[OrderResponseDTO]:
        try:
            await self.uow.begin()

            order = await get_order_for_update(self.order_repo, order_id)
            _ensure_editable(order)
            await ensure_reference(self.reference_validator, ReferenceKind.DRIVER, driver_id)

            order = await self.order_repo.update(order_id, {"driver_id": driver_id})
            await self.uow.commit()
        except Exception as e:
            return await fail(self.uow, e, "assign driver", order_id=order_id, driver_id=driver_id)

        await invalidate_quietly(self.cache, order_cache_key(order_id))
        logger.info(f"Driver {driver_id} assigned to order {order_id}")
        return Return.ok(OrderResponseDTO.from_entity(order))
