"""Order status transition Use Cases

UpdateOrderStatus is the generic transition; CompleteOrder and CancelOrder
are the named transitions with their side effects.
"""

import logging
from typing import Any, Dict, Optional
from libs.result import Result, Return
from src.app.repositories.order_repository import OrderRepository
from src.app.services.cache_service import CacheService, invalidate_quietly, order_cache_key
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.shared import append_note, fail
from src.domain.base import utcnow
from src.domain.order import Order, OrderStatus, PaymentStatus
from src.domain.status_machine import order_status_machine
from .common import get_order_for_update
from .dtos import OrderResponseDTO

logger = logging.getLogger(__name__)


def transition_fields(order: Order, target: OrderStatus) -> Dict[str, Any]:
    """
    Fields to write for a transition, empty for a same-status request

    Raises:
        InvalidTransitionError: the transition is not allowed
    """
    if not order_status_machine.validate(order.order_status, target):
        return {}
    fields: Dict[str, Any] = {"order_status": target}
    if target == OrderStatus.COMPLETED:
        fields["completed_at"] = utcnow()
    return fields


class _OrderTransition:
    def __init__(
        self,
        uow: UnitOfWork,
        order_repo: OrderRepository,
        cache: Optional[CacheService] = None,
    ):
        self.uow = uow
        self.order_repo = order_repo
        self.cache = cache

    async def _transition(
        self,
        order_id: int,
        target: Any,
        extra: Optional[Dict[str, Any]] = None,
        note: Optional[str] = None,
    ) -> Result[OrderResponseDTO]:
        try:
            await self.uow.begin()

            # Validate against the state read inside this transaction
            target = order_status_machine.parse(target)
            order = await get_order_for_update(self.order_repo, order_id)
            fields = transition_fields(order, target)

            if fields:
                fields.update(extra or {})
                if note:
                    fields["notes"] = append_note(order.notes, note)
                order = await self.order_repo.update(order_id, fields)
            await self.uow.commit()
        except Exception as e:
            return await fail(self.uow, e, "update order status", order_id=order_id, target_status=str(target))

        if fields:
            await invalidate_quietly(self.cache, order_cache_key(order_id))
            logger.info(f"Order {order_id} moved to {fields['order_status'].value}")
        return Return.ok(OrderResponseDTO.from_entity(order))


class UpdateOrderStatus(_OrderTransition):
    """
    Use Case: Move an order to another status

    Business Rules:
    1. Only transitions in the order table are allowed
    2. Same-status requests succeed without writing anything
    3. Entering COMPLETED sets completed_at in the same write
    4. Optional notes are appended to the order notes
    """

    async def execute(self, order_id: int, status: str, notes: Optional[str] = None) -> Result[OrderResponseDTO]:
        return await self._transition(order_id, status, note=notes)


class CompleteOrder(_OrderTransition):

    async def execute(self, order_id: int, notes: Optional[str] = None) -> Result[OrderResponseDTO]:
        return await self._transition(order_id, OrderStatus.COMPLETED, note=notes)


class CancelOrder(_OrderTransition):
    """
    Use Case: Cancel an order

    Completed orders cannot be cancelled. The payment status is set to
    cancelled and the reason is appended to the notes.
    """

    async def execute(self, order_id: int, reason: Optional[str] = None) -> Result[OrderResponseDTO]:
        return await self._transition(
            order_id,
            OrderStatus.CANCELLED,
            extra={"payment_status": PaymentStatus.CANCELLED},
            note=f"CANCELLATION: {reason}" if reason else None,
        )
