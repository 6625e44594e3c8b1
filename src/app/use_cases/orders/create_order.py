"""CreateOrder Use Case

Creates an order header and its details in one transaction.
"""

import logging
from typing import Optional
from libs.result import Result, Return
from src.app.repositories.order_detail_repository import OrderDetailRepository
from src.app.repositories.order_repository import OrderRepository
from src.app.services.cache_service import CacheService, invalidate_quietly, order_cache_key
from src.app.services.reference_validator import ReferenceKind, ReferenceValidator
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.shared import ensure_reference, fail
from src.domain.errors import ValidationError
from src.domain.order import DeliveryMethod, Order, OrderStatus, PaymentStatus
from src.domain.order_detail import OrderDetail
from src.domain.totals import ZERO, calculate_order_line
from .dtos import CreateOrderCommandDTO, OrderResponseDTO
from .common import refresh_order_total

logger = logging.getLogger(__name__)


class CreateOrder:
    """
    Use Case: Create an order with its details

    Business Rules:
    1. Customer, address, driver and every cylinder category must exist
    2. Delivery orders require a delivery address
    3. At least one detail is required
    4. total_amount is the sum of detail subtotals, never taken from input
    5. Header and details are created atomically

    Flow:
    1. Validate command and references
    2. Insert header with total 0
    3. Bulk insert details with computed subtotals
    4. Recompute and persist the total from the stored details
    5. Commit, then invalidate cache
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

    async def execute(self, command: CreateOrderCommandDTO) -> Result[OrderResponseDTO]:
        try:
            await self.uow.begin()

            # Step 1: Validate command and references
            if not command.details:
                raise ValidationError("Order must contain at least one detail", field="details")
            if command.delivery_method == DeliveryMethod.DELIVERY and not command.delivery_address_id:
                raise ValidationError(
                    "Delivery address is required for delivery orders",
                    code="DELIVERY_ADDRESS_REQUIRED",
                    field="delivery_address_id",
                )

            await ensure_reference(self.reference_validator, ReferenceKind.CUSTOMER, command.customer_id)
            await ensure_reference(self.reference_validator, ReferenceKind.ADDRESS, command.delivery_address_id)
            await ensure_reference(self.reference_validator, ReferenceKind.DRIVER, command.driver_id)
            for category_id in {d.cylinder_category_id for d in command.details}:
                await ensure_reference(self.reference_validator, ReferenceKind.CYLINDER_CATEGORY, category_id)

            subtotals = [calculate_order_line(d.quantity, d.unit_price) for d in command.details]

            # Step 2: Insert header with a zero total
            order = await self.order_repo.create(
                Order(
                    customer_id=command.customer_id,
                    order_status=OrderStatus.PENDING,
                    payment_status=PaymentStatus.UNPAID,
                    total_amount=ZERO,
                    delivery_method=command.delivery_method,
                    delivery_address_id=command.delivery_address_id,
                    driver_id=command.driver_id,
                    notes=command.notes,
                    created_by=command.created_by,
                )
            )

            # Step 3: Bulk insert details
            details = await self.detail_repo.bulk_create(
                [
                    OrderDetail(
                        order_id=order.id,
                        cylinder_category_id=d.cylinder_category_id,
                        transaction_type=d.transaction_type,
                        quantity=d.quantity,
                        unit_price=d.unit_price,
                        subtotal=subtotal,
                        cylinder_condition=d.cylinder_condition,
                        notes=d.notes,
                    )
                    for d, subtotal in zip(command.details, subtotals)
                ]
            )

            # Step 4: Recompute the total from the stored details
            order = await refresh_order_total(order.id, self.order_repo, self.detail_repo)

            # Step 5: Commit
            await self.uow.commit()
        except Exception as e:
            return await fail(self.uow, e, "create order", customer_id=command.customer_id)

        await invalidate_quietly(self.cache, order_cache_key(order.id))
        logger.info(f"Order {order.id} created for customer {order.customer_id}, total {order.total_amount}")
        return Return.ok(OrderResponseDTO.from_entity(order, details))
