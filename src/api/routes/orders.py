"""Order API Routes

FastAPI routes for orders and their cylinder details.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.repositories.order_repository import SqlAlchemyOrderRepository
from src.adapter.repositories.order_detail_repository import SqlAlchemyOrderDetailRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.error import ClientError
from src.api.schemas.order_request import (
    AssignDriverRequestSchema,
    CancelOrderRequestSchema,
    CompleteOrderRequestSchema,
    CreateOrderRequestSchema,
    OrderDetailRequestSchema,
    OrderStatusRequestSchema,
    PaymentStatusRequestSchema,
    UpdateOrderDetailRequestSchema,
    UpdateOrderRequestSchema,
)
from src.app.services.cache_service import CacheService
from src.app.services.reference_validator import ReferenceValidator
from src.app.use_cases.orders import (
    AddOrderDetail,
    AssignDriver,
    CancelOrder,
    CompleteOrder,
    CreateOrder,
    CreateOrderCommandDTO,
    DeleteOrder,
    GetOrder,
    GetOrderDetail,
    ListOrders,
    ListOrdersQueryDTO,
    OrderDetailDTO,
    OrderDetailInputDTO,
    OrderListResponseDTO,
    OrderResponseDTO,
    RemoveOrderDetail,
    UpdateOrder,
    UpdateOrderCommandDTO,
    UpdateOrderDetail,
    UpdateOrderDetailCommandDTO,
    UpdateOrderStatus,
    UpdatePaymentStatus,
    UpdatePaymentStatusCommandDTO,
)
from src.depends import get_cache_service, get_reference_validator, get_session
from src.domain.order import DeliveryMethod, OrderStatus, PaymentStatus

router = APIRouter(tags=["Orders"])

ORDER_ERROR_RESPONSES = {
    404: {
        "description": "Order not found",
        "content": {
            "application/json": {
                "example": {"error": {"code": "ORDER_NOT_FOUND", "message": "Order with ID 123 not found"}}
            }
        },
    },
    409: {
        "description": "Order state does not allow the operation",
        "content": {
            "application/json": {
                "example": {
                    "error": {
                        "code": "INVALID_TRANSITION",
                        "message": "Cannot transition order from 'completed' to 'processing'",
                    }
                }
            }
        },
    },
}


def _uow(session: AsyncSession) -> SqlAlchemyUnitOfWork:
    return SqlAlchemyUnitOfWork(session, ApplicationConfig.TRANSACTION_TIMEOUT_SECONDS)


async def _list_orders(session: AsyncSession, query: ListOrdersQueryDTO) -> OrderListResponseDTO:
    result = await ListOrders(SqlAlchemyOrderRepository(session)).execute(query)
    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.post(
    "/orders",
    response_model=OrderResponseDTO,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {
            "description": "Invalid order or unknown reference",
            "content": {
                "application/json": {
                    "example": {"error": {"code": "CUSTOMER_NOT_FOUND", "message": "Customer 42 does not exist"}}
                }
            },
        }
    },
)
async def create_order(
    request: CreateOrderRequestSchema,
    session: AsyncSession = Depends(get_session),
    cache: CacheService = Depends(get_cache_service),
    reference_validator: ReferenceValidator = Depends(get_reference_validator),
):
    """
    Create an order with its cylinder details.

    Line subtotals and the order total are computed by the server.
    The order starts as pending / unpaid.
    """
    use_case = CreateOrder(
        _uow(session),
        SqlAlchemyOrderRepository(session),
        SqlAlchemyOrderDetailRepository(session),
        reference_validator=reference_validator,
        cache=cache,
    )
    command = CreateOrderCommandDTO(**request.model_dump())
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.get("/orders", response_model=OrderListResponseDTO)
async def list_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    sort_by: str = Query("created_at"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    customer_id: Optional[int] = None,
    driver_id: Optional[int] = None,
    order_status: Optional[OrderStatus] = None,
    payment_status: Optional[PaymentStatus] = None,
    delivery_method: Optional[DeliveryMethod] = None,
    from_date: Optional[datetime] = None,
    to_date: Optional[datetime] = None,
    min_amount: Optional[Decimal] = None,
    max_amount: Optional[Decimal] = None,
    session: AsyncSession = Depends(get_session),
):
    """
    List orders with pagination, sorting and filters.

    `from_date` / `to_date` filter on the creation timestamp.
    """
    query = ListOrdersQueryDTO(
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
        customer_id=customer_id,
        driver_id=driver_id,
        order_status=order_status,
        payment_status=payment_status,
        delivery_method=delivery_method,
        from_date=from_date,
        to_date=to_date,
        min_amount=min_amount,
        max_amount=max_amount,
    )
    return await _list_orders(session, query)


@router.get("/customers/{customer_id}/orders", response_model=OrderListResponseDTO)
async def list_customer_orders(
    customer_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    session: AsyncSession = Depends(get_session),
):
    """List the orders of one customer, newest first."""
    query = ListOrdersQueryDTO(page=page, limit=limit, customer_id=customer_id)
    return await _list_orders(session, query)


@router.get("/drivers/{driver_id}/orders", response_model=OrderListResponseDTO)
async def list_driver_orders(
    driver_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    session: AsyncSession = Depends(get_session),
):
    """List the orders assigned to one driver, newest first."""
    query = ListOrdersQueryDTO(page=page, limit=limit, driver_id=driver_id)
    return await _list_orders(session, query)


@router.get("/orders/details/{detail_id}", response_model=OrderDetailDTO)
async def get_order_detail(detail_id: int, session: AsyncSession = Depends(get_session)):
    result = await GetOrderDetail(SqlAlchemyOrderDetailRepository(session)).execute(detail_id)
    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.get("/orders/{order_id}", response_model=OrderResponseDTO, responses=ORDER_ERROR_RESPONSES)
async def get_order(order_id: int, session: AsyncSession = Depends(get_session)):
    """Fetch an order with its details."""
    use_case = GetOrder(SqlAlchemyOrderRepository(session), SqlAlchemyOrderDetailRepository(session))
    result = await use_case.execute(order_id)
    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.patch("/orders/{order_id}", response_model=OrderResponseDTO, responses=ORDER_ERROR_RESPONSES)
async def update_order(
    order_id: int,
    request: UpdateOrderRequestSchema,
    session: AsyncSession = Depends(get_session),
    cache: CacheService = Depends(get_cache_service),
    reference_validator: ReferenceValidator = Depends(get_reference_validator),
):
    """
    Update order header fields.

    Only fields present in the body are changed. Completed and cancelled
    orders cannot be edited.
    """
    use_case = UpdateOrder(
        _uow(session),
        SqlAlchemyOrderRepository(session),
        reference_validator=reference_validator,
        cache=cache,
    )
    command = UpdateOrderCommandDTO(**request.model_dump(exclude_unset=True))
    result = await use_case.execute(order_id, command)

    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.put("/orders/{order_id}/driver", response_model=OrderResponseDTO, responses=ORDER_ERROR_RESPONSES)
async def assign_driver(
    order_id: int,
    request: AssignDriverRequestSchema,
    session: AsyncSession = Depends(get_session),
    cache: CacheService = Depends(get_cache_service),
    reference_validator: ReferenceValidator = Depends(get_reference_validator),
):
    use_case = AssignDriver(
        _uow(session),
        SqlAlchemyOrderRepository(session),
        reference_validator=reference_validator,
        cache=cache,
    )
    result = await use_case.execute(order_id, request.driver_id)

    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.post(
    "/orders/{order_id}/details",
    response_model=OrderResponseDTO,
    status_code=status.HTTP_201_CREATED,
    responses=ORDER_ERROR_RESPONSES,
)
async def add_order_detail(
    order_id: int,
    request: OrderDetailRequestSchema,
    session: AsyncSession = Depends(get_session),
    cache: CacheService = Depends(get_cache_service),
    reference_validator: ReferenceValidator = Depends(get_reference_validator),
):
    """Add a cylinder line; the order total is recalculated."""
    use_case = AddOrderDetail(
        _uow(session),
        SqlAlchemyOrderRepository(session),
        SqlAlchemyOrderDetailRepository(session),
        reference_validator=reference_validator,
        cache=cache,
    )
    result = await use_case.execute(order_id, OrderDetailInputDTO(**request.model_dump()))

    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.patch(
    "/orders/{order_id}/details/{detail_id}",
    response_model=OrderResponseDTO,
    responses=ORDER_ERROR_RESPONSES,
)
async def update_order_detail(
    order_id: int,
    detail_id: int,
    request: UpdateOrderDetailRequestSchema,
    session: AsyncSession = Depends(get_session),
    cache: CacheService = Depends(get_cache_service),
    reference_validator: ReferenceValidator = Depends(get_reference_validator),
):
    """Edit a cylinder line; its subtotal and the order total are recalculated."""
    use_case = UpdateOrderDetail(
        _uow(session),
        SqlAlchemyOrderRepository(session),
        SqlAlchemyOrderDetailRepository(session),
        reference_validator=reference_validator,
        cache=cache,
    )
    command = UpdateOrderDetailCommandDTO(**request.model_dump(exclude_unset=True))
    result = await use_case.execute(order_id, detail_id, command)

    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.delete(
    "/orders/{order_id}/details/{detail_id}",
    response_model=OrderResponseDTO,
    responses=ORDER_ERROR_RESPONSES,
)
async def remove_order_detail(
    order_id: int,
    detail_id: int,
    session: AsyncSession = Depends(get_session),
    cache: CacheService = Depends(get_cache_service),
):
    """Remove a line from a pending order; the order total is recalculated."""
    use_case = RemoveOrderDetail(
        _uow(session),
        SqlAlchemyOrderRepository(session),
        SqlAlchemyOrderDetailRepository(session),
        cache=cache,
    )
    result = await use_case.execute(order_id, detail_id)

    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.patch("/orders/{order_id}/status", response_model=OrderResponseDTO, responses=ORDER_ERROR_RESPONSES)
async def update_order_status(
    order_id: int,
    request: OrderStatusRequestSchema,
    session: AsyncSession = Depends(get_session),
    cache: CacheService = Depends(get_cache_service),
):
    """
    Move an order to another status.

    Allowed: pending -> processing | cancelled, processing -> completed |
    cancelled. Completed and cancelled are final. Requesting the current
    status is a no-op.
    """
    use_case = UpdateOrderStatus(_uow(session), SqlAlchemyOrderRepository(session), cache=cache)
    result = await use_case.execute(order_id, request.status, notes=request.notes)

    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.post("/orders/{order_id}/complete", response_model=OrderResponseDTO, responses=ORDER_ERROR_RESPONSES)
async def complete_order(
    order_id: int,
    request: Optional[CompleteOrderRequestSchema] = None,
    session: AsyncSession = Depends(get_session),
    cache: CacheService = Depends(get_cache_service),
):
    use_case = CompleteOrder(_uow(session), SqlAlchemyOrderRepository(session), cache=cache)
    result = await use_case.execute(order_id, notes=request.notes if request else None)

    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.post("/orders/{order_id}/cancel", response_model=OrderResponseDTO, responses=ORDER_ERROR_RESPONSES)
async def cancel_order(
    order_id: int,
    request: Optional[CancelOrderRequestSchema] = None,
    session: AsyncSession = Depends(get_session),
    cache: CacheService = Depends(get_cache_service),
):
    """Cancel an order; its payment status becomes cancelled."""
    use_case = CancelOrder(_uow(session), SqlAlchemyOrderRepository(session), cache=cache)
    result = await use_case.execute(order_id, reason=request.reason if request else None)

    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.patch("/orders/{order_id}/payment-status", response_model=OrderResponseDTO, responses=ORDER_ERROR_RESPONSES)
async def update_payment_status(
    order_id: int,
    request: PaymentStatusRequestSchema,
    session: AsyncSession = Depends(get_session),
    cache: CacheService = Depends(get_cache_service),
):
    use_case = UpdatePaymentStatus(_uow(session), SqlAlchemyOrderRepository(session), cache=cache)
    command = UpdatePaymentStatusCommandDTO(**request.model_dump())
    result = await use_case.execute(order_id, command)

    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.delete("/orders/{order_id}", response_model=OrderResponseDTO, responses=ORDER_ERROR_RESPONSES)
async def delete_order(
    order_id: int,
    session: AsyncSession = Depends(get_session),
    cache: CacheService = Depends(get_cache_service),
):
    """Soft-delete a pending order by cancelling it."""
    use_case = DeleteOrder(_uow(session), SqlAlchemyOrderRepository(session), cache=cache)
    result = await use_case.execute(order_id)

    if result.is_err():
        raise ClientError(result.error)
    return result.value
