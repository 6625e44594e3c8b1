"""Helpers shared by order use cases, all running in the caller's transaction"""

from src.app.repositories.order_detail_repository import OrderDetailRepository
from src.app.repositories.order_repository import OrderRepository
from src.domain.errors import NotFoundError
from src.domain.order import Order
from src.domain.totals import order_total


async def get_order_for_update(order_repo: OrderRepository, order_id: int) -> Order:
    """Lock and return the order, NotFoundError if it does not exist"""
    order = await order_repo.get_by_id(order_id, for_update=True)
    if not order:
        raise NotFoundError(
            f"Order with ID {order_id} not found",
            code="ORDER_NOT_FOUND",
            order_id=order_id,
        )
    return order


async def refresh_order_total(
    order_id: int,
    order_repo: OrderRepository,
    detail_repo: OrderDetailRepository,
) -> Order:
    """Rebuild total_amount from every stored detail and persist it"""
    details = await detail_repo.get_by_order_id(order_id)
    return await order_repo.update(order_id, {"total_amount": order_total(details)})
