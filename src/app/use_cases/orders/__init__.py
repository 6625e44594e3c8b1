"""Order use cases"""
from .create_order import CreateOrder
from .get_order import GetOrder, GetOrderDetail
from .list_orders import ListOrders
from .update_order import UpdateOrder, AssignDriver
from .add_order_detail import AddOrderDetail
from .update_order_detail import UpdateOrderDetail
from .remove_order_detail import RemoveOrderDetail
from .update_order_status import UpdateOrderStatus, CompleteOrder, CancelOrder
from .update_payment_status import UpdatePaymentStatus
from .delete_order import DeleteOrder
from .dtos import (
    OrderDetailInputDTO,
    CreateOrderCommandDTO,
    UpdateOrderCommandDTO,
    UpdateOrderDetailCommandDTO,
    UpdateOrderStatusCommandDTO,
    UpdatePaymentStatusCommandDTO,
    ListOrdersQueryDTO,
    OrderDetailDTO,
    OrderResponseDTO,
    OrderListResponseDTO,
)

__all__ = [
    "CreateOrder",
    "GetOrder",
    "GetOrderDetail",
    "ListOrders",
    "UpdateOrder",
    "AssignDriver",
    "AddOrderDetail",
    "UpdateOrderDetail",
    "RemoveOrderDetail",
    "UpdateOrderStatus",
    "CompleteOrder",
    "CancelOrder",
    "UpdatePaymentStatus",
    "DeleteOrder",
    "OrderDetailInputDTO",
    "CreateOrderCommandDTO",
    "UpdateOrderCommandDTO",
    "UpdateOrderDetailCommandDTO",
    "UpdateOrderStatusCommandDTO",
    "UpdatePaymentStatusCommandDTO",
    "ListOrdersQueryDTO",
    "OrderDetailDTO",
    "OrderResponseDTO",
    "OrderListResponseDTO",
]
