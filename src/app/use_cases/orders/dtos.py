"""Data Transfer Objects for Order Use Cases

Pydantic models for command inputs and response outputs.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field
from src.app.repositories.filters import OrderFilters
from src.app.use_cases.shared import PageQueryDTO, PaginationMetaDTO
from src.domain.order import DeliveryMethod, Order, PaymentStatus
from src.domain.order_detail import CylinderCondition, OrderDetail, TransactionType


class OrderDetailInputDTO(BaseModel):
    """One cylinder line of a new order or an added detail"""

    cylinder_category_id: int = Field(..., description="Cylinder category")
    transaction_type: TransactionType = Field(..., description="sale, exchange, refill or return")
    quantity: int = Field(..., ge=1, description="Number of cylinders (>= 1)")
    unit_price: Decimal = Field(..., ge=0, description="Price per cylinder (>= 0)")
    cylinder_condition: Optional[CylinderCondition] = None
    notes: Optional[str] = None


class CreateOrderCommandDTO(BaseModel):
    """
    Command DTO for creating an order

    Used as input to CreateOrder use case.
    """

    customer_id: int = Field(..., description="Customer placing the order")
    delivery_method: DeliveryMethod = Field(default=DeliveryMethod.PICKUP)
    delivery_address_id: Optional[int] = Field(
        default=None,
        description="Required when delivery_method is delivery"
    )
    driver_id: Optional[int] = None
    notes: Optional[str] = None
    created_by: Optional[str] = None
    details: List[OrderDetailInputDTO] = Field(default_factory=list)

    class Config:
        json_schema_extra = {
            "example": {
                "customer_id": 42,
                "delivery_method": "delivery",
                "delivery_address_id": 7,
                "details": [
                    {"cylinder_category_id": 3, "transaction_type": "refill", "quantity": 2, "unit_price": "10.00"},
                    {"cylinder_category_id": 5, "transaction_type": "sale", "quantity": 1, "unit_price": "5.00"}
                ]
            }
        }


class UpdateOrderCommandDTO(BaseModel):
    """Partial header update; only fields that are set are written"""

    delivery_method: Optional[DeliveryMethod] = None
    delivery_address_id: Optional[int] = None
    driver_id: Optional[int] = None
    notes: Optional[str] = None


class UpdateOrderDetailCommandDTO(BaseModel):
    """Partial detail update; only fields that are set are written"""

    cylinder_category_id: Optional[int] = None
    transaction_type: Optional[TransactionType] = None
    quantity: Optional[int] = Field(default=None, ge=1)
    unit_price: Optional[Decimal] = Field(default=None, ge=0)
    cylinder_condition: Optional[CylinderCondition] = None
    notes: Optional[str] = None


class UpdateOrderStatusCommandDTO(BaseModel):
    status: str = Field(..., description="Target order status")
    notes: Optional[str] = None


class UpdatePaymentStatusCommandDTO(BaseModel):
    payment_status: PaymentStatus
    notes: Optional[str] = None


class ListOrdersQueryDTO(PageQueryDTO, OrderFilters):
    """Filters plus page/limit/sort"""
    pass


class OrderDetailDTO(BaseModel):
    id: int
    order_id: int
    cylinder_category_id: int
    transaction_type: TransactionType
    quantity: int
    unit_price: Decimal
    subtotal: Decimal
    cylinder_condition: Optional[CylinderCondition] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @classmethod
    def from_entity(cls, detail: OrderDetail) -> "OrderDetailDTO":
        return cls.model_validate(detail)


class OrderResponseDTO(BaseModel):
    """
    Response DTO for an order, with its details when loaded
    """

    id: int
    customer_id: int
    order_status: str
    payment_status: str
    total_amount: Decimal
    delivery_method: str
    delivery_address_id: Optional[int] = None
    driver_id: Optional[int] = None
    completed_at: Optional[datetime] = None
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    details: Optional[List[OrderDetailDTO]] = None

    class Config:
        json_schema_extra = {
            "example": {
                "id": 1,
                "customer_id": 42,
                "order_status": "pending",
                "payment_status": "unpaid",
                "total_amount": "25.00",
                "delivery_method": "delivery",
                "delivery_address_id": 7,
                "details": []
            }
        }

    @classmethod
    def from_entity(
        cls, order: Order, details: Optional[List[OrderDetail]] = None
    ) -> "OrderResponseDTO":
        return cls(
            id=order.id,
            customer_id=order.customer_id,
            order_status=order.order_status.value,
            payment_status=order.payment_status.value,
            total_amount=order.total_amount,
            delivery_method=order.delivery_method.value,
            delivery_address_id=order.delivery_address_id,
            driver_id=order.driver_id,
            completed_at=order.completed_at,
            notes=order.notes,
            created_by=order.created_by,
            created_at=order.created_at,
            updated_at=order.updated_at,
            details=[OrderDetailDTO.from_entity(d) for d in details] if details is not None else None,
        )


class OrderListResponseDTO(BaseModel):
    items: List[OrderResponseDTO]
    meta: PaginationMetaDTO
