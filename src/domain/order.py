"""Order Domain Entity

Customer order for gas cylinders (sale, exchange, refill or return) with an
optional delivery.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import CheckConstraint, Numeric, String, Text
from src.domain.base import BaseModel, IdType, timestamp_column, utcnow


class OrderStatus(str, Enum):
    """Order lifecycle status"""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    """Payment status recorded on the order (no ledger behind it)"""
    UNPAID = "unpaid"
    PAID = "paid"
    PARTIALLY_PAID = "partially_paid"
    REFUNDED = "refunded"
    CANCELLED = "cancelled"


class DeliveryMethod(str, Enum):
    PICKUP = "pickup"
    DELIVERY = "delivery"


class Order(BaseModel, table=True):
    """
    Order - Header of a cylinder order

    Domain Rules:
    - total_amount is the sum of all order_details.subtotal
    - delivery orders carry a delivery_address_id
    - completed_at is set when the order enters COMPLETED
    - orders are never hard-deleted; deletion sets status CANCELLED
    """

    __tablename__ = "orders"
    __table_args__ = (
        Index('ix_orders_customer_id', 'customer_id'),
        Index('ix_orders_driver_id', 'driver_id'),
        Index('ix_orders_order_status', 'order_status'),
        CheckConstraint('total_amount >= 0', name='ck_orders_total_amount_non_negative'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique order identifier (auto-increment)"
    )

    customer_id: int = Field(
        description="Customer placing the order"
    )

    order_status: OrderStatus = Field(
        default=OrderStatus.PENDING,
        description="Order status (pending, processing, completed, cancelled)"
    )

    payment_status: PaymentStatus = Field(
        default=PaymentStatus.UNPAID,
        description="Payment status (unpaid, paid, partially_paid, refunded, cancelled)"
    )

    total_amount: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(12, 2), nullable=False),
        description="Sum of detail subtotals (precision: 12,2)"
    )

    delivery_method: DeliveryMethod = Field(
        default=DeliveryMethod.PICKUP,
        description="Pickup or delivery"
    )

    delivery_address_id: Optional[int] = Field(
        default=None,
        description="Customer address used for delivery"
    )

    driver_id: Optional[int] = Field(
        default=None,
        description="Driver assigned to the delivery"
    )

    completed_at: Optional[datetime] = Field(
        default=None,
        sa_column=timestamp_column(nullable=True),
        description="Timestamp when the order was completed"
    )

    notes: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
        description="Free-form notes, cancellation reasons are recorded here"
    )

    created_by: Optional[str] = Field(
        default=None,
        sa_column=Column(String(100), nullable=True),
        description="User that created the order"
    )

    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=timestamp_column(),
        description="Order creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column=timestamp_column(),
        description="Last update timestamp"
    )

    def is_terminal(self) -> bool:
        return self.order_status in (OrderStatus.COMPLETED, OrderStatus.CANCELLED)

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": 1,
                "customer_id": 42,
                "order_status": "pending",
                "payment_status": "unpaid",
                "total_amount": "25.00",
                "delivery_method": "delivery",
                "delivery_address_id": 7,
                "driver_id": None,
                "completed_at": None,
                "notes": None,
                "created_at": "2024-03-01T09:00:00Z",
                "updated_at": "2024-03-01T09:00:00Z"
            }
        }
