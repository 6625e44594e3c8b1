"""Order Detail Domain Entity

One cylinder line of an order.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import CheckConstraint, ForeignKey, Integer, Numeric, Text
from src.domain.base import BaseModel, IdType, timestamp_column, utcnow


class TransactionType(str, Enum):
    """What happens to the cylinder on this line"""
    SALE = "sale"
    EXCHANGE = "exchange"
    REFILL = "refill"
    RETURN = "return"


class CylinderCondition(str, Enum):
    FILLED = "filled"
    EMPTY = "empty"
    DAMAGED = "damaged"


class OrderDetail(BaseModel, table=True):
    """
    Order Detail - Cylinder line item within an order

    Domain Rules:
    - quantity is a whole number >= 1
    - unit_price >= 0
    - subtotal = quantity * unit_price, stored
    """

    __tablename__ = "order_details"
    __table_args__ = (
        Index('ix_order_details_order_id', 'order_id'),
        CheckConstraint('quantity >= 1', name='ck_order_details_quantity_positive'),
        CheckConstraint('unit_price >= 0', name='ck_order_details_unit_price_non_negative'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique order detail identifier (auto-increment)"
    )

    order_id: int = Field(
        sa_column=Column(IdType, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False),
        description="Foreign key to Order"
    )

    cylinder_category_id: int = Field(
        description="Cylinder category (size/type) being ordered"
    )

    transaction_type: TransactionType = Field(
        description="sale, exchange, refill or return"
    )

    quantity: int = Field(
        sa_column=Column(Integer, nullable=False),
        description="Number of cylinders"
    )

    unit_price: Decimal = Field(
        sa_column=Column(Numeric(12, 2), nullable=False),
        description="Price per cylinder (precision: 12,2)"
    )

    subtotal: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(12, 2), nullable=False),
        description="quantity * unit_price"
    )

    cylinder_condition: Optional[CylinderCondition] = Field(
        default=None,
        description="Condition of the returned or exchanged cylinder"
    )

    notes: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
    )

    created_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())

    updated_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": 1,
                "order_id": 1,
                "cylinder_category_id": 3,
                "transaction_type": "refill",
                "quantity": 2,
                "unit_price": "10.00",
                "subtotal": "20.00",
                "cylinder_condition": "empty",
                "notes": None
            }
        }
