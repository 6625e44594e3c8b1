"""Request schemas for Order API

Pydantic models for validating incoming HTTP requests.
"""

from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator
from src.domain.order import DeliveryMethod, PaymentStatus
from src.domain.order_detail import CylinderCondition, TransactionType


def _check_money_precision(v: Optional[Decimal]) -> Optional[Decimal]:
    if v is not None and v.as_tuple().exponent < -2:
        raise ValueError("Amount must have at most 2 decimal places")
    return v


class OrderDetailRequestSchema(BaseModel):
    """One cylinder line of an order"""

    cylinder_category_id: int = Field(..., gt=0, description="Cylinder category identifier")
    transaction_type: TransactionType = Field(..., description="sale, exchange, refill or return")
    quantity: int = Field(..., ge=1, description="Number of cylinders (must be >= 1)")
    unit_price: Decimal = Field(..., ge=0, description="Price per cylinder (must be >= 0)")
    cylinder_condition: Optional[CylinderCondition] = None
    notes: Optional[str] = None

    @field_validator('unit_price')
    @classmethod
    def validate_unit_price(cls, v):
        """Prices are stored with cent precision"""
        return _check_money_precision(v)


class CreateOrderRequestSchema(BaseModel):
    """
    Request schema for creating an order

    Used for POST /orders endpoint.
    """

    customer_id: int = Field(..., gt=0, description="Customer placing the order")
    delivery_method: DeliveryMethod = Field(default=DeliveryMethod.PICKUP)
    delivery_address_id: Optional[int] = Field(
        default=None,
        description="Delivery address (required when delivery_method is 'delivery')"
    )
    driver_id: Optional[int] = None
    notes: Optional[str] = None
    created_by: Optional[str] = None
    details: List[OrderDetailRequestSchema] = Field(
        ...,
        min_length=1,
        description="Cylinder lines (at least one)"
    )

    @field_validator('delivery_address_id')
    @classmethod
    def validate_delivery_address(cls, v, info):
        """Delivery orders must say where to deliver"""
        if v is None and info.data.get('delivery_method') == DeliveryMethod.DELIVERY:
            raise ValueError("delivery_address_id is required for delivery orders")
        return v

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


class UpdateOrderRequestSchema(BaseModel):
    """Used for PATCH /orders/{order_id}; omitted fields are left untouched"""

    delivery_method: Optional[DeliveryMethod] = None
    delivery_address_id: Optional[int] = None
    driver_id: Optional[int] = None
    notes: Optional[str] = None


class UpdateOrderDetailRequestSchema(BaseModel):
    cylinder_category_id: Optional[int] = Field(default=None, gt=0)
    transaction_type: Optional[TransactionType] = None
    quantity: Optional[int] = Field(default=None, ge=1)
    unit_price: Optional[Decimal] = Field(default=None, ge=0)
    cylinder_condition: Optional[CylinderCondition] = None
    notes: Optional[str] = None

    @field_validator('unit_price')
    @classmethod
    def validate_unit_price(cls, v):
        return _check_money_precision(v)


class AssignDriverRequestSchema(BaseModel):
    driver_id: int = Field(..., gt=0)


class OrderStatusRequestSchema(BaseModel):
    """
    Request schema for changing order status

    Used for PATCH /orders/{order_id}/status endpoint.
    """

    status: str = Field(..., min_length=1, description="Target status")
    notes: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {"status": "processing"}
        }


class PaymentStatusRequestSchema(BaseModel):
    payment_status: PaymentStatus
    notes: Optional[str] = None


class CompleteOrderRequestSchema(BaseModel):
    notes: Optional[str] = None


class CancelOrderRequestSchema(BaseModel):
    reason: Optional[str] = Field(default=None, description="Appended to notes as 'CANCELLATION: <reason>'")
