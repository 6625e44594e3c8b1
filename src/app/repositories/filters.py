"""List filters shared by repositories and list use cases"""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, field_validator
from src.domain.invoice import InvoiceStatus
from src.domain.order import DeliveryMethod, OrderStatus, PaymentStatus


class OrderFilters(BaseModel):
    customer_id: Optional[int] = None
    driver_id: Optional[int] = None
    order_status: Optional[OrderStatus] = None
    payment_status: Optional[PaymentStatus] = None
    delivery_method: Optional[DeliveryMethod] = None
    from_date: Optional[datetime] = None
    to_date: Optional[datetime] = None
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None

    @field_validator("from_date", "to_date")
    @classmethod
    def assume_utc(cls, v):
        # timestamps are stored timezone-aware; naive bounds are read as UTC
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class InvoiceFilters(BaseModel):
    status: Optional[InvoiceStatus] = None
    customer_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None
    is_paid: Optional[bool] = None
    is_overdue: Optional[bool] = None
    # reference date for is_overdue, today when unset
    as_of: Optional[date] = None


ORDER_SORT_FIELDS = ("created_at", "updated_at", "total_amount", "order_status", "completed_at")
INVOICE_SORT_FIELDS = ("created_at", "issue_date", "due_date", "total_amount", "invoice_number", "status")
