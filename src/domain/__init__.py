from .base import BaseModel, IdType, utcnow
from .errors import (
    DomainError,
    NotFoundError,
    InvalidStateError,
    InvalidTransitionError,
    AmountExceedsBalanceError,
    ValidationError,
    DatabaseError,
)
from .order import Order, OrderStatus, PaymentStatus, DeliveryMethod
from .order_detail import OrderDetail, TransactionType, CylinderCondition
from .invoice import Invoice, InvoiceStatus, PaymentMethod
from .invoice_item import InvoiceItem
from .invoice_payment import InvoicePayment

__all__ = [
    "BaseModel",
    "IdType",
    "utcnow",
    "DomainError",
    "NotFoundError",
    "InvalidStateError",
    "InvalidTransitionError",
    "AmountExceedsBalanceError",
    "ValidationError",
    "DatabaseError",
    "Order",
    "OrderStatus",
    "PaymentStatus",
    "DeliveryMethod",
    "OrderDetail",
    "TransactionType",
    "CylinderCondition",
    "Invoice",
    "InvoiceStatus",
    "PaymentMethod",
    "InvoiceItem",
    "InvoicePayment",
]
