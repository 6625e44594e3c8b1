"""Invoice Domain Entity

Customer invoice with derived totals and a derived payment position.
"""

from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import CheckConstraint, Numeric, String, Date, Text
from src.domain.base import BaseModel, IdType, timestamp_column, utcnow


class InvoiceStatus(str, Enum):
    """Invoice status types"""
    DRAFT = "draft"
    ISSUED = "issued"
    SENT = "sent"
    PARTIALLY_PAID = "partially_paid"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"
    VOID = "void"


class PaymentMethod(str, Enum):
    CASH = "cash"
    BANK_TRANSFER = "bank_transfer"
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    CHECK = "check"
    ONLINE_PAYMENT = "online_payment"
    OTHER = "other"


# Item and header edits are refused in these states
LOCKED_STATUSES = (InvoiceStatus.PAID, InvoiceStatus.CANCELLED, InvoiceStatus.VOID)

# Payments are refused in these states
CLOSED_STATUSES = (InvoiceStatus.CANCELLED, InvoiceStatus.VOID)


class Invoice(BaseModel, table=True):
    """
    Invoice - Billing document for a customer

    Domain Rules:
    - invoice_number must be unique
    - subtotal/tax_amount are sums over invoice_items
    - total_amount = subtotal + tax_amount - discount_amount
    - paid_amount is the sum of invoice_payments, 0 <= paid_amount <= total_amount
    - is_paid <=> paid_amount >= total_amount
    - due_date >= issue_date
    """

    __tablename__ = "invoices"
    __table_args__ = (
        Index('ix_invoices_customer_id', 'customer_id'),
        Index('ix_invoices_status', 'status'),
        Index('ix_invoices_invoice_number', 'invoice_number', unique=True),
        CheckConstraint('paid_amount >= 0', name='ck_invoices_paid_amount_non_negative'),
        CheckConstraint('paid_amount <= total_amount', name='ck_invoices_paid_within_total'),
        CheckConstraint('due_date >= issue_date', name='ck_invoices_due_after_issue'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique invoice identifier (auto-increment)"
    )

    invoice_number: str = Field(
        sa_column=Column(String(50), nullable=False, unique=True),
        description="Unique invoice number (e.g., INV-2024-000001)"
    )

    customer_id: int = Field(
        description="Billed customer"
    )

    customer_name: Optional[str] = Field(
        default=None,
        sa_column=Column(String(255), nullable=True),
        description="Customer name as printed on the invoice"
    )

    billing_address_id: Optional[int] = Field(default=None)

    shipping_address_id: Optional[int] = Field(default=None)

    issue_date: date = Field(
        sa_column=Column(Date, nullable=False),
        description="Date the invoice was issued"
    )

    due_date: date = Field(
        sa_column=Column(Date, nullable=False),
        description="Payment due date"
    )

    status: InvoiceStatus = Field(
        default=InvoiceStatus.DRAFT,
        description="Invoice status"
    )

    subtotal: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(12, 2), nullable=False),
        description="Sum of item subtotals (precision: 12,2)"
    )

    tax_amount: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(12, 2), nullable=False),
        description="Sum of item tax amounts"
    )

    discount_amount: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(12, 2), nullable=False),
        description="Header level discount"
    )

    total_amount: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(12, 2), nullable=False),
        description="subtotal + tax_amount - discount_amount"
    )

    notes: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
    )

    payment_terms: str = Field(
        default="Net 30",
        sa_column=Column(String(100), nullable=False),
    )

    payment_method: Optional[PaymentMethod] = Field(
        default=None,
        description="Preferred payment method"
    )

    currency: str = Field(
        default="USD",
        sa_column=Column(String(3), nullable=False),
        description="Currency code (ISO 4217)"
    )

    exchange_rate: Decimal = Field(
        default=Decimal("1.0000"),
        sa_column=Column(Numeric(10, 4), nullable=False),
    )

    is_paid: bool = Field(
        default=False,
        description="True once paid_amount reaches total_amount"
    )

    paid_amount: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(12, 2), nullable=False),
        description="Sum of recorded payments"
    )

    paid_date: Optional[date] = Field(
        default=None,
        sa_column=Column(Date, nullable=True),
        description="Date the invoice became fully paid"
    )

    created_by: Optional[str] = Field(
        default=None,
        sa_column=Column(String(100), nullable=True),
    )

    updated_by: Optional[str] = Field(
        default=None,
        sa_column=Column(String(100), nullable=True),
    )

    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=timestamp_column(),
        description="Invoice creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column=timestamp_column(),
        description="Last update timestamp"
    )

    def remaining_amount(self) -> Decimal:
        return Decimal(self.total_amount) - Decimal(self.paid_amount)

    def is_locked(self) -> bool:
        return self.status in LOCKED_STATUSES

    def is_paid_off(self) -> bool:
        """Settled by recorded payments, not merely by a zero total"""
        return self.is_paid and Decimal(self.paid_amount) > 0

    def is_overdue(self, as_of: Optional[date] = None) -> bool:
        as_of = as_of or utcnow().date()
        if self.is_paid or self.status in LOCKED_STATUSES or self.status == InvoiceStatus.DRAFT:
            return False
        return self.due_date < as_of

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": 1,
                "invoice_number": "INV-2024-000001",
                "customer_id": 42,
                "customer_name": "Acme Bakery",
                "issue_date": "2024-03-01",
                "due_date": "2024-03-31",
                "status": "sent",
                "subtotal": "100.00",
                "tax_amount": "10.00",
                "discount_amount": "0.00",
                "total_amount": "110.00",
                "paid_amount": "60.00",
                "is_paid": False,
                "payment_terms": "Net 30",
                "currency": "USD"
            }
        }
