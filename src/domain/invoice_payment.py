"""Invoice Payment Domain Entity

Append-only record of money received against an invoice.
"""

from datetime import datetime, date
from decimal import Decimal
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import CheckConstraint, Date, ForeignKey, Numeric, String, Text
from src.domain.base import BaseModel, IdType, timestamp_column, utcnow
from src.domain.invoice import PaymentMethod


class InvoicePayment(BaseModel, table=True):
    """
    Invoice Payment - Immutable payment recorded against an invoice

    Domain Rules:
    - amount > 0
    - Payments are never updated or deleted
    - The sum of payments never exceeds the invoice total
    """

    __tablename__ = "invoice_payments"
    __table_args__ = (
        Index('ix_invoice_payments_invoice_id', 'invoice_id'),
        CheckConstraint('amount > 0', name='ck_invoice_payments_amount_positive'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique payment identifier (auto-increment)"
    )

    invoice_id: int = Field(
        sa_column=Column(IdType, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False),
        description="Foreign key to Invoice"
    )

    amount: Decimal = Field(
        sa_column=Column(Numeric(12, 2), nullable=False),
        description="Amount received (precision: 12,2)"
    )

    payment_date: date = Field(
        sa_column=Column(Date, nullable=False),
    )

    payment_method: PaymentMethod = Field(
        description="How the money was received"
    )

    reference: Optional[str] = Field(
        default=None,
        sa_column=Column(String(100), nullable=True),
        description="Bank reference, cheque number, etc."
    )

    notes: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
    )

    created_by: Optional[str] = Field(
        default=None,
        sa_column=Column(String(100), nullable=True),
    )

    created_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": 1,
                "invoice_id": 1,
                "amount": "60.00",
                "payment_date": "2024-03-05",
                "payment_method": "bank_transfer",
                "reference": "TRX-99812",
                "notes": None,
                "created_by": "cashier-1"
            }
        }
