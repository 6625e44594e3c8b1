"""Invoice Item Domain Entity

Tracks individual line items within an invoice.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import CheckConstraint, ForeignKey, Numeric, String, Text
from src.domain.base import BaseModel, IdType, timestamp_column, utcnow


class InvoiceItem(BaseModel, table=True):
    """
    Invoice Item - Individual line item within an invoice

    Domain Rules:
    - Each item belongs to exactly one invoice
    - subtotal = quantity * unit_price
    - tax_amount = subtotal * tax_rate / 100
    - total = subtotal + tax_amount
    - Immutable once the invoice is paid, cancelled or void
    """

    __tablename__ = "invoice_items"
    __table_args__ = (
        Index('ix_invoice_items_invoice_id', 'invoice_id'),
        CheckConstraint('quantity > 0', name='ck_invoice_items_quantity_positive'),
        CheckConstraint('tax_rate >= 0 AND tax_rate <= 100', name='ck_invoice_items_tax_rate_range'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique invoice item identifier (auto-increment)"
    )

    invoice_id: int = Field(
        sa_column=Column(IdType, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False),
        description="Foreign key to Invoice"
    )

    product_id: Optional[int] = Field(
        default=None,
        description="Catalog product, if any"
    )

    product_name: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Product name as printed on the invoice"
    )

    description: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
    )

    quantity: Decimal = Field(
        sa_column=Column(Numeric(12, 3), nullable=False),
        description="Quantity, fractional quantities allowed (precision: 12,3)"
    )

    unit_price: Decimal = Field(
        sa_column=Column(Numeric(12, 2), nullable=False),
        description="Price per unit (precision: 12,2)"
    )

    unit_of_measurement: str = Field(
        default="unit",
        sa_column=Column(String(20), nullable=False),
    )

    tax_rate: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(5, 2), nullable=False),
        description="Tax rate in percent, 0-100"
    )

    tax_amount: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(12, 2), nullable=False),
    )

    subtotal: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(12, 2), nullable=False),
    )

    total: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(12, 2), nullable=False),
    )

    created_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())

    updated_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": 1,
                "invoice_id": 1,
                "product_name": "LPG 12.5kg refill",
                "quantity": "2.000",
                "unit_price": "50.00",
                "unit_of_measurement": "unit",
                "tax_rate": "10.00",
                "tax_amount": "10.00",
                "subtotal": "100.00",
                "total": "110.00"
            }
        }
