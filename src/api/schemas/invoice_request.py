"""Request schemas for Invoice API

Pydantic models for validating incoming HTTP requests.
"""

from datetime import date
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator
from src.domain.invoice import InvoiceStatus, PaymentMethod


def _check_money_precision(v: Optional[Decimal]) -> Optional[Decimal]:
    if v is not None and v.as_tuple().exponent < -2:
        raise ValueError("Amount must have at most 2 decimal places")
    return v


class InvoiceItemRequestSchema(BaseModel):
    """One line of an invoice"""

    product_id: Optional[int] = Field(default=None, gt=0)
    product_name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    quantity: Decimal = Field(..., gt=0, description="Quantity (must be > 0, up to 3 decimals)")
    unit_price: Decimal = Field(..., ge=0, description="Price per unit (must be >= 0)")
    unit_of_measurement: str = Field(default="unit", max_length=20)
    tax_rate: Decimal = Field(default=Decimal("0"), ge=0, le=100, description="Tax rate in percent")

    @field_validator('quantity')
    @classmethod
    def validate_quantity(cls, v):
        """Quantities are stored with three decimals"""
        if v.as_tuple().exponent < -3:
            raise ValueError("Quantity must have at most 3 decimal places")
        return v

    @field_validator('unit_price')
    @classmethod
    def validate_unit_price(cls, v):
        return _check_money_precision(v)


class CreateInvoiceRequestSchema(BaseModel):
    """
    Request schema for creating an invoice

    Used for POST /invoices endpoint. Totals are computed by the server.
    """

    customer_id: int = Field(..., gt=0, description="Billed customer")
    customer_name: Optional[str] = Field(default=None, max_length=255)
    billing_address_id: Optional[int] = None
    shipping_address_id: Optional[int] = None
    issue_date: Optional[date] = Field(default=None, description="Defaults to today")
    due_date: Optional[date] = Field(default=None, description="Defaults to issue_date + 30 days")
    status: InvoiceStatus = Field(default=InvoiceStatus.DRAFT, description="draft, issued or sent")
    discount_amount: Decimal = Field(default=Decimal("0"), ge=0)
    notes: Optional[str] = None
    payment_terms: Optional[str] = Field(default=None, max_length=100)
    payment_method: Optional[PaymentMethod] = None
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    exchange_rate: Decimal = Field(default=Decimal("1"), gt=0)
    created_by: Optional[str] = None
    items: List[InvoiceItemRequestSchema] = Field(default_factory=list)

    @field_validator('discount_amount')
    @classmethod
    def validate_discount(cls, v):
        return _check_money_precision(v)

    @field_validator('currency')
    @classmethod
    def validate_currency(cls, v):
        """ISO 4217 codes are upper case"""
        return v.upper() if v else v

    @field_validator('due_date')
    @classmethod
    def validate_due_date(cls, v, info):
        """Due date cannot precede the issue date"""
        issue_date = info.data.get('issue_date')
        if v is not None and issue_date is not None and v < issue_date:
            raise ValueError("due_date must be on or after issue_date")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "customer_id": 42,
                "customer_name": "Acme Bakery",
                "issue_date": "2024-03-01",
                "due_date": "2024-03-31",
                "status": "issued",
                "items": [
                    {"product_name": "LPG 12.5kg refill", "quantity": "2", "unit_price": "50.00", "tax_rate": "10"}
                ]
            }
        }


class UpdateInvoiceRequestSchema(BaseModel):
    """Used for PATCH /invoices/{invoice_id}; omitted fields are left untouched"""

    customer_name: Optional[str] = Field(default=None, max_length=255)
    billing_address_id: Optional[int] = None
    shipping_address_id: Optional[int] = None
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    discount_amount: Optional[Decimal] = Field(default=None, ge=0)
    notes: Optional[str] = None
    payment_terms: Optional[str] = Field(default=None, max_length=100)
    payment_method: Optional[PaymentMethod] = None
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    exchange_rate: Optional[Decimal] = Field(default=None, gt=0)
    updated_by: Optional[str] = None

    @field_validator('discount_amount')
    @classmethod
    def validate_discount(cls, v):
        return _check_money_precision(v)

    @field_validator('currency')
    @classmethod
    def validate_currency(cls, v):
        return v.upper() if v else v


class UpdateInvoiceItemRequestSchema(BaseModel):
    product_id: Optional[int] = Field(default=None, gt=0)
    product_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    quantity: Optional[Decimal] = Field(default=None, gt=0)
    unit_price: Optional[Decimal] = Field(default=None, ge=0)
    unit_of_measurement: Optional[str] = Field(default=None, max_length=20)
    tax_rate: Optional[Decimal] = Field(default=None, ge=0, le=100)

    @field_validator('unit_price')
    @classmethod
    def validate_unit_price(cls, v):
        return _check_money_precision(v)


class PaymentRequestSchema(BaseModel):
    """
    Request schema for recording a payment

    Used for POST /invoices/{invoice_id}/payments and
    POST /invoices/{invoice_id}/mark-paid endpoints.
    """

    amount: Decimal = Field(..., gt=0, description="Amount received (must be > 0)")
    payment_method: PaymentMethod = Field(..., description="How the money was received")
    payment_date: Optional[date] = Field(default=None, description="Defaults to today")
    reference: Optional[str] = Field(default=None, max_length=100)
    notes: Optional[str] = None
    created_by: Optional[str] = None

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v):
        """Ensure amount is positive and has cent precision"""
        if v <= 0:
            raise ValueError("Amount must be greater than 0")
        return _check_money_precision(v)

    class Config:
        json_schema_extra = {
            "example": {
                "amount": "60.00",
                "payment_method": "bank_transfer",
                "payment_date": "2024-03-05",
                "reference": "TRX-99812"
            }
        }


class InvoiceStatusRequestSchema(BaseModel):
    status: str = Field(..., min_length=1, description="Target status")
    notes: Optional[str] = None
    updated_by: Optional[str] = None


class MarkSentRequestSchema(BaseModel):
    updated_by: Optional[str] = None


class CancelInvoiceRequestSchema(BaseModel):
    reason: Optional[str] = Field(default=None, description="Appended to notes as 'CANCELLATION: <reason>'")
    updated_by: Optional[str] = None
