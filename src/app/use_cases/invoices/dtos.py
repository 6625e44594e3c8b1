"""Data Transfer Objects for Invoice Use Cases

Pydantic models for command inputs and response outputs.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field
from src.app.repositories.filters import InvoiceFilters
from src.app.use_cases.shared import PageQueryDTO, PaginationMetaDTO
from src.domain.invoice import Invoice, InvoiceStatus, PaymentMethod
from src.domain.invoice_item import InvoiceItem
from src.domain.invoice_payment import InvoicePayment


class InvoiceItemInputDTO(BaseModel):
    """Line item of a new invoice or an added item"""

    product_id: Optional[int] = None
    product_name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    quantity: Decimal = Field(..., gt=0, description="Quantity, fractional allowed (> 0)")
    unit_price: Decimal = Field(..., ge=0, description="Price per unit (>= 0)")
    unit_of_measurement: str = Field(default="unit", max_length=20)
    tax_rate: Decimal = Field(default=Decimal("0"), ge=0, le=100, description="Tax rate in percent")


class CreateInvoiceCommandDTO(BaseModel):
    """
    Command DTO for creating an invoice

    Used as input to CreateInvoice use case. Totals are always computed from
    the items and discount; they are never accepted as input.
    """

    customer_id: int = Field(..., description="Billed customer")
    customer_name: Optional[str] = None
    billing_address_id: Optional[int] = None
    shipping_address_id: Optional[int] = None
    issue_date: Optional[date] = Field(default=None, description="Defaults to today")
    due_date: Optional[date] = Field(default=None, description="Defaults to issue_date + 30 days")
    status: InvoiceStatus = Field(
        default=InvoiceStatus.DRAFT,
        description="Initial status: draft, or a status reachable from draft"
    )
    discount_amount: Decimal = Field(default=Decimal("0"), ge=0)
    notes: Optional[str] = None
    payment_terms: Optional[str] = None
    payment_method: Optional[PaymentMethod] = None
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    exchange_rate: Decimal = Field(default=Decimal("1"), gt=0)
    created_by: Optional[str] = None
    items: List[InvoiceItemInputDTO] = Field(default_factory=list)

    class Config:
        json_schema_extra = {
            "example": {
                "customer_id": 42,
                "customer_name": "Acme Bakery",
                "issue_date": "2024-03-01",
                "due_date": "2024-03-31",
                "discount_amount": "0.00",
                "items": [
                    {"product_name": "LPG 12.5kg refill", "quantity": "2", "unit_price": "50.00", "tax_rate": "10"}
                ]
            }
        }


class UpdateInvoiceCommandDTO(BaseModel):
    """Partial header update; only fields that are set are written"""

    customer_name: Optional[str] = None
    billing_address_id: Optional[int] = None
    shipping_address_id: Optional[int] = None
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    discount_amount: Optional[Decimal] = Field(default=None, ge=0)
    notes: Optional[str] = None
    payment_terms: Optional[str] = None
    payment_method: Optional[PaymentMethod] = None
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    exchange_rate: Optional[Decimal] = Field(default=None, gt=0)
    updated_by: Optional[str] = None


class UpdateInvoiceItemCommandDTO(BaseModel):
    """Partial item update; only fields that are set are written"""

    product_id: Optional[int] = None
    product_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    quantity: Optional[Decimal] = Field(default=None, gt=0)
    unit_price: Optional[Decimal] = Field(default=None, ge=0)
    unit_of_measurement: Optional[str] = Field(default=None, max_length=20)
    tax_rate: Optional[Decimal] = Field(default=None, ge=0, le=100)


class PaymentCommandDTO(BaseModel):
    """
    Command DTO for recording a payment

    Used by ApplyInvoicePayment (any amount up to the balance) and
    MarkInvoicePaid (exactly the balance).
    """

    amount: Decimal = Field(..., gt=0, description="Amount received (> 0)")
    payment_method: PaymentMethod = Field(..., description="How the money was received")
    payment_date: Optional[date] = Field(default=None, description="Defaults to today")
    reference: Optional[str] = Field(default=None, max_length=100)
    notes: Optional[str] = None
    created_by: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "amount": "60.00",
                "payment_method": "bank_transfer",
                "payment_date": "2024-03-05",
                "reference": "TRX-99812"
            }
        }


class UpdateInvoiceStatusCommandDTO(BaseModel):
    status: str = Field(..., description="Target invoice status")
    notes: Optional[str] = None
    updated_by: Optional[str] = None


class CancelInvoiceCommandDTO(BaseModel):
    reason: Optional[str] = None
    updated_by: Optional[str] = None


class ListInvoicesQueryDTO(PageQueryDTO, InvoiceFilters):
    """Filters plus page/limit/sort"""
    pass


class InvoiceItemDTO(BaseModel):
    id: int
    invoice_id: int
    product_id: Optional[int] = None
    product_name: str
    description: Optional[str] = None
    quantity: Decimal
    unit_price: Decimal
    unit_of_measurement: str
    tax_rate: Decimal
    tax_amount: Decimal
    subtotal: Decimal
    total: Decimal

    class Config:
        from_attributes = True


class InvoicePaymentDTO(BaseModel):
    id: int
    invoice_id: int
    amount: Decimal
    payment_date: date
    payment_method: PaymentMethod
    reference: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class InvoiceResponseDTO(BaseModel):
    """
    Response DTO for an invoice, with items and payments when loaded
    """

    id: int
    invoice_number: str
    customer_id: int
    customer_name: Optional[str] = None
    billing_address_id: Optional[int] = None
    shipping_address_id: Optional[int] = None
    issue_date: date
    due_date: date
    status: InvoiceStatus
    subtotal: Decimal
    tax_amount: Decimal
    discount_amount: Decimal
    total_amount: Decimal
    paid_amount: Decimal
    remaining_amount: Decimal
    is_paid: bool
    paid_date: Optional[date] = None
    notes: Optional[str] = None
    payment_terms: str
    payment_method: Optional[PaymentMethod] = None
    currency: str
    exchange_rate: Decimal
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    items: Optional[List[InvoiceItemDTO]] = None
    payments: Optional[List[InvoicePaymentDTO]] = None

    @classmethod
    def from_entity(
        cls,
        invoice: Invoice,
        items: Optional[List[InvoiceItem]] = None,
        payments: Optional[List[InvoicePayment]] = None,
    ) -> "InvoiceResponseDTO":
        return cls(
            id=invoice.id,
            invoice_number=invoice.invoice_number,
            customer_id=invoice.customer_id,
            customer_name=invoice.customer_name,
            billing_address_id=invoice.billing_address_id,
            shipping_address_id=invoice.shipping_address_id,
            issue_date=invoice.issue_date,
            due_date=invoice.due_date,
            status=invoice.status,
            subtotal=invoice.subtotal,
            tax_amount=invoice.tax_amount,
            discount_amount=invoice.discount_amount,
            total_amount=invoice.total_amount,
            paid_amount=invoice.paid_amount,
            remaining_amount=invoice.remaining_amount(),
            is_paid=invoice.is_paid,
            paid_date=invoice.paid_date,
            notes=invoice.notes,
            payment_terms=invoice.payment_terms,
            payment_method=invoice.payment_method,
            currency=invoice.currency,
            exchange_rate=invoice.exchange_rate,
            created_by=invoice.created_by,
            updated_by=invoice.updated_by,
            created_at=invoice.created_at,
            updated_at=invoice.updated_at,
            items=[InvoiceItemDTO.model_validate(i) for i in items] if items is not None else None,
            payments=[InvoicePaymentDTO.model_validate(p) for p in payments] if payments is not None else None,
        )


class InvoiceListResponseDTO(BaseModel):
    items: List[InvoiceResponseDTO]
    meta: PaginationMetaDTO


class PaymentResponseDTO(BaseModel):
    """Payment just recorded plus the invoice position after it"""

    payment: InvoicePaymentDTO
    invoice: InvoiceResponseDTO


class InvoiceStatisticsDTO(BaseModel):
    total_paid: Decimal = Field(..., description="Sum of totals of paid invoices")
    total_unpaid: Decimal = Field(..., description="Sum of totals of open unpaid invoices")
    total_overdue: Decimal = Field(..., description="Part of total_unpaid past its due date")
    average_payment_time: Decimal = Field(..., description="Mean days from issue to full payment")
    invoice_count: int


class MarkOverdueResultDTO(BaseModel):
    as_of: date
    invoices_checked: int
    invoices_marked: int
    invoice_ids: List[int]
    errors: List[str] = Field(default_factory=list)


class InvoicePdfDTO(BaseModel):
    invoice_id: int
    invoice_number: str
    pdf_base64: str
    generated_at: datetime
