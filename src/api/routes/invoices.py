"""Invoice API Routes

FastAPI routes for invoices, their items and payments, including the
overdue sweep and PDF download.
"""

import base64
from datetime import date
from decimal import Decimal
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.repositories.invoice_repository import SqlAlchemyInvoiceRepository
from src.adapter.repositories.invoice_item_repository import SqlAlchemyInvoiceItemRepository
from src.adapter.repositories.invoice_payment_repository import SqlAlchemyInvoicePaymentRepository
from src.adapter.services.pdf_service import ReportLabPdfService
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.error import ClientError
from src.api.schemas.invoice_request import (
    CancelInvoiceRequestSchema,
    CreateInvoiceRequestSchema,
    InvoiceItemRequestSchema,
    InvoiceStatusRequestSchema,
    MarkSentRequestSchema,
    PaymentRequestSchema,
    UpdateInvoiceItemRequestSchema,
    UpdateInvoiceRequestSchema,
)
from src.app.repositories.filters import InvoiceFilters
from src.app.services.cache_service import CacheService
from src.app.services.reference_validator import ReferenceValidator
from src.app.use_cases.invoices import (
    AddInvoiceItem,
    ApplyInvoicePayment,
    CancelInvoice,
    CancelInvoiceCommandDTO,
    CreateInvoice,
    CreateInvoiceCommandDTO,
    DeleteInvoice,
    GenerateInvoicePdf,
    GetInvoice,
    GetInvoiceItems,
    GetInvoicePayments,
    GetInvoiceStatistics,
    InvoiceItemDTO,
    InvoiceItemInputDTO,
    InvoiceListResponseDTO,
    InvoicePaymentDTO,
    InvoicePdfDTO,
    InvoiceResponseDTO,
    InvoiceStatisticsDTO,
    ListInvoices,
    ListInvoicesQueryDTO,
    MarkInvoicePaid,
    MarkInvoiceSent,
    MarkOverdueInvoices,
    MarkOverdueResultDTO,
    PaymentCommandDTO,
    PaymentResponseDTO,
    RemoveInvoiceItem,
    UpdateInvoice,
    UpdateInvoiceCommandDTO,
    UpdateInvoiceItem,
    UpdateInvoiceItemCommandDTO,
    UpdateInvoiceStatus,
    UpdateInvoiceStatusCommandDTO,
)
from src.depends import get_cache_service, get_reference_validator, get_session
from src.domain.invoice import InvoiceStatus

router = APIRouter(prefix="/invoices", tags=["Invoices"])

INVOICE_ERROR_RESPONSES = {
    404: {
        "description": "Invoice not found",
        "content": {
            "application/json": {
                "example": {"error": {"code": "INVOICE_NOT_FOUND", "message": "Invoice with ID 123 not found"}}
            }
        },
    },
    409: {
        "description": "Invoice state does not allow the operation",
        "content": {
            "application/json": {
                "example": {
                    "error": {
                        "code": "INVOICE_LOCKED",
                        "message": "Invoice INV-2024-000001 is paid and can no longer be edited",
                    }
                }
            }
        },
    },
}

PAYMENT_ERROR_RESPONSES = {
    **INVOICE_ERROR_RESPONSES,
    422: {
        "description": "Payment exceeds the remaining balance",
        "content": {
            "application/json": {
                "example": {
                    "error": {
                        "code": "AMOUNT_EXCEEDS_BALANCE",
                        "message": "Payment amount 60.00 exceeds remaining balance 50.00",
                    }
                }
            }
        },
    },
}


def _uow(session: AsyncSession) -> SqlAlchemyUnitOfWork:
    return SqlAlchemyUnitOfWork(session, ApplicationConfig.TRANSACTION_TIMEOUT_SECONDS)


def _item_use_case(cls, session: AsyncSession, cache: CacheService, reference_validator=None):
    return cls(
        _uow(session),
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyInvoiceItemRepository(session),
        SqlAlchemyInvoicePaymentRepository(session),
        reference_validator=reference_validator,
        cache=cache,
    )


def _payment_use_case(cls, session: AsyncSession, cache: CacheService):
    return cls(
        _uow(session),
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyInvoicePaymentRepository(session),
        item_repo=SqlAlchemyInvoiceItemRepository(session),
        cache=cache,
    )


async def _list_invoices(session: AsyncSession, query: ListInvoicesQueryDTO) -> InvoiceListResponseDTO:
    result = await ListInvoices(SqlAlchemyInvoiceRepository(session)).execute(query)
    if result.is_err():
        raise ClientError(result.error)
    return result.value


async def _render_pdf(session: AsyncSession, invoice_id: int) -> InvoicePdfDTO:
    use_case = GenerateInvoicePdf(
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyInvoiceItemRepository(session),
        SqlAlchemyInvoicePaymentRepository(session),
        ReportLabPdfService(),
        company_name=ApplicationConfig.COMPANY_NAME,
        company_address=ApplicationConfig.COMPANY_ADDRESS,
    )
    result = await use_case.execute(invoice_id)
    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.post(
    "",
    response_model=InvoiceResponseDTO,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {
            "description": "Invalid invoice or unknown reference",
            "content": {
                "application/json": {
                    "example": {"error": {"code": "INVALID_DUE_DATE", "message": "Due date must be on or after issue date"}}
                }
            },
        }
    },
)
async def create_invoice(
    request: CreateInvoiceRequestSchema,
    session: AsyncSession = Depends(get_session),
    cache: CacheService = Depends(get_cache_service),
    reference_validator: ReferenceValidator = Depends(get_reference_validator),
):
    """
    Create an invoice with its items.

    The invoice number and all totals are generated by the server. Initial
    status may be draft, issued or sent.

    **Example response:**
    ```json
    {
      "id": 1,
      "invoice_number": "INV-2024-000001",
      "status": "issued",
      "subtotal": "100.00",
      "tax_amount": "10.00",
      "total_amount": "110.00",
      "paid_amount": "0.00",
      "remaining_amount": "110.00"
    }
    ```
    """
    use_case = CreateInvoice(
        _uow(session),
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyInvoiceItemRepository(session),
        SqlAlchemyInvoicePaymentRepository(session),
        reference_validator=reference_validator,
        cache=cache,
        invoice_number_prefix=ApplicationConfig.INVOICE_NUMBER_PREFIX,
        default_currency=ApplicationConfig.DEFAULT_CURRENCY,
        default_payment_terms=ApplicationConfig.DEFAULT_PAYMENT_TERMS,
    )
    command = CreateInvoiceCommandDTO(**request.model_dump())
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.get("", response_model=InvoiceListResponseDTO)
async def list_invoices(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    sort_by: str = Query("created_at"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    invoice_status: Optional[InvoiceStatus] = Query(None, alias="status"),
    customer_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    min_amount: Optional[Decimal] = None,
    max_amount: Optional[Decimal] = None,
    is_paid: Optional[bool] = None,
    is_overdue: Optional[bool] = None,
    session: AsyncSession = Depends(get_session),
):
    """
    List invoices with pagination, sorting and filters.

    `start_date` / `end_date` filter on the issue date. `is_overdue` matches
    invoices in overdue status as well as open unpaid invoices past their
    due date.
    """
    query = ListInvoicesQueryDTO(
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
        status=invoice_status,
        customer_id=customer_id,
        start_date=start_date,
        end_date=end_date,
        min_amount=min_amount,
        max_amount=max_amount,
        is_paid=is_paid,
        is_overdue=is_overdue,
    )
    return await _list_invoices(session, query)


@router.get("/customer/{customer_id}", response_model=InvoiceListResponseDTO)
async def list_customer_invoices(
    customer_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    session: AsyncSession = Depends(get_session),
):
    """List the invoices of one customer, newest first."""
    query = ListInvoicesQueryDTO(page=page, limit=limit, customer_id=customer_id)
    return await _list_invoices(session, query)


@router.get("/statistics", response_model=InvoiceStatisticsDTO)
async def get_invoice_statistics(
    customer_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    session: AsyncSession = Depends(get_session),
):
    """Totals of paid, unpaid and overdue invoices and the mean days to payment."""
    filters = InvoiceFilters(customer_id=customer_id, start_date=start_date, end_date=end_date)
    result = await GetInvoiceStatistics(SqlAlchemyInvoiceRepository(session)).execute(filters)

    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.post("/overdue/mark", response_model=MarkOverdueResultDTO)
async def mark_overdue_invoices(
    as_of: Optional[date] = None,
    session: AsyncSession = Depends(get_session),
    cache: CacheService = Depends(get_cache_service),
):
    """Move open unpaid invoices due before `as_of` (default today) to overdue."""
    use_case = MarkOverdueInvoices(_uow(session), SqlAlchemyInvoiceRepository(session), cache=cache)
    result = await use_case.execute(as_of)

    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.get("/number/{invoice_number}", response_model=InvoiceResponseDTO, responses=INVOICE_ERROR_RESPONSES)
async def get_invoice_by_number(invoice_number: str, session: AsyncSession = Depends(get_session)):
    use_case = GetInvoice(
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyInvoiceItemRepository(session),
        SqlAlchemyInvoicePaymentRepository(session),
    )
    result = await use_case.by_number(invoice_number)

    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.get("/{invoice_id}", response_model=InvoiceResponseDTO, responses=INVOICE_ERROR_RESPONSES)
async def get_invoice(invoice_id: int, session: AsyncSession = Depends(get_session)):
    """Fetch an invoice with its items and payments."""
    use_case = GetInvoice(
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyInvoiceItemRepository(session),
        SqlAlchemyInvoicePaymentRepository(session),
    )
    result = await use_case.execute(invoice_id)

    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.patch("/{invoice_id}", response_model=InvoiceResponseDTO, responses=INVOICE_ERROR_RESPONSES)
async def update_invoice(
    invoice_id: int,
    request: UpdateInvoiceRequestSchema,
    session: AsyncSession = Depends(get_session),
    cache: CacheService = Depends(get_cache_service),
    reference_validator: ReferenceValidator = Depends(get_reference_validator),
):
    """
    Update invoice header fields.

    Paid, cancelled and void invoices cannot be edited. A discount change
    recalculates the totals. Status is changed through the status endpoints.
    """
    use_case = UpdateInvoice(
        _uow(session),
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyInvoiceItemRepository(session),
        SqlAlchemyInvoicePaymentRepository(session),
        reference_validator=reference_validator,
        cache=cache,
    )
    command = UpdateInvoiceCommandDTO(**request.model_dump(exclude_unset=True))
    result = await use_case.execute(invoice_id, command)

    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.delete("/{invoice_id}", response_model=InvoiceResponseDTO, responses=INVOICE_ERROR_RESPONSES)
async def delete_invoice(
    invoice_id: int,
    session: AsyncSession = Depends(get_session),
    cache: CacheService = Depends(get_cache_service),
):
    """Soft-delete a draft invoice by cancelling it."""
    use_case = DeleteInvoice(_uow(session), SqlAlchemyInvoiceRepository(session), cache=cache)
    result = await use_case.execute(invoice_id)

    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.get("/{invoice_id}/items", response_model=List[InvoiceItemDTO], responses=INVOICE_ERROR_RESPONSES)
async def get_invoice_items(invoice_id: int, session: AsyncSession = Depends(get_session)):
    use_case = GetInvoiceItems(SqlAlchemyInvoiceRepository(session), SqlAlchemyInvoiceItemRepository(session))
    result = await use_case.execute(invoice_id)

    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.post(
    "/{invoice_id}/items",
    response_model=InvoiceResponseDTO,
    status_code=status.HTTP_201_CREATED,
    responses=INVOICE_ERROR_RESPONSES,
)
async def add_invoice_item(
    invoice_id: int,
    request: InvoiceItemRequestSchema,
    session: AsyncSession = Depends(get_session),
    cache: CacheService = Depends(get_cache_service),
    reference_validator: ReferenceValidator = Depends(get_reference_validator),
):
    """Add an item; totals are recalculated in the same transaction."""
    use_case = _item_use_case(AddInvoiceItem, session, cache, reference_validator)
    result = await use_case.execute(invoice_id, InvoiceItemInputDTO(**request.model_dump()))

    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.patch("/{invoice_id}/items/{item_id}", response_model=InvoiceResponseDTO, responses=INVOICE_ERROR_RESPONSES)
async def update_invoice_item(
    invoice_id: int,
    item_id: int,
    request: UpdateInvoiceItemRequestSchema,
    session: AsyncSession = Depends(get_session),
    cache: CacheService = Depends(get_cache_service),
    reference_validator: ReferenceValidator = Depends(get_reference_validator),
):
    use_case = _item_use_case(UpdateInvoiceItem, session, cache, reference_validator)
    command = UpdateInvoiceItemCommandDTO(**request.model_dump(exclude_unset=True))
    result = await use_case.execute(invoice_id, item_id, command)

    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.delete("/{invoice_id}/items/{item_id}", response_model=InvoiceResponseDTO, responses=INVOICE_ERROR_RESPONSES)
async def remove_invoice_item(
    invoice_id: int,
    item_id: int,
    session: AsyncSession = Depends(get_session),
    cache: CacheService = Depends(get_cache_service),
):
    use_case = _item_use_case(RemoveInvoiceItem, session, cache)
    result = await use_case.execute(invoice_id, item_id)

    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.get("/{invoice_id}/payments", response_model=List[InvoicePaymentDTO], responses=INVOICE_ERROR_RESPONSES)
async def get_invoice_payments(invoice_id: int, session: AsyncSession = Depends(get_session)):
    use_case = GetInvoicePayments(SqlAlchemyInvoiceRepository(session), SqlAlchemyInvoicePaymentRepository(session))
    result = await use_case.execute(invoice_id)

    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.post(
    "/{invoice_id}/payments",
    response_model=PaymentResponseDTO,
    status_code=status.HTTP_201_CREATED,
    responses=PAYMENT_ERROR_RESPONSES,
)
async def add_invoice_payment(
    invoice_id: int,
    request: PaymentRequestSchema,
    session: AsyncSession = Depends(get_session),
    cache: CacheService = Depends(get_cache_service),
):
    """
    Record a payment against an invoice.

    The amount may not exceed the remaining balance. The invoice becomes
    partially_paid, or paid once the balance reaches zero.
    """
    use_case = _payment_use_case(ApplyInvoicePayment, session, cache)
    result = await use_case.execute(invoice_id, PaymentCommandDTO(**request.model_dump()))

    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.post("/{invoice_id}/mark-paid", response_model=PaymentResponseDTO, responses=PAYMENT_ERROR_RESPONSES)
async def mark_invoice_paid(
    invoice_id: int,
    request: PaymentRequestSchema,
    session: AsyncSession = Depends(get_session),
    cache: CacheService = Depends(get_cache_service),
):
    """Settle an invoice with a payment of exactly the remaining balance."""
    use_case = _payment_use_case(MarkInvoicePaid, session, cache)
    result = await use_case.execute(invoice_id, PaymentCommandDTO(**request.model_dump()))

    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.post("/{invoice_id}/mark-sent", response_model=InvoiceResponseDTO, responses=INVOICE_ERROR_RESPONSES)
async def mark_invoice_sent(
    invoice_id: int,
    request: Optional[MarkSentRequestSchema] = None,
    session: AsyncSession = Depends(get_session),
    cache: CacheService = Depends(get_cache_service),
):
    use_case = MarkInvoiceSent(_uow(session), SqlAlchemyInvoiceRepository(session), cache=cache)
    result = await use_case.execute(invoice_id, updated_by=request.updated_by if request else None)

    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.post("/{invoice_id}/cancel", response_model=InvoiceResponseDTO, responses=INVOICE_ERROR_RESPONSES)
async def cancel_invoice(
    invoice_id: int,
    request: Optional[CancelInvoiceRequestSchema] = None,
    session: AsyncSession = Depends(get_session),
    cache: CacheService = Depends(get_cache_service),
):
    """Cancel an unpaid invoice."""
    use_case = CancelInvoice(_uow(session), SqlAlchemyInvoiceRepository(session), cache=cache)
    command = CancelInvoiceCommandDTO(**request.model_dump()) if request else CancelInvoiceCommandDTO()
    result = await use_case.execute(invoice_id, command)

    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.patch("/{invoice_id}/status", response_model=InvoiceResponseDTO, responses=INVOICE_ERROR_RESPONSES)
async def update_invoice_status(
    invoice_id: int,
    request: InvoiceStatusRequestSchema,
    session: AsyncSession = Depends(get_session),
    cache: CacheService = Depends(get_cache_service),
):
    """
    Move an invoice to another status.

    paid and partially_paid are reached only by recording payments.
    Requesting the current status is a no-op.
    """
    use_case = UpdateInvoiceStatus(_uow(session), SqlAlchemyInvoiceRepository(session), cache=cache)
    result = await use_case.execute(invoice_id, UpdateInvoiceStatusCommandDTO(**request.model_dump()))

    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.get("/{invoice_id}/pdf/base64", response_model=InvoicePdfDTO, responses=INVOICE_ERROR_RESPONSES)
async def get_invoice_pdf(invoice_id: int, session: AsyncSession = Depends(get_session)):
    """Render the invoice PDF and return it base64-encoded."""
    return await _render_pdf(session, invoice_id)


@router.get(
    "/{invoice_id}/pdf",
    responses={
        200: {"content": {"application/pdf": {}}, "description": "PDF document"},
        404: INVOICE_ERROR_RESPONSES[404],
    },
)
async def download_invoice_pdf(invoice_id: int, session: AsyncSession = Depends(get_session)):
    """Download the invoice as a PDF file."""
    pdf = await _render_pdf(session, invoice_id)
    pdf_bytes = base64.b64decode(pdf.pdf_base64)

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename=invoice_{pdf.invoice_number}.pdf"},
    )
