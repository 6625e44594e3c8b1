"""Invoice use cases"""
from .create_invoice import CreateInvoice
from .get_invoice import GetInvoice, GetInvoiceItems, GetInvoicePayments
from .list_invoices import ListInvoices
from .update_invoice import UpdateInvoice
from .invoice_items import AddInvoiceItem, UpdateInvoiceItem, RemoveInvoiceItem
from .invoice_payments import ApplyInvoicePayment, MarkInvoicePaid
from .invoice_status import UpdateInvoiceStatus, MarkInvoiceSent, CancelInvoice, DeleteInvoice
from .invoice_statistics import GetInvoiceStatistics
from .mark_overdue_invoices import MarkOverdueInvoices
from .generate_invoice_pdf import GenerateInvoicePdf
from .dtos import (
    InvoiceItemInputDTO,
    CreateInvoiceCommandDTO,
    UpdateInvoiceCommandDTO,
    UpdateInvoiceItemCommandDTO,
    PaymentCommandDTO,
    UpdateInvoiceStatusCommandDTO,
    CancelInvoiceCommandDTO,
    ListInvoicesQueryDTO,
    InvoiceItemDTO,
    InvoicePaymentDTO,
    InvoiceResponseDTO,
    InvoiceListResponseDTO,
    PaymentResponseDTO,
    InvoiceStatisticsDTO,
    MarkOverdueResultDTO,
    InvoicePdfDTO,
)

__all__ = [
    "CreateInvoice",
    "GetInvoice",
    "GetInvoiceItems",
    "GetInvoicePayments",
    "ListInvoices",
    "UpdateInvoice",
    "AddInvoiceItem",
    "UpdateInvoiceItem",
    "RemoveInvoiceItem",
    "ApplyInvoicePayment",
    "MarkInvoicePaid",
    "UpdateInvoiceStatus",
    "MarkInvoiceSent",
    "CancelInvoice",
    "DeleteInvoice",
    "GetInvoiceStatistics",
    "MarkOverdueInvoices",
    "GenerateInvoicePdf",
    "InvoiceItemInputDTO",
    "CreateInvoiceCommandDTO",
    "UpdateInvoiceCommandDTO",
    "UpdateInvoiceItemCommandDTO",
    "PaymentCommandDTO",
    "UpdateInvoiceStatusCommandDTO",
    "CancelInvoiceCommandDTO",
    "ListInvoicesQueryDTO",
    "InvoiceItemDTO",
    "InvoicePaymentDTO",
    "InvoiceResponseDTO",
    "InvoiceListResponseDTO",
    "PaymentResponseDTO",
    "InvoiceStatisticsDTO",
    "MarkOverdueResultDTO",
    "InvoicePdfDTO",
]
