from .order_repository import OrderRepository
from .order_detail_repository import OrderDetailRepository
from .invoice_repository import InvoiceRepository
from .invoice_item_repository import InvoiceItemRepository
from .invoice_payment_repository import InvoicePaymentRepository
from .filters import OrderFilters, InvoiceFilters

__all__ = [
    "OrderRepository",
    "OrderDetailRepository",
    "InvoiceRepository",
    "InvoiceItemRepository",
    "InvoicePaymentRepository",
    "OrderFilters",
    "InvoiceFilters",
]
