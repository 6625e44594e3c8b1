from .order_repository import SqlAlchemyOrderRepository
from .order_detail_repository import SqlAlchemyOrderDetailRepository
from .invoice_repository import SqlAlchemyInvoiceRepository
from .invoice_item_repository import SqlAlchemyInvoiceItemRepository
from .invoice_payment_repository import SqlAlchemyInvoicePaymentRepository

__all__ = [
    "SqlAlchemyOrderRepository",
    "SqlAlchemyOrderDetailRepository",
    "SqlAlchemyInvoiceRepository",
    "SqlAlchemyInvoiceItemRepository",
    "SqlAlchemyInvoicePaymentRepository",
]
