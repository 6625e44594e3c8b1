"""Background workers for the document service"""
from .overdue_invoice_marker import OverdueInvoiceMarkerWorker

__all__ = ["OverdueInvoiceMarkerWorker"]
