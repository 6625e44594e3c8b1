from .unit_of_work import UnitOfWork
from .cache_service import CacheService, order_cache_key, invoice_cache_key, invalidate_quietly
from .reference_validator import ReferenceKind, ReferenceValidator
from .pdf_service import PdfService

__all__ = [
    "UnitOfWork",
    "CacheService",
    "order_cache_key",
    "invoice_cache_key",
    "invalidate_quietly",
    "ReferenceKind",
    "ReferenceValidator",
    "PdfService",
]
