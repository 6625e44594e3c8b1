from .unit_of_work import SqlAlchemyUnitOfWork
from .cache_service import (
    LoggingCacheService,
    RedisCacheService,
    create_cache_service,
)
from .reference_validator import (
    PermissiveReferenceValidator,
    HttpReferenceValidator,
    create_reference_validator,
)
from .pdf_service import ReportLabPdfService

__all__ = [
    "SqlAlchemyUnitOfWork",
    "LoggingCacheService",
    "RedisCacheService",
    "create_cache_service",
    "PermissiveReferenceValidator",
    "HttpReferenceValidator",
    "create_reference_validator",
    "ReportLabPdfService",
]
