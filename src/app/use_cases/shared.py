"""Helpers shared by order and invoice use cases"""

import logging
import math
from typing import Any, Dict, Optional
from uuid import uuid4
from pydantic import BaseModel, Field
from libs.result import Result, Return
from src.app.services.reference_validator import ReferenceKind, ReferenceValidator
from src.app.services.unit_of_work import UnitOfWork
from src.domain.errors import DatabaseError, DomainError, ValidationError

logger = logging.getLogger(__name__)


class PaginationMetaDTO(BaseModel):
    page: int
    limit: int
    total_items: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool


class PageQueryDTO(BaseModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)
    sort_by: str = "created_at"
    sort_order: str = Field(default="desc", pattern="^(asc|desc)$")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def descending(self) -> bool:
        return self.sort_order == "desc"


def pagination_meta(page: int, limit: int, total_items: int) -> PaginationMetaDTO:
    total_pages = math.ceil(total_items / limit) if limit else 0
    return PaginationMetaDTO(
        page=page,
        limit=limit,
        total_items=total_items,
        total_pages=total_pages,
        has_next_page=page < total_pages,
        has_prev_page=page > 1,
    )


async def ensure_reference(
    validator: Optional[ReferenceValidator],
    kind: ReferenceKind,
    ref_id: Optional[int],
) -> None:
    """
    Raises:
        ValidationError: the referenced entity does not exist
    """
    if validator is None or ref_id is None:
        return
    if not await validator.exists(kind, ref_id):
        raise ValidationError(
            f"{kind.value.replace('_', ' ').capitalize()} with ID {ref_id} not found",
            code=f"{kind.value.upper()}_NOT_FOUND",
            reference=kind.value,
            reference_id=ref_id,
        )


def unexpected(error: Exception, action: str, **context: Any) -> Result[Any]:
    """
    Log an unexpected failure with a correlation id and return DATABASE_ERROR

    The returned error carries no exception text. Must be called from inside
    the ``except`` block so the traceback is logged.
    """
    correlation_id = uuid4().hex
    logger.exception(f"{action} failed [correlation_id={correlation_id}] context={context}")
    wrapped = DatabaseError(
        f"Failed to {action}",
        action=action,
        correlation_id=correlation_id,
        **context,
    )
    return Return.err(wrapped.to_error())


async def fail(uow: UnitOfWork, error: Exception, action: str, **context: Any) -> Result[Any]:
    """
    Roll back and turn an exception into an error result

    Business-rule errors keep their code and message. Anything else goes
    through ``unexpected``.
    """
    await uow.rollback()

    if isinstance(error, DomainError):
        logger.info(f"{action} rejected: {error.code} {error.message}")
        return Return.err(error.to_error())

    return unexpected(error, action, **context)


def append_note(existing: Optional[str], note: str) -> str:
    return f"{existing}\n{note}" if existing else note


def set_fields(command: BaseModel, entity: type) -> Dict[str, Any]:
    """
    Fields the caller set on a partial-update command

    Raises:
        ValidationError: a NOT NULL column of ``entity`` was set to null
    """
    fields = command.model_dump(exclude_unset=True)
    columns = entity.__table__.c
    for name, value in fields.items():
        if value is None and name in columns and not columns[name].nullable:
            raise ValidationError(f"{name} cannot be null", field=name)
    return fields
