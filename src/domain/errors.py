"""Domain Errors

Typed failures raised by the domain and the payment ledger. Use cases turn
them into ``libs.result.Error`` values; the API maps each category to an HTTP
status.
"""

from typing import Any, Dict, Optional
from libs.result import Error


class DomainError(Exception):
    """Base class for every business-rule failure"""

    category = "DOMAIN_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        reason: Optional[str] = None,
        **context: Any,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.category
        self.reason = reason
        self.context: Dict[str, Any] = context

    def to_error(self) -> Error:
        return Error(
            code=self.code,
            message=self.message,
            reason=self.reason,
            details={"category": self.category, **self.context},
        )


class NotFoundError(DomainError):
    category = "NOT_FOUND"


class InvalidStateError(DomainError):
    """Operation is forbidden by the document's current status"""

    category = "INVALID_STATE"


class InvalidTransitionError(DomainError):
    category = "INVALID_TRANSITION"

    def __init__(self, entity: str, current: str, target: str, **context: Any):
        super().__init__(
            f"Cannot transition {entity} from '{current}' to '{target}'",
            code=self.category,
            entity=entity,
            current_status=current,
            target_status=target,
            **context,
        )


class AmountExceedsBalanceError(DomainError):
    category = "AMOUNT_EXCEEDS_BALANCE"


class ValidationError(DomainError):
    category = "VALIDATION_ERROR"


class DatabaseError(DomainError):
    """Persistence failure, wrapped with the entity and action it happened in"""

    category = "DATABASE_ERROR"


ERROR_CATEGORIES = (
    NotFoundError.category,
    InvalidStateError.category,
    InvalidTransitionError.category,
    AmountExceedsBalanceError.category,
    ValidationError.category,
    DatabaseError.category,
)
