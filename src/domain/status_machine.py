"""Status State Machine

Static transition tables for order and invoice status. Every status write
goes through ``StatusMachine.validate`` before anything is mutated.
"""

from enum import Enum
from typing import Dict, FrozenSet, Generic, Type, TypeVar, Union
from src.domain.errors import InvalidTransitionError, ValidationError
from src.domain.invoice import InvoiceStatus
from src.domain.order import OrderStatus

S = TypeVar("S", bound=Enum)


ORDER_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({
        OrderStatus.PROCESSING,
        OrderStatus.COMPLETED,
        OrderStatus.CANCELLED,
    }),
    OrderStatus.PROCESSING: frozenset({
        OrderStatus.COMPLETED,
        OrderStatus.CANCELLED,
    }),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

INVOICE_TRANSITIONS: Dict[InvoiceStatus, FrozenSet[InvoiceStatus]] = {
    InvoiceStatus.DRAFT: frozenset({
        InvoiceStatus.ISSUED,
        InvoiceStatus.SENT,
        InvoiceStatus.CANCELLED,
    }),
    InvoiceStatus.ISSUED: frozenset({
        InvoiceStatus.SENT,
        InvoiceStatus.PARTIALLY_PAID,
        InvoiceStatus.PAID,
        InvoiceStatus.OVERDUE,
        InvoiceStatus.CANCELLED,
        InvoiceStatus.VOID,
    }),
    InvoiceStatus.SENT: frozenset({
        InvoiceStatus.PARTIALLY_PAID,
        InvoiceStatus.PAID,
        InvoiceStatus.OVERDUE,
        InvoiceStatus.CANCELLED,
    }),
    InvoiceStatus.PARTIALLY_PAID: frozenset({
        InvoiceStatus.PAID,
        InvoiceStatus.OVERDUE,
        InvoiceStatus.CANCELLED,
    }),
    InvoiceStatus.OVERDUE: frozenset({
        InvoiceStatus.PARTIALLY_PAID,
        InvoiceStatus.PAID,
        InvoiceStatus.CANCELLED,
    }),
    InvoiceStatus.PAID: frozenset(),
    InvoiceStatus.CANCELLED: frozenset(),
    InvoiceStatus.VOID: frozenset(),
}

# Reached only through the payment ledger, never by a bare status update
LEDGER_ONLY_INVOICE_STATUSES = frozenset({InvoiceStatus.PAID, InvoiceStatus.PARTIALLY_PAID})


class StatusMachine(Generic[S]):
    def __init__(self, entity: str, status_type: Type[S], transitions: Dict[S, FrozenSet[S]]):
        self.entity = entity
        self.status_type = status_type
        self.transitions = transitions

    def parse(self, value: Union[S, str]) -> S:
        """Coerce a raw status string, unknown values are validation errors"""
        if isinstance(value, self.status_type):
            return value
        try:
            return self.status_type(value)
        except ValueError:
            allowed = ", ".join(s.value for s in self.status_type)
            raise ValidationError(
                f"Unknown {self.entity} status '{value}'. Allowed: {allowed}",
                field="status",
            )

    def can_transition(self, current: S, target: S) -> bool:
        if current == target:
            return True
        return target in self.transitions.get(current, frozenset())

    def validate(self, current: Union[S, str], target: Union[S, str]) -> bool:
        """
        Check a requested transition

        Returns:
            True if the status changes, False for a same-status no-op

        Raises:
            InvalidTransitionError: the edge is not in the table
        """
        current = self.parse(current)
        target = self.parse(target)
        if current == target:
            return False
        if not self.can_transition(current, target):
            raise InvalidTransitionError(self.entity, current.value, target.value)
        return True

    def allowed_targets(self, current: Union[S, str]) -> FrozenSet[S]:
        return self.transitions.get(self.parse(current), frozenset())

    def is_terminal(self, status: Union[S, str]) -> bool:
        return not self.allowed_targets(status)


order_status_machine: StatusMachine[OrderStatus] = StatusMachine(
    "order", OrderStatus, ORDER_TRANSITIONS
)
invoice_status_machine: StatusMachine[InvoiceStatus] = StatusMachine(
    "invoice", InvoiceStatus, INVOICE_TRANSITIONS
)
