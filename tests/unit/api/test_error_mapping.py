"""Unit tests for API error rendering"""

import pytest

from src.api.error import GENERIC_MESSAGE, ClientError
from src.domain.errors import (
    AmountExceedsBalanceError,
    DatabaseError,
    InvalidStateError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)


@pytest.mark.parametrize(
    "error, expected_status",
    [
        (NotFoundError("Order with ID 1 not found", code="ORDER_NOT_FOUND"), 404),
        (InvalidStateError("Cannot modify a paid invoice", code="INVOICE_LOCKED"), 409),
        (InvalidTransitionError("order", "completed", "processing"), 409),
        (AmountExceedsBalanceError("Payment amount 60.00 exceeds remaining balance 50.00"), 422),
        (ValidationError("Discount cannot be negative", field="discount_amount"), 400),
        (DatabaseError("Failed to create order", correlation_id="abc"), 500),
    ],
)
def test_status_follows_category(error, expected_status):
    assert ClientError(error.to_error()).status_code == expected_status


def test_body_hides_category_and_keeps_context():
    error = AmountExceedsBalanceError(
        "Payment amount 60.00 exceeds remaining balance 50.00", invoice_id=1, remaining="50.00"
    )

    body = ClientError(error.to_error()).to_body()

    assert body == {
        "error": {
            "code": "AMOUNT_EXCEEDS_BALANCE",
            "message": "Payment amount 60.00 exceeds remaining balance 50.00",
            "details": {"invoice_id": 1, "remaining": "50.00"},
        }
    }


def test_database_error_exposes_only_correlation_id():
    error = DatabaseError("Failed to apply invoice payment", correlation_id="c0ffee", invoice_id=9)

    body = ClientError(error.to_error()).to_body()

    assert body == {
        "error": {
            "code": "DATABASE_ERROR",
            "message": GENERIC_MESSAGE,
            "correlation_id": "c0ffee",
        }
    }


def test_reason_is_rendered():
    error = InvalidTransitionError("invoice", "sent", "paid", reason="Payment statuses are set by recording payments")

    body = ClientError(error.to_error()).to_body()

    assert body["error"]["reason"] == "Payment statuses are set by recording payments"
    assert body["error"]["details"]["current_status"] == "sent"
    assert "category" not in body["error"]["details"]
