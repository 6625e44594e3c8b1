"""API error rendering

Use case errors reach the client as {"error": {"code", "message", ...}}.
The HTTP status follows the error category. Database and unexpected errors
only expose a generic message and a correlation id.
"""

import logging
from typing import Optional
from uuid import uuid4
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from libs.result import Error

logger = logging.getLogger(__name__)

CATEGORY_STATUS = {
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "INVALID_STATE": status.HTTP_409_CONFLICT,
    "INVALID_TRANSITION": status.HTTP_409_CONFLICT,
    "AMOUNT_EXCEEDS_BALANCE": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "DATABASE_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,
}

GENERIC_MESSAGE = "An unexpected error occurred"


def error_category(error: Error) -> Optional[str]:
    return (error.details or {}).get("category")


class ClientError(Exception):
    def __init__(self, error: Error, status_code: Optional[int] = None):
        super().__init__(error.message)
        self.error = error
        self.status_code = status_code or CATEGORY_STATUS.get(
            error_category(error), status.HTTP_400_BAD_REQUEST
        )

    def to_body(self) -> dict:
        details = dict(self.error.details or {})
        if self.status_code >= 500:
            return {
                "error": {
                    "code": self.error.code,
                    "message": GENERIC_MESSAGE,
                    "correlation_id": details.get("correlation_id"),
                }
            }

        details.pop("category", None)
        body = {"code": self.error.code, "message": self.error.message}
        if self.error.reason:
            body["reason"] = self.error.reason
        if details:
            body["details"] = details
        return {"error": body}


async def client_error_handler(request: Request, exc: ClientError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_body()))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    correlation_id = uuid4().hex
    logger.error(
        f"Unhandled error on {request.method} {request.url.path} [correlation_id={correlation_id}]",
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": GENERIC_MESSAGE,
                "correlation_id": correlation_id,
            }
        },
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder({
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Request validation failed",
                "details": {"errors": exc.errors()},
            }
        }),
    )
