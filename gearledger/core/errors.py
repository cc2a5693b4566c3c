"""Domain errors and the HTTP envelope they are rendered into.

The ledger raises these from plain functions; the API layer maps each class
to a status code. ``ConflictError.code`` names the constraint that was hit so
callers can show a specific message instead of a generic failure.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class LedgerError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = "ledger_error"

    def __init__(self, message: str, *, code: str | None = None, details: Any | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details


class ValidationError(LedgerError):
    status_code = 422
    default_code = "validation_error"


class NotFoundError(LedgerError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = "not_found"


class ConflictError(LedgerError):
    status_code = status.HTTP_409_CONFLICT
    default_code = "conflict"


class StoreError(LedgerError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_code = "store_error"


class ErrorEnvelope(JSONResponse):
    def __init__(
        self,
        *,
        status_code: int,
        code: str,
        message: str,
        details: Any | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        payload: dict[str, Any] = {"code": code, "message": message}
        if details is not None:
            payload["details"] = details
        super().__init__(payload, status_code=status_code, headers=headers)


async def ledger_error_handler(request: Request, exc: LedgerError):
    return ErrorEnvelope(
        status_code=exc.status_code,
        code=exc.code,
        message=exc.message,
        details=exc.details,
    )


async def store_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("store.failure", exc_info=exc, extra={"extra_data": {"path": request.url.path}})
    return ErrorEnvelope(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        code="store_error",
        message="Database operation failed",
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    message = detail if isinstance(detail, str) else "Error"
    details = detail if isinstance(detail, dict) else None
    return ErrorEnvelope(
        status_code=exc.status_code,
        code="http_error",
        message=message,
        details=details,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return ErrorEnvelope(
        status_code=422,
        code="validation_error",
        message="Validation failed",
        details={"errors": jsonable_encoder(exc.errors())},
    )


def install(app) -> None:
    app.add_exception_handler(LedgerError, ledger_error_handler)
    app.add_exception_handler(SQLAlchemyError, store_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
