from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException


class LedgerError(Exception):
    """Business-rule violation detected by one of the ledgers.

    Raised before any write, or inside a unit of work which then rolls back.
    Never retried: the caller has to change the request.
    """

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "ledger_error"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(LedgerError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class InvalidAmountError(LedgerError):
    code = "invalid_amount"


class InvalidQuantityError(LedgerError):
    code = "invalid_quantity"


class InvalidTimestampError(LedgerError):
    code = "invalid_timestamp"


class InsufficientStockError(LedgerError):
    code = "insufficient_stock"


class InsufficientFilamentError(LedgerError):
    code = "insufficient_filament"


class SessionClosedError(LedgerError):
    code = "session_closed"


class MissingCashAmountError(LedgerError):
    code = "missing_cash_amount"


class InsufficientCashError(LedgerError):
    code = "insufficient_cash"


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


async def ledger_exception_handler(request: Request, exc: LedgerError):
    return ErrorEnvelope(
        status_code=exc.status_code,
        code=exc.code,
        message=exc.message,
        details=exc.details,
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
        details={"errors": _jsonable_errors(exc.errors())},
    )


def _jsonable_errors(errors: Any) -> list[dict[str, Any]]:
    # pydantic puts the raised exception object under ctx["error"].
    cleaned = []
    for error in errors:
        item = dict(error)
        ctx = item.get("ctx")
        if isinstance(ctx, dict):
            item["ctx"] = {key: str(value) for key, value in ctx.items()}
        cleaned.append(item)
    return cleaned
