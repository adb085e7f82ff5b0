"""
Error handling middleware.

Standardizes all API error responses to include:
- error_code: machine-readable identifier
- message: human-readable description
- hint: suggested recovery action
- alert: the title/message/type the operator is shown
"""

import traceback
from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from pharmapos.application.dto.responses import AlertResponse, ErrorResponse
from pharmapos.config import get_logger
from pharmapos.core.exceptions import (
    CommitError,
    FileTooLargeError,
    InvalidTransitionError,
    PharmaPOSError,
    RecordNotFoundError,
    StorageError,
    ValidationError,
)
from pharmapos.core.services import get_error_message

logger = get_logger(__name__)

DEFAULT_ALERT_TITLE = "PharmaPOS"

# Map exceptions to HTTP status codes; first match wins
EXCEPTION_STATUS_MAP: dict[type[Exception], int] = {
    FileTooLargeError: status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    ValidationError: status.HTTP_400_BAD_REQUEST,
    RecordNotFoundError: status.HTTP_404_NOT_FOUND,
    CommitError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    StorageError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    InvalidTransitionError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ValueError: status.HTTP_400_BAD_REQUEST,
    KeyError: status.HTTP_404_NOT_FOUND,
}

# Hint messages per error code / exception type
HINT_MAP: dict[str, str] = {
    "PRODUCT_NOT_FOUND": "Check the product ID and try GET /api/products to list products.",
    "INVOICE_NOT_FOUND": "Check the invoice ID and try GET /api/invoices to list invoices.",
    "CREDIT_NOTE_NOT_FOUND": "Check the credit note ID and try GET /api/credit-notes.",
    "SALE_NOT_FOUND": "Check the sale ID and try GET /api/sales to list sales.",
    "INSUFFICIENT_STOCK": "Reduce the quantity or receive more stock first.",
    "PRICE_BELOW_FLOOR": "Raise the price to at least the minimum selling price.",
    "CSV_IMPORT_ERROR": "Check the CSV header row and file encoding (UTF-8).",
    "INVOICE_ROLLED_BACK": "Nothing was saved. Fix the cause and submit the invoice again.",
    "SALE_ROLLED_BACK": "Nothing was saved. Retry the sale.",
    "VALIDATION_ERROR": "Check the request body against the API schema.",
    "DATABASE_ERROR": "A database operation failed. Check server logs.",
    "ValueError": "A parameter value is invalid. Check the request.",
    "KeyError": "The requested key was not found.",
}

# Default hints by HTTP status code
STATUS_HINTS: dict[int, str] = {
    400: "Check the request parameters and body.",
    404: "The requested resource was not found. Verify the ID.",
    413: "Upload a smaller file.",
    422: "The request could not be processed. Check the input format.",
    500: "An internal error occurred. Check server logs.",
}


def _get_hint(error_code: str, status_code: int) -> str:
    """Resolve hint from error code, falling back to status-based hint."""
    return HINT_MAP.get(error_code) or STATUS_HINTS.get(status_code, "")


def _status_for(exc: Exception) -> int:
    for exc_type, code in EXCEPTION_STATUS_MAP.items():
        if isinstance(exc, exc_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _alert_for(exc: Exception) -> AlertResponse:
    """What the operator sees: validation text as written, everything else made friendly."""
    if isinstance(exc, ValidationError):
        message = exc.details.get("message") or exc.message
    elif isinstance(exc, CommitError):
        message = exc.message
    else:
        message = get_error_message(exc)

    title = exc.title if isinstance(exc, PharmaPOSError) else DEFAULT_ALERT_TITLE
    return AlertResponse(title=title, message=message, type="error")


def build_error_response(request: Request, exc: Exception) -> JSONResponse:
    """Convert exception to standardized JSON response."""
    status_code = _status_for(exc)
    error_code = exc.code if isinstance(exc, PharmaPOSError) else exc.__class__.__name__
    request_id = getattr(request.state, "request_id", None)

    log = logger.error if status_code >= 500 else logger.warning
    log(
        "request_error",
        request_id=request_id,
        path=request.url.path,
        error_type=error_code,
        error=str(exc),
        traceback=traceback.format_exc() if status_code >= 500 else None,
    )

    detail = None
    if isinstance(exc, PharmaPOSError) and exc.details:
        detail = "; ".join(f"{k}: {v}" for k, v in exc.details.items() if v not in (None, [], {}))

    error_response = ErrorResponse(
        error_code=error_code,
        message=exc.message if isinstance(exc, PharmaPOSError) else str(exc),
        hint=_get_hint(error_code, status_code),
        detail=detail or None,
        path=request.url.path,
        alert=_alert_for(exc),
    )
    return JSONResponse(
        status_code=status_code,
        content=error_response.model_dump(mode="json"),
    )


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Global error handling middleware.

    Catches anything the registered exception handlers did not.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            return build_error_response(request, e)


def setup_exception_handlers(app: FastAPI) -> None:
    """Set up FastAPI exception handlers."""
    from fastapi.exceptions import RequestValidationError
    from starlette.exceptions import HTTPException

    @app.exception_handler(PharmaPOSError)
    async def domain_exception_handler(request: Request, exc: PharmaPOSError) -> JSONResponse:
        return build_error_response(request, exc)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Handle Pydantic validation errors."""
        errors = []
        for error in exc.errors():
            loc = " -> ".join(str(part) for part in error["loc"])
            errors.append(f"{loc}: {error['msg']}")

        return JSONResponse(
            status_code=422,
            content=ErrorResponse(
                error_code="VALIDATION_ERROR",
                message="Request validation failed",
                hint="Check the request body fields and types.",
                detail="; ".join(errors),
                path=request.url.path,
                alert=AlertResponse(
                    title=DEFAULT_ALERT_TITLE,
                    message="Please fill in all required fields.",
                    type="error",
                ),
            ).model_dump(mode="json"),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request,
        exc: HTTPException,
    ) -> JSONResponse:
        """Handle HTTP exceptions with standardized format."""
        error_code = "NOT_FOUND" if exc.status_code == 404 else "HTTP_ERROR"
        message = exc.detail or "An error occurred"

        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error_code=error_code,
                message=message,
                hint=_get_hint(error_code, exc.status_code),
                path=request.url.path,
                alert=AlertResponse(title=DEFAULT_ALERT_TITLE, message=message, type="error"),
            ).model_dump(mode="json"),
        )
