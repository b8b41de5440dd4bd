"""
Application error taxonomy and its mapping onto HTTP responses.

Error body shape: {"error": "<code>", "message": "<text>"}

Validation and not-found messages go back to the caller verbatim. Store and
internal failures are logged with full detail and answered with a generic
message so database internals never leak to clients.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

GENERIC_SERVER_MESSAGE = "An internal server error occurred."


class AppError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "internal_server_error"

    def __init__(self, message: str = GENERIC_SERVER_MESSAGE) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"


class InvalidFormat(ValidationError):
    def __init__(self, field: str) -> None:
        super().__init__(f"Invalid {field} format.")
        self.field = field


class RequiredField(ValidationError):
    def __init__(self, field: str) -> None:
        super().__init__(f"{field} is required.")
        self.field = field


class TooLong(ValidationError):
    def __init__(self, field: str, max_length: int) -> None:
        super().__init__(f"{field} must be at most {max_length} characters.")
        self.field = field
        self.max_length = max_length


class LimitExceeded(ValidationError):
    def __init__(self, max_limit: int) -> None:
        super().__init__(f"limit must be {max_limit} or less.")
        self.max_limit = max_limit


class OutOfRange(ValidationError):
    def __init__(self, field: str, minimum: int, maximum: int) -> None:
        super().__init__(f"{field} must be between {minimum} and {maximum}.")
        self.field = field
        self.minimum = minimum
        self.maximum = maximum


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


# Persistence failures are explicit and separable from other runtime errors.
class StoreError(AppError):
    pass


class InternalError(AppError):
    pass


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": code, "message": message})


async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "request_failed method=%s path=%s error=%s detail=%s",
            request.method,
            request.url.path,
            type(exc).__name__,
            exc.message,
            exc_info=exc,
        )
        return _error_response(exc.status_code, exc.code, GENERIC_SERVER_MESSAGE)
    return _error_response(exc.status_code, exc.code, exc.message)


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(
            str(part) for part in first.get("loc", ())
            if not isinstance(part, int) and part not in ("body", "query", "path")
        )
        message = f"{location}: {first.get('msg', 'invalid value')}" if location else str(first.get("msg"))
    else:
        message = "Invalid request."
    return _error_response(status.HTTP_400_BAD_REQUEST, ValidationError.code, message)


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "request_failed method=%s path=%s error=%s",
        request.method,
        request.url.path,
        type(exc).__name__,
        exc_info=exc,
    )
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        InternalError.code,
        GENERIC_SERVER_MESSAGE,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, _app_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
