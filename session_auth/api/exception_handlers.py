"""Global exception handlers that map domain exceptions to HTTP responses."""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from session_auth.errors import (
    CORRUPT_CREDENTIAL,
    DUPLICATE_EMAIL,
    INTERNAL_ERROR,
    INVALID_OR_EXPIRED_TOKEN,
    INVALID_PASSWORD,
    SESSION_STORE_FAILURE,
    STORE_UNAVAILABLE,
    UNKNOWN_EMAIL,
    UPDATE_FAILED,
    VALIDATION_ERROR,
    CorruptCredentialError,
    DomainValidationError,
    DuplicateEmailError,
    InvalidOrExpiredTokenError,
    InvalidPasswordError,
    SessionStoreFailureError,
    StoreUnavailableError,
    UnknownEmailError,
    UpdateFailedError,
)
from session_auth.schemas.error import ErrorResponse

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


def _error_response(status_code: int, message: str, code: str) -> JSONResponse:
    """Return a standardized error response with message and machine-readable code."""
    body = ErrorResponse(message=message, code=code)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def _client_error_handler(status_code: int, code: str):
    def handler(_request: Request, exc: Exception) -> JSONResponse:
        return _error_response(status_code, str(exc), code)

    return handler


def _server_error_handler(code: str):
    # Internal details are logged, never returned
    def handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "%s on %s %s: %s",
            type(exc).__name__,
            request.method,
            request.url.path,
            exc,
            exc_info=exc,
        )
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE, code)

    return handler


def request_validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = "Invalid request"
    return _error_response(status.HTTP_400_BAD_REQUEST, message, VALIDATION_ERROR)


def register_exception_handlers(app):
    """Register domain exception handlers on the FastAPI app."""
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(
        DomainValidationError,
        _client_error_handler(status.HTTP_400_BAD_REQUEST, VALIDATION_ERROR),
    )
    app.add_exception_handler(
        DuplicateEmailError,
        _client_error_handler(status.HTTP_400_BAD_REQUEST, DUPLICATE_EMAIL),
    )
    app.add_exception_handler(
        UnknownEmailError,
        _client_error_handler(status.HTTP_400_BAD_REQUEST, UNKNOWN_EMAIL),
    )
    app.add_exception_handler(
        InvalidPasswordError,
        _client_error_handler(status.HTTP_401_UNAUTHORIZED, INVALID_PASSWORD),
    )
    app.add_exception_handler(
        InvalidOrExpiredTokenError,
        _client_error_handler(status.HTTP_400_BAD_REQUEST, INVALID_OR_EXPIRED_TOKEN),
    )
    app.add_exception_handler(
        UpdateFailedError,
        _client_error_handler(status.HTTP_409_CONFLICT, UPDATE_FAILED),
    )
    app.add_exception_handler(CorruptCredentialError, _server_error_handler(CORRUPT_CREDENTIAL))
    app.add_exception_handler(SessionStoreFailureError, _server_error_handler(SESSION_STORE_FAILURE))
    app.add_exception_handler(StoreUnavailableError, _server_error_handler(STORE_UNAVAILABLE))
    app.add_exception_handler(Exception, _server_error_handler(INTERNAL_ERROR))
