"""Gestion standardisée des erreurs API avec enveloppes d'erreur.

Ce module fournit une gestion centralisée des erreurs avec des enveloppes standardisées, des codes
d'erreur cohérents et la conversion des erreurs du domaine en réponses HTTP.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.domain import errors as domain

log = structlog.get_logger(__name__)


@dataclass
class ErrorEnvelope:
    """Standard error envelope for API responses."""

    code: str
    message: str
    trace_id: str | None = None
    details: dict[str, Any] | None = None


class APIError(HTTPException):
    """Custom API error with standard envelope."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        trace_id: str | None = None,
        details: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.code = code
        self.message = message
        self.trace_id = trace_id
        self.details = details


def create_error_response(
    status_code: int,
    code: str,
    message: str,
    trace_id: str | None = None,
    details: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Create a standardized error response."""
    envelope = ErrorEnvelope(
        code=code,
        message=message,
        trace_id=trace_id,
        details=details,
    )

    return JSONResponse(
        status_code=status_code,
        content={
            "code": envelope.code,
            "message": envelope.message,
            "trace_id": envelope.trace_id,
            **({"details": envelope.details} if envelope.details else {}),
        },
        headers=headers,
    )


def extract_trace_id(request: Request) -> str | None:
    """Extract trace ID from request state (set by middleware) or headers."""
    trace_id = getattr(request.state, "trace_id", None)
    if trace_id:
        return trace_id
    return request.headers.get("X-Request-ID")


# Common error codes
class ErrorCodes:
    """Standard error codes for the API."""

    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    CONFLICT = "CONFLICT"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    RATE_LIMITED = "RATE_LIMITED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


_STATUS_CODES = {
    400: ErrorCodes.BAD_REQUEST,
    401: ErrorCodes.UNAUTHORIZED,
    403: ErrorCodes.FORBIDDEN,
    404: ErrorCodes.NOT_FOUND,
    405: ErrorCodes.METHOD_NOT_ALLOWED,
    409: ErrorCodes.CONFLICT,
    413: ErrorCodes.PAYLOAD_TOO_LARGE,
    422: ErrorCodes.VALIDATION_ERROR,
    429: ErrorCodes.RATE_LIMITED,
    500: ErrorCodes.INTERNAL_ERROR,
}


def handle_api_error(request: Request, exc: APIError) -> JSONResponse:
    """Handle APIError exceptions with standard envelope."""
    trace_id = extract_trace_id(request) or exc.trace_id
    level = log.error if exc.status_code >= 500 else log.warning
    level(
        "api_error",
        code=exc.code,
        error_message=exc.message,
        status_code=exc.status_code,
        path=request.url.path,
        trace_id=trace_id,
    )
    return create_error_response(
        status_code=exc.status_code,
        code=exc.code,
        message=exc.message,
        trace_id=trace_id,
        details=exc.details,
        headers=exc.headers,
    )


def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle FastAPI HTTPException with standard envelope."""
    if isinstance(exc, APIError):
        return handle_api_error(request, exc)
    trace_id = extract_trace_id(request)
    code = _STATUS_CODES.get(exc.status_code, "HTTP_ERROR")
    log.warning(
        "http_exception",
        code=code,
        error_message=str(exc.detail),
        status_code=exc.status_code,
        path=request.url.path,
        trace_id=trace_id,
    )
    return create_error_response(
        status_code=exc.status_code,
        code=code,
        message=str(exc.detail),
        trace_id=trace_id,
        headers=getattr(exc, "headers", None),
    )


def handle_generic_exception(request: Request, exc: Exception) -> JSONResponse:
    """Handle generic exceptions with standard envelope; never leaks internals."""
    trace_id = extract_trace_id(request)
    log.error(
        "unexpected_error",
        path=request.url.path,
        trace_id=trace_id,
        exception_type=type(exc).__name__,
        exc_info=exc,
    )
    return create_error_response(
        status_code=500,
        code=ErrorCodes.INTERNAL_ERROR,
        message="An unexpected error occurred",
        trace_id=trace_id,
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(APIError, handle_api_error)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, handle_generic_exception)


def from_domain_error(exc: domain.DomainError) -> APIError:
    """Convertit une erreur du domaine en `APIError` (statut + code HTTP)."""
    if isinstance(exc, domain.LockedOutError):
        return APIError(
            429,
            ErrorCodes.RATE_LIMITED,
            exc.code,
            headers={"Retry-After": str(exc.retry_after)},
        )
    if isinstance(exc, domain.AuthenticationError):
        return unauthorized(exc.code)
    if isinstance(exc, domain.MissingTokenError):
        return unauthorized(exc.code)
    if isinstance(exc, domain.AuthorizationError):
        return forbidden(exc.code)
    if isinstance(exc, domain.UploadTooLargeError):
        return APIError(413, ErrorCodes.PAYLOAD_TOO_LARGE, exc.code)
    if isinstance(exc, domain.ValidationError):
        return bad_request(exc.message)
    if isinstance(exc, domain.UnknownCategoryError):
        return not_found(exc.code)
    if isinstance(exc, domain.ConflictError):
        return conflict(exc.code)
    if isinstance(exc, domain.PersistenceError):
        return internal_error(exc.message)
    return internal_error("An unexpected error occurred")


# Convenience functions for common errors
def bad_request(
    message: str, trace_id: str | None = None, details: dict[str, Any] | None = None
) -> APIError:
    """Create a 400 Bad Request error."""
    return APIError(400, ErrorCodes.BAD_REQUEST, message, trace_id, details)


def unauthorized(message: str, trace_id: str | None = None) -> APIError:
    """Create a 401 Unauthorized error."""
    return APIError(
        401,
        ErrorCodes.UNAUTHORIZED,
        message,
        trace_id,
        headers={"WWW-Authenticate": "Bearer"},
    )


def forbidden(message: str, trace_id: str | None = None) -> APIError:
    """Create a 403 Forbidden error."""
    return APIError(403, ErrorCodes.FORBIDDEN, message, trace_id)


def not_found(message: str, trace_id: str | None = None) -> APIError:
    """Create a 404 Not Found error."""
    return APIError(404, ErrorCodes.NOT_FOUND, message, trace_id)


def conflict(
    message: str, trace_id: str | None = None, details: dict[str, Any] | None = None
) -> APIError:
    """Create a 409 Conflict error."""
    return APIError(409, ErrorCodes.CONFLICT, message, trace_id, details)


def internal_error(message: str, trace_id: str | None = None) -> APIError:
    """Create a 500 Internal Server Error."""
    return APIError(500, ErrorCodes.INTERNAL_ERROR, message, trace_id)
