"""
Error taxonomy for the Posts API.

Every failure a request can end in is one of the ``ApiError``
subclasses below.  Each class carries the HTTP status it maps to and
the message returned to the client.  ``error_response`` turns an
error into a ``(status_code, message)`` pair without touching the
transport, and ``register_exception_handlers`` wires that mapping into
a FastAPI application.

Only ``ValidationError`` passes its specific message through to the
client.  All other errors return a fixed generic message so that
internal detail (or the reason a token was rejected) never leaks.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base class for all errors rendered as an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message: str = "Internal server error"
    headers: Optional[Dict[str, str]] = None

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class InvalidCredentials(ApiError):
    """Login email/password mismatch."""

    status_code = status.HTTP_401_UNAUTHORIZED
    public_message = "Invalid credentials"


class UserAlreadyExists(ApiError):
    """Signup with an email that is already registered."""

    status_code = status.HTTP_409_CONFLICT
    public_message = "User already exists"


class Unauthorized(ApiError):
    """Missing, malformed, forged or expired bearer token."""

    status_code = status.HTTP_401_UNAUTHORIZED
    public_message = "Unauthorized"
    headers = {"WWW-Authenticate": "Bearer"}


class Forbidden(ApiError):
    """Authenticated caller is not the owner of the resource."""

    status_code = status.HTTP_403_FORBIDDEN
    public_message = "Forbidden"


class NotFound(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    public_message = "Not Found"


class ValidationError(ApiError):
    """Input shape or constraint violation.

    Unlike the other errors the message given here is returned to the
    client verbatim.
    """

    status_code = status.HTTP_400_BAD_REQUEST
    public_message = "Validation failed"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, {"field": field} if field else None)
        self.field = field


class InternalError(ApiError):
    """Unexpected failure in hashing or signing.

    The message is logged server-side and never sent to the client.
    """


class ConfigurationError(Exception):
    """Raised at startup when required settings are missing or invalid."""

    def __init__(self, message: str, setting: Optional[str] = None):
        super().__init__(message)
        self.setting = setting


def error_response(exc: ApiError) -> Tuple[int, str]:
    """Map an error to the ``(status_code, message)`` shown to clients."""
    if isinstance(exc, ValidationError):
        return exc.status_code, exc.message
    return exc.status_code, exc.public_message


def format_validation_errors(exc: RequestValidationError) -> str:
    """Render pydantic/FastAPI validation errors as one readable line."""
    parts = []
    for error in exc.errors():
        # Drop the "body"/"query"/"path" prefix from the location.
        loc = [str(item) for item in error.get("loc", ())[1:]]
        field = ".".join(loc)
        msg = error.get("msg", "invalid value")
        parts.append(f"{field}: {msg}" if field else msg)
    return "; ".join(parts) or "Invalid request"


def _render(exc: ApiError) -> JSONResponse:
    status_code, message = error_response(exc)
    return JSONResponse(status_code=status_code, content={"error": message}, headers=exc.headers)


def register_exception_handlers(app: FastAPI) -> None:
    """Install handlers that render every failure as ``{"error": ...}``."""

    @app.exception_handler(ApiError)
    async def handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
        if isinstance(exc, InternalError):
            logger.error("Internal error on %s %s: %s", request.method, request.url.path, exc)
        return _render(exc)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _render(ValidationError(format_validation_errors(exc)))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _render(InternalError(str(exc)))
