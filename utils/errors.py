"""
Application error taxonomy and the FastAPI handlers that render it.

Every error reaches the client as ``{"success": false, "message": ...}``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    @property
    def public_message(self) -> str:
        """Text that is safe to echo back to a caller."""
        return self.message


class ValidationError(AppError):
    """A required request field is missing or malformed."""

    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(AppError):
    """No session, or bad credentials."""

    status_code = status.HTTP_401_UNAUTHORIZED


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT


class ConfigurationError(AppError):
    """A required setting is absent. Raised before any network call."""

    @property
    def public_message(self) -> str:
        return "Email service is not configured"


class ProviderError(AppError):
    """The email provider answered with a non-2xx status."""

    def __init__(
        self,
        message: str,
        *,
        provider_status: int,
        body: Any = None,
        retry_after: Optional[str] = None,
    ):
        super().__init__(message, details={"provider_status": provider_status})
        self.provider_status = provider_status
        self.body = body
        self.retry_after = retry_after


class TransportError(AppError):
    """The provider could not be reached (DNS, connect, timeout, ...)."""


def error_body(message: str) -> Dict[str, Any]:
    return {"success": False, "message": message}


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the JSON error handlers used across all routers."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("%s %s — %s: %s", request.method, request.url.path, type(exc).__name__, exc.message)
        return JSONResponse(status_code=exc.status_code, content=error_body(exc.public_message))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = "Invalid request body"
        if errors:
            first = errors[0]
            field = ".".join(str(p) for p in first.get("loc", ())[1:]) or "body"
            message = f"{field}: {first.get('msg', 'invalid value')}"
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error_body(message))
