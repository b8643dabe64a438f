"""
Application error hierarchy and FastAPI exception handlers.

AppError is the base for all typed errors. Each subclass carries a stable
``error_code`` (the failure kind) and the HTTP status the global handler
renders it with.

Non-AppError exceptions bubble up as generic 500s; the detail is logged and
reported to Sentry, never returned to the caller.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from shared.logging import get_logger

log = get_logger(__name__)


class AppError(Exception):
    """Base application error. All typed errors inherit from this."""

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        self.details = details

    def to_dict(self) -> dict:
        payload: dict = {"error": self.message, "code": self.error_code}
        if self.field is not None:
            payload["field"] = self.field
        if self.details is not None:
            payload["details"] = self.details
        return payload


class InvalidArgumentError(AppError):
    status_code = 400
    error_code = "invalid_argument"


class AuthenticationError(AppError):
    status_code = 401
    error_code = "unauthenticated"


class PermissionDeniedError(AppError):
    status_code = 403
    error_code = "permission_denied"


class UserNotFoundError(AppError):
    status_code = 404
    error_code = "user_not_found"


class RateLimitExceededError(AppError):
    status_code = 429
    error_code = "resource_exhausted"


class ProviderError(AppError):
    """Identity-provider failure not otherwise classified."""

    status_code = 502
    error_code = "provider_error"


class NotificationError(AppError):
    """Email channel failure. Any credential change made before it stands."""

    status_code = 502
    error_code = "notification_error"


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI app."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        # Malformed bodies share the invalid_argument shape with service-level checks
        error = InvalidArgumentError(
            "Request body is malformed.",
            details=[
                {"loc": list(err.get("loc", ())), "msg": err.get("msg")}
                for err in exc.errors()
            ],
        )
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        # Sentry auto-captures unhandled exceptions before this handler fires.
        log.error(
            "unhandled_exception",
            path=request.url.path,
            error_type=type(exc).__name__,
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={"error": "An internal server error occurred.", "code": "internal_error"},
        )
