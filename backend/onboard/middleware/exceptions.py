"""Application errors and the handlers that turn them into JSON.

Failures always leave the API as

    {"success": false, "error": {"code": ..., "message": ..., "details"?: ...}}

Services and dependencies raise the `OnboardException` subclasses below;
each subclass only pins its HTTP status and error code.
"""

import logging
import traceback
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

from onboard.config import settings

logger = logging.getLogger(__name__)


# ── Error types ──────────────────────────────────────────────

class OnboardException(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "INTERNAL_ERROR"
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class BadRequestError(OnboardException):
    """Well-formed input the current state does not allow (e.g. completing a future step)."""
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "BAD_REQUEST"
    default_message = "Bad request"


class UnauthorizedError(OnboardException):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "UNAUTHORIZED"
    default_message = "Unauthorized"


class InvalidTokenError(UnauthorizedError):
    error_code = "INVALID_TOKEN"
    default_message = "Invalid token"


class TokenExpiredError(UnauthorizedError):
    error_code = "TOKEN_EXPIRED"
    default_message = "Token has expired"


class ForbiddenError(OnboardException):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "FORBIDDEN"
    default_message = "Forbidden"


class ResourceNotFoundError(OnboardException):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found")


class ConflictError(OnboardException):
    status_code = status.HTTP_409_CONFLICT
    error_code = "CONFLICT"
    default_message = "Conflict"


class TooManyRequestsError(OnboardException):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    error_code = "TOO_MANY_REQUESTS"
    default_message = "Too many requests, please try again later."


# Framework-raised HTTPExceptions carry only a status
_CODES_BY_STATUS = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    429: "TOO_MANY_REQUESTS",
}


def create_error_response(
    status_code: int,
    message: str,
    error_code: str = "ERROR",
    details: Any = None,
    headers: dict | None = None,
) -> JSONResponse:
    error: dict[str, Any] = {"code": error_code, "message": message}
    if details is not None:
        error["details"] = details
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error},
        headers=headers,
    )


def _where(request: Request) -> str:
    return f"{request.method} {request.url.path}"


# ── Handlers ─────────────────────────────────────────────────

async def onboard_exception_handler(request: Request, exc: OnboardException) -> JSONResponse:
    logger.info("%s on %s: %s", exc.error_code, _where(request), exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedError) else None
    return create_error_response(
        exc.status_code, exc.message, exc.error_code, exc.details, headers
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        message = f"Route {_where(request)} not found"
    else:
        message = str(exc.detail)
    return create_error_response(
        exc.status_code,
        message,
        _CODES_BY_STATUS.get(exc.status_code, f"HTTP_{exc.status_code}"),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError | ValidationError
) -> JSONResponse:
    """Request bodies, and step payloads validated inside the onboarding service."""
    fields = [
        {
            # Drop the "body" prefix FastAPI adds to request locations
            "field": ".".join(str(part) for part in err["loc"] if part != "body"),
            "message": err["msg"],
        }
        for err in exc.errors()
    ]
    logger.info("Validation failed on %s: %d field(s)", _where(request), len(fields))
    return create_error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY, "Validation failed", "VALIDATION_ERROR", fields
    )


async def integrity_exception_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """Constraint races the services did not catch first (e.g. two signups, one email)."""
    logger.error("Integrity error on %s: %s", _where(request), exc.orig)
    reason = str(exc.orig).lower()
    if "unique" in reason:
        return create_error_response(
            status.HTTP_409_CONFLICT,
            "A record with this value already exists",
            "DUPLICATE_ENTRY",
        )
    if "foreign key" in reason:
        return create_error_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "Referenced record does not exist",
            "FOREIGN_KEY_VIOLATION",
        )
    return create_error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Database constraint violation",
        "INTEGRITY_ERROR",
    )


async def operational_exception_handler(request: Request, exc: OperationalError) -> JSONResponse:
    logger.error("Database unavailable on %s: %s", _where(request), exc)
    return create_error_response(
        status.HTTP_503_SERVICE_UNAVAILABLE,
        "Database temporarily unavailable. Please try again.",
        "DATABASE_UNAVAILABLE",
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception on %s", _where(request))
    if settings.is_production:
        return create_error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", "INTERNAL_ERROR"
        )
    return create_error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        str(exc) or type(exc).__name__,
        "INTERNAL_ERROR",
        {"traceback": traceback.format_exception(exc)},
    )


def register_exception_handlers(app: FastAPI) -> None:
    handlers = {
        OnboardException: onboard_exception_handler,
        StarletteHTTPException: http_exception_handler,
        RequestValidationError: validation_exception_handler,
        ValidationError: validation_exception_handler,
        IntegrityError: integrity_exception_handler,
        OperationalError: operational_exception_handler,
        Exception: unhandled_exception_handler,
    }
    for exc_class, handler in handlers.items():
        app.add_exception_handler(exc_class, handler)
