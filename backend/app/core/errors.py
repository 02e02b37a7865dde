"""API error taxonomy and the central handlers that render the error envelope.

Every failure a client can see is rendered as::

    {"success": false, "message": "...", "error": {"code": "...", "details": ...}}
"""
import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base class for errors rendered with a fixed code and HTTP status."""

    code = "INTERNAL_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal server error"

    def __init__(self, message: str | None = None, details: Any | None = None):
        self.message = message or self.message
        self.details = details
        super().__init__(self.message)


class ValidationFailed(ApiError):
    code = "VALIDATION_ERROR"
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Validation failed"


class InvalidCredentials(ApiError):
    code = "INVALID_CREDENTIALS"
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid credentials"


class Unauthorized(ApiError):
    code = "UNAUTHORIZED"
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Access token required"


class InvalidToken(ApiError):
    code = "INVALID_TOKEN"
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid token"


class TokenExpired(ApiError):
    code = "TOKEN_EXPIRED"
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Token expired"


class Forbidden(ApiError):
    code = "FORBIDDEN"
    status_code = status.HTTP_403_FORBIDDEN
    message = "Insufficient permissions"


class NotFound(ApiError):
    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND
    message = "Resource not found"


_AUTH_ERRORS = (Unauthorized, InvalidToken, TokenExpired)

_HTTP_STATUS_CODES = {
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
}


def error_response(
    status_code: int,
    code: str,
    message: str,
    details: Any | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    error: dict[str, Any] = {"code": code}
    if details is not None:
        error["details"] = details
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder({"success": False, "message": message, "error": error}),
        headers=headers,
    )


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, _AUTH_ERRORS) else None
    if exc.status_code >= 500:
        logger.error("API error %s on %s %s", exc.code, request.method, request.url.path, exc_info=exc)
    return error_response(exc.status_code, exc.code, exc.message, exc.details, headers)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = []
    for err in exc.errors():
        # loc is ("body", "username") / ("query", "page"); drop the source segment
        loc = [str(part) for part in err.get("loc", ())]
        field = ".".join(loc[1:]) if len(loc) > 1 else ".".join(loc) or "unknown"
        details.append({"field": field, "message": err.get("msg", "Invalid value")})
    return error_response(
        ValidationFailed.status_code, ValidationFailed.code, ValidationFailed.message, details
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = _HTTP_STATUS_CODES.get(exc.status_code, "HTTP_ERROR")
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    if exc.status_code == status.HTTP_404_NOT_FOUND and message == "Not Found":
        message = f"Route {request.url.path} not found"
    return error_response(exc.status_code, code, message, headers=getattr(exc, "headers", None))


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return error_response(
        status.HTTP_429_TOO_MANY_REQUESTS,
        "RATE_LIMITED",
        f"Rate limit exceeded: {exc.detail}",
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled exception: %s %s - %s", request.method, request.url.path, exc, exc_info=True)
    message = "Internal server error" if settings.APP_ENV == "production" else str(exc) or "Internal server error"
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", message)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
