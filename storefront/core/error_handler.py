"""
Error handling and sanitization

- Storefront errors map to their HTTP status (404, 401, 400, ...)
- Unhandled exceptions are logged with traceback and returned as a
  sanitized 500 unless DEBUG is on
"""
import logging
import traceback
import uuid
from typing import Union

from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from storefront.core.config import settings
from storefront.core.exceptions import (
    StorefrontError,
    NotFoundError,
    AuthorizationError,
    AuthenticationError,
    HTTP_STATUS_BY_CODE,
)

logger = logging.getLogger(__name__)

SIGN_IN_PATH = "/auth"

# Patterns that indicate internal/sensitive error information
SENSITIVE_PATTERNS = [
    "password",
    "secret",
    "token",
    "credential",
    "sqlalchemy",
    "asyncpg",
    "aiosqlite",
    "postgresql",
    "sqlite",
    "traceback",
    "file \"",
]


def is_sensitive_error(message: str) -> bool:
    """Check if error message contains sensitive information."""
    message_lower = message.lower()
    return any(pattern in message_lower for pattern in SENSITIVE_PATTERNS)


def sanitize_error_message(error: Union[str, Exception]) -> str:
    """
    Sanitize an error message for safe client exposure.

    In DEBUG mode the message is returned untouched.
    """
    message = error if isinstance(error, str) else str(error)

    if settings.DEBUG:
        return message

    if is_sensitive_error(message):
        return "An internal error occurred. Please try again later."

    # Truncate very long messages
    if len(message) > 200:
        return message[:200] + "..."

    return message


def status_for_error(exc: StorefrontError) -> int:
    if exc.code in HTTP_STATUS_BY_CODE:
        return HTTP_STATUS_BY_CODE[exc.code]
    for cls in type(exc).__mro__:
        code = getattr(cls, "default_code", None)
        if code in HTTP_STATUS_BY_CODE:
            return HTTP_STATUS_BY_CODE[code]
    return 400


async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    status_code = status_for_error(exc)
    content = {"success": False, "message": exc.message, "error_code": exc.code}
    if isinstance(exc, (AuthorizationError, AuthenticationError)):
        content["redirect"] = SIGN_IN_PATH
    if isinstance(exc, NotFoundError):
        logger.info(f"Not found: {request.method} {request.url.path} ({exc.message})")
    else:
        logger.warning(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=status_code, content=content)


class ErrorSanitizationMiddleware(BaseHTTPMiddleware):
    """
    Turn unhandled exceptions into a 500 with an opaque reference.

    The traceback goes to the log under the same reference; the client only
    sees the exception text when DEBUG is on.
    """

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except HTTPException:
            raise
        except Exception as e:
            error_ref = uuid.uuid4().hex[:12]
            logger.error(
                f"Unhandled {type(e).__name__} [{error_ref}] on {request.method} {request.url.path}: {e}\n"
                f"{traceback.format_exc()}"
            )
            message = str(e) if settings.DEBUG else "An unexpected error occurred. Please try again later."
            return JSONResponse(
                status_code=500,
                content={
                    "success": False,
                    "message": message,
                    "error_code": "INTERNAL_ERROR",
                    "error_ref": error_ref,
                },
            )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StorefrontError, storefront_error_handler)
    app.add_middleware(ErrorSanitizationMiddleware)
