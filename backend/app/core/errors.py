"""
Error taxonomy and the terminal exception handlers.

Every error raised on the request path ends up as the same JSON envelope:
{error: true, message, timestamp, path, method, stack?}
"""

import logging
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base error carrying the HTTP status to emit."""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None, is_operational: bool = True):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.is_operational = is_operational


class ValidationError(AppError):
    status_code = 400


class UnauthorizedError(AppError):
    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class UpstreamTimeoutError(AppError):
    status_code = 408


class RateLimitedError(AppError):
    status_code = 429


class InternalError(AppError):
    status_code = 500
    default_message = "Internal Server Error"

    def __init__(self, message: str = default_message):
        super().__init__(message, is_operational=False)


class BadGatewayError(AppError):
    status_code = 502


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def error_envelope(request: Request, message: str, exc: Optional[BaseException] = None,
                   **extra: Any) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "error": True,
        "message": message,
        "timestamp": utc_now_iso(),
        "path": request.url.path,
        "method": request.method,
    }
    body.update(extra)
    if exc is not None and not settings.is_production:
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return body


def public_message(exc: AppError) -> str:
    """Non-operational errors are programming faults; their text stays in the logs in production."""
    if exc.is_operational or not settings.is_production:
        return exc.message
    return InternalError.default_message


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"Error {exc.status_code}: {exc.message}")
    else:
        logger.warning(f"Error {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=error_envelope(request, public_message(exc), exc))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg")}
        for err in exc.errors()
    ]
    logger.warning(f"Error 400: invalid request parameters for {request.url.path}")
    return JSONResponse(
        status_code=400,
        content=error_envelope(request, "Validation Error", details=details),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        message = f"Route {request.url.path} not found"
    else:
        message = str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(request, message),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    error = InternalError(str(exc) or InternalError.default_message)
    return JSONResponse(status_code=error.status_code, content=error_envelope(request, public_message(error), exc))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
