"""Exception handlers that render errors as ErrorResponse bodies."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from account_service.core.config import settings
from account_service.core.exceptions import AppError, ValidationError
from account_service.core.logging import get_logger
from account_service.schemas.base import ErrorResponse

logger = get_logger(__name__)


def _render(
    status_code: int,
    error: str,
    message: str,
    details: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body = ErrorResponse(error=error, message=message, details=details)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json"),
        headers=headers,
    )


def _field_errors(exc: RequestValidationError) -> list[dict[str, str]]:
    errors = []
    for err in exc.errors():
        # Drop the "body"/"query"/"path" prefix from the location
        loc = [str(part) for part in err.get("loc", ())[1:]] or [
            str(part) for part in err.get("loc", ())
        ]
        errors.append({"field": ".".join(loc), "message": str(err.get("msg", ""))})
    return errors


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render an AppError with its own status code."""
    logger.info(
        f"{exc.error}: {exc.message}",
        extra={
            "context": {
                "action": "request_error",
                "path": request.url.path,
                "status_code": exc.status_code,
                "error": exc.error,
            }
        },
    )
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return _render(exc.status_code, exc.error, exc.message, exc.details, headers)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed request input as a 400 ValidationError."""
    errors = _field_errors(exc)
    logger.info(
        "Request validation failed",
        extra={
            "context": {
                "action": "request_error",
                "path": request.url.path,
                "status_code": status.HTTP_400_BAD_REQUEST,
                "fields": [e["field"] for e in errors],
            }
        },
    )
    return _render(
        ValidationError.status_code,
        ValidationError.error,
        errors[0]["message"] if errors else ValidationError.default_message,
        {"errors": errors},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected failures with traceback and hide details outside DEBUG."""
    logger.error(
        "Unhandled exception",
        exc_info=exc,
        extra={
            "context": {
                "action": "request_error",
                "path": request.url.path,
                "error_type": type(exc).__name__,
            }
        },
    )
    message = str(exc) if settings.DEBUG else "Internal server error"
    return _render(status.HTTP_500_INTERNAL_SERVER_ERROR, "InternalError", message)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the error handlers to an application."""
    app.add_exception_handler(AppError, app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_error_handler)


__all__ = [
    "app_error_handler",
    "register_exception_handlers",
    "request_validation_handler",
    "unhandled_error_handler",
]
