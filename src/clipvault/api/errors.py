"""Exception handlers rendering the JSON failure envelope."""

from __future__ import annotations

from typing import Mapping

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..exceptions import (
    AppError,
    ConfigurationError,
    DatabaseConnectionError,
    NotFound,
    ServerError,
    Unauthorized,
    ValidationError,
)

logger = structlog.get_logger(__name__)

STATUS_BY_ERROR: Mapping[type[AppError], int] = {
    Unauthorized: status.HTTP_401_UNAUTHORIZED,
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFound: status.HTTP_404_NOT_FOUND,
    ConfigurationError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    DatabaseConnectionError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ServerError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def error_body(kind: str, message: str) -> dict[str, object]:
    return {"success": False, "error": {"kind": kind, "message": message}}


def status_for(exc: AppError) -> int:
    for error_type in type(exc).__mro__:
        code = STATUS_BY_ERROR.get(error_type)  # type: ignore[arg-type]
        if code is not None:
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Convert :class:`AppError` exceptions into the failure envelope."""

    code = status_for(exc)
    if code >= 500:
        logger.error(
            "api.request.failed",
            path=request.url.path,
            kind=exc.kind,
            message=exc.message,
        )
    return JSONResponse(status_code=code, content=error_body(exc.kind, exc.message))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies share the validation envelope."""

    logger.warning("api.request.invalid", path=request.url.path, errors=len(exc.errors()))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(ValidationError.kind, "Malformed request body"),
    )


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("api.request.unhandled", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(ServerError.kind, "Something went wrong"),
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unexpected_error_handler)


__all__ = [
    "app_error_handler",
    "error_body",
    "install_error_handlers",
    "status_for",
    "unexpected_error_handler",
]
