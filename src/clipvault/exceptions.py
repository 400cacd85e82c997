"""Domain level exceptions shared by the service and the upload client."""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

from sqlalchemy import exc as sa_exc

__all__ = [
    "AppError",
    "Unauthorized",
    "ValidationError",
    "NotFound",
    "ConfigurationError",
    "DatabaseConnectionError",
    "ServerError",
    "UploadInProgressError",
    "handle_sqlalchemy_errors",
]


class AppError(Exception):
    """Base class for application specific errors.

    Every subclass exposes a stable ``kind`` used by the HTTP envelope and by
    the upload client when mapping responses back into exceptions.
    """

    kind: str = "server_error"
    default_message = "Something went wrong"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthorized(AppError):
    """Raised when the identity token is missing, invalid or expired."""

    kind = "unauthorized"
    default_message = "Unauthorized"


class ValidationError(AppError):
    """Raised for malformed or incomplete input."""

    kind = "validation_error"
    default_message = "Invalid request"


class NotFound(AppError):
    """Raised when a record (or any record at all) could not be located."""

    kind = "not_found"
    default_message = "Not found"


class ConfigurationError(AppError):
    """Raised when mandatory configuration is absent. Never retried."""

    kind = "connection_error"
    default_message = "Persistence store is not configured"


class DatabaseConnectionError(AppError):
    """Raised when the persistence store cannot be reached."""

    kind = "connection_error"
    default_message = "Database connection failed"


class ServerError(AppError):
    """Raised for unexpected failures, including signing failures."""

    kind = "server_error"


class UploadInProgressError(AppError):
    """Raised when an orchestrator already has an upload in flight."""

    kind = "validation_error"
    default_message = "An upload is already in progress"


@dataclass(slots=True)
class _EntityContext:
    """Internal helper describing the entity for error messages."""

    entity: str | None = None

    def format(self, message: str) -> str:
        if self.entity:
            return f"{self.entity}: {message}"
        return message


def _translate_sqlalchemy_error(exc: Exception, *, context: _EntityContext) -> AppError:
    if isinstance(exc, (sa_exc.OperationalError, sa_exc.InterfaceError)):
        return DatabaseConnectionError(context.format("database unreachable"))
    if isinstance(exc, sa_exc.IntegrityError):
        return ServerError(context.format("integrity constraint violated"))
    return ServerError(context.format("database operation failed"))


@asynccontextmanager
async def handle_sqlalchemy_errors(*, entity: str | None = None) -> AsyncIterator[None]:
    """Translate SQLAlchemy errors into domain specific ones."""

    context = _EntityContext(entity)
    try:
        yield
    except sa_exc.SQLAlchemyError as exc:
        raise _translate_sqlalchemy_error(exc, context=context) from exc
