"""
Application exceptions and the global exception handlers for the FastAPI application.
Serializes exceptions into structured logs and a uniform error envelope.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
from typing import Any

from phonebook.core.config import settings


logger = logging.getLogger(__name__)


class AppException(Exception):
    """Base application exception."""
    def __init__(self, message: str, status_code: int = 500, details: Any = None):
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class NotFoundError(AppException):
    """A requested resource has no active row."""
    def __init__(self, message: str = "Resource not found", details: Any = None):
        super().__init__(message, status_code=status.HTTP_404_NOT_FOUND, details=details)


class ContactNotFoundError(NotFoundError):
    """The contact is missing or was soft-deleted; the two cases are not distinguished."""
    def __init__(self, contact_id: int):
        self.contact_id = contact_id
        super().__init__("Contact not found", details={"contact_id": contact_id})


class ConflictError(AppException):
    """A write would violate a uniqueness rule."""
    def __init__(self, message: str = "Conflicting data", details: Any = None):
        super().__init__(message, status_code=status.HTTP_409_CONFLICT, details=details)


class EmailAlreadyInUseError(ConflictError):
    """Another active contact already holds the email."""
    def __init__(self, email: str):
        self.email = email
        super().__init__("Email is already in use by another contact", details={"email": email})


def _error_response(status_code: int, message: str, path: str, details: Any = None) -> JSONResponse:
    content = {"message": message, "path": path}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content={"error": content})


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handle custom application exceptions."""
    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        f"Application exception: {exc.message}",
        extra={
            "status_code": exc.status_code,
            "path": request.url.path,
            "details": exc.details,
        },
    )

    return _error_response(exc.status_code, exc.message, request.url.path, exc.details)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTP exceptions."""
    logger.warning(
        f"HTTP exception: {exc.detail}",
        extra={
            "status_code": exc.status_code,
            "path": request.url.path,
        },
    )

    return _error_response(exc.status_code, exc.detail, request.url.path)


def _serialize_validation_errors(errors: list) -> list:
    """Flatten validation errors into JSON-serializable {field, message} pairs."""
    serialized = []
    for error in errors:
        loc = list(error.get("loc", ()))
        # Drop the request part ("body", "query", "path") from the location
        if loc and loc[0] in ("body", "query", "path"):
            loc = loc[1:]
        serialized.append({
            "field": ".".join(str(part) for part in loc),
            "message": str(error.get("msg", "")),
        })
    return serialized


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request validation errors."""
    serialized_errors = _serialize_validation_errors(exc.errors())

    logger.warning(
        f"Validation error: {serialized_errors}",
        extra={
            "path": request.url.path,
            "errors": serialized_errors,
        },
    )

    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        "Invalid data",
        request.url.path,
        serialized_errors,
    )


async def storage_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Handle storage failures surfaced unchanged by the repositories."""
    if isinstance(exc, IntegrityError):
        logger.warning(
            "Storage constraint violated",
            extra={"path": request.url.path, "exception_type": type(exc).__name__},
        )
        return _error_response(
            status.HTTP_409_CONFLICT,
            "Conflicting data",
            request.url.path,
        )

    logger.error(
        f"Storage failure: {exc}",
        extra={"path": request.url.path, "exception_type": type(exc).__name__},
        exc_info=exc,
    )
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Database operation failed",
        request.url.path,
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception(
        f"Unhandled exception: {str(exc)}",
        extra={
            "path": request.url.path,
            "exception_type": type(exc).__name__,
        },
    )

    message = "Internal server error"
    if settings.ENVIRONMENT != "production":
        message = f"{message}: {exc}"

    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, message, request.url.path)


def setup_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, storage_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
