"""
Classified error taxonomy.

Every failure that crosses a layer boundary is a ServiceError carrying an
ErrorKind. Repositories classify datastore failures, use-cases classify
validation and authorization failures, and the HTTP layer only maps the kind
to a status code. Nothing downstream inspects message text.

    INVALID_ARGUMENT      -> 400
    UNAUTHENTICATED       -> 401
    FORBIDDEN             -> 403
    NOT_FOUND             -> 404
    CONSTRAINT_VIOLATION  -> 409
    UNAVAILABLE           -> 500
    AUTHZ_UNAVAILABLE     -> 503
"""

import logging
from enum import Enum
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .responses import ErrorCodes, error_response


logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    CONSTRAINT_VIOLATION = "CONSTRAINT_VIOLATION"
    AUTHZ_UNAVAILABLE = "AUTHZ_UNAVAILABLE"
    UNAVAILABLE = "UNAVAILABLE"


STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.INVALID_ARGUMENT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONSTRAINT_VIOLATION: status.HTTP_409_CONFLICT,
    ErrorKind.UNAVAILABLE: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.AUTHZ_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}

CODE_BY_KIND: dict[ErrorKind, str] = {
    ErrorKind.INVALID_ARGUMENT: ErrorCodes.VALIDATION_ERROR,
    ErrorKind.UNAUTHENTICATED: ErrorCodes.AUTHENTICATION_REQUIRED,
    ErrorKind.FORBIDDEN: ErrorCodes.AUTHORIZATION_DENIED,
    ErrorKind.NOT_FOUND: ErrorCodes.NOT_FOUND,
    ErrorKind.CONSTRAINT_VIOLATION: ErrorCodes.CONFLICT,
    ErrorKind.UNAVAILABLE: ErrorCodes.DATABASE_ERROR,
    ErrorKind.AUTHZ_UNAVAILABLE: ErrorCodes.AUTHORIZATION_UNAVAILABLE,
}


class ServiceError(Exception):
    """Base for all classified failures."""

    kind: ErrorKind = ErrorKind.UNAVAILABLE
    code: Optional[str] = None

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        self.message = message
        self.details = details
        super().__init__(message)

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]

    @property
    def error_code(self) -> str:
        return self.code or CODE_BY_KIND[self.kind]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value}, message={self.message!r})"


class InvalidArgument(ServiceError):
    kind = ErrorKind.INVALID_ARGUMENT


class NotFound(ServiceError):
    kind = ErrorKind.NOT_FOUND


class Forbidden(ServiceError):
    kind = ErrorKind.FORBIDDEN


class Unauthenticated(ServiceError):
    kind = ErrorKind.UNAUTHENTICATED


class InvalidToken(Unauthenticated):
    code = ErrorCodes.INVALID_TOKEN


class ConstraintViolation(ServiceError):
    kind = ErrorKind.CONSTRAINT_VIOLATION


class AuthzUnavailable(ServiceError):
    kind = ErrorKind.AUTHZ_UNAVAILABLE


class Unavailable(ServiceError):
    kind = ErrorKind.UNAVAILABLE


# ============================================================================
# HTTP MAPPING
# ============================================================================

async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.kind is ErrorKind.UNAVAILABLE:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}", exc_info=exc)
    elif exc.kind is ErrorKind.AUTHZ_UNAVAILABLE:
        logger.error(f"{request.method} {request.url.path} could not verify ownership: {exc.message}")
    else:
        logger.debug(f"{request.method} {request.url.path} -> {exc.kind.value}: {exc.message}")

    headers = None
    if exc.kind is ErrorKind.UNAUTHENTICATED:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(exc.error_code, exc.message, exc.details),
        headers=headers,
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    logger.debug(f"{request.method} {request.url.path} rejected invalid input: {errors}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_response(ErrorCodes.VALIDATION_ERROR, "invalid input", {"errors": errors}),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response(ErrorCodes.INTERNAL_ERROR, "internal server error"),
    )


def install_exception_handlers(app: FastAPI) -> None:
    """Register the error-kind to HTTP status mapping on an application."""
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
