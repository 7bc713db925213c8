"""
Core module - configuration, database, request context, errors and response formatting.
"""
from .config import get_settings
from .db import get_session, init_models, Base, engine, AsyncSessionLocal
from .errors import (
    ErrorKind,
    ServiceError,
    InvalidArgument,
    NotFound,
    Forbidden,
    Unauthenticated,
    InvalidToken,
    ConstraintViolation,
    AuthzUnavailable,
    Unavailable,
    install_exception_handlers,
)
from .request_context import (
    RequestContext,
    resolve_request_context,
    require_role,
    get_request_context,
)
from .responses import (
    ErrorDetail,
    ErrorCodes,
    error_response,
)

__all__ = [
    # Config
    "get_settings",
    # Database
    "get_session",
    "init_models",
    "Base",
    "engine",
    "AsyncSessionLocal",
    # Errors
    "ErrorKind",
    "ServiceError",
    "InvalidArgument",
    "NotFound",
    "Forbidden",
    "Unauthenticated",
    "InvalidToken",
    "ConstraintViolation",
    "AuthzUnavailable",
    "Unavailable",
    "install_exception_handlers",
    # Request Context
    "RequestContext",
    "resolve_request_context",
    "require_role",
    "get_request_context",
    # Responses
    "ErrorDetail",
    "ErrorCodes",
    "error_response",
]
