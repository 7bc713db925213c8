"""
Standardized API Response Module

Success bodies are the resource itself (customer, shop, product, or a list of
them). Failures share one envelope so clients can branch on a stable code:

    {
        "error": {
            "code": "ERROR_CODE",
            "message": "Human-readable message",
            "details": {...}  # Optional extra context
        },
        "status": "error"
    }

ERROR CODES:
    - AUTHENTICATION_REQUIRED: No valid auth credentials provided
    - INVALID_TOKEN: Bearer token failed signature/expiry checks
    - AUTHORIZATION_DENIED: Subject doesn't own the resource or lacks the role
    - AUTHORIZATION_UNAVAILABLE: Ownership could not be verified right now
    - NOT_FOUND: Resource not found
    - VALIDATION_ERROR: Request data failed validation
    - CONFLICT: Uniqueness or concurrent-modification conflict
    - DATABASE_ERROR / INTERNAL_ERROR: Server-side error
"""

from typing import Any, Optional

from pydantic import BaseModel


class ErrorDetail(BaseModel):
    """Structured error information."""
    code: str
    message: str
    details: Optional[dict[str, Any]] = None


class ErrorResponse(BaseModel):
    """Error envelope, used for OpenAPI documentation of failure responses."""
    error: ErrorDetail
    status: str = "error"


class ErrorCodes:
    """Standard error codes for API responses."""

    # Authentication errors (401)
    AUTHENTICATION_REQUIRED = "AUTHENTICATION_REQUIRED"
    INVALID_TOKEN = "INVALID_TOKEN"

    # Authorization errors (403 / 503)
    AUTHORIZATION_DENIED = "AUTHORIZATION_DENIED"
    AUTHORIZATION_UNAVAILABLE = "AUTHORIZATION_UNAVAILABLE"

    # Not found errors (404)
    NOT_FOUND = "NOT_FOUND"

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Conflict errors (409)
    CONFLICT = "CONFLICT"

    # Server errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"


def error_response(
    code: str,
    message: str,
    details: Optional[dict] = None,
) -> dict:
    """
    Create a standardized error response dict.
    """
    response = {
        "error": {
            "code": code,
            "message": message,
        },
        "status": "error",
    }
    if details:
        response["error"]["details"] = details
    return response


ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Invalid input"},
    401: {"model": ErrorResponse, "description": "Missing or invalid bearer token"},
    403: {"model": ErrorResponse, "description": "Not allowed for this subject"},
    404: {"model": ErrorResponse, "description": "Resource not found"},
}
