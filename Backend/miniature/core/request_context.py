"""
Request Context Resolution Module

This module is the single place where a request's identity is established.
Routers depend on get_request_context and never read the Authorization
header themselves.

AUTH METHOD:
    - Bearer token issued by miniature.token.TokenIssuer
    - The token carries the subject (customer id) and its role
    - Ownership is NOT decided here; use-cases check it against the store
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, TYPE_CHECKING

from fastapi import Depends, Request

from .errors import Forbidden, Unauthenticated

if TYPE_CHECKING:
    from ..token import TokenIssuer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequestContext:
    """
    Resolved identity of the subject making the request.
    """
    user_id: str
    role: str
    auth_method: str = "jwt"

    # Request metadata
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


def _bearer_token(request: Request) -> str:
    auth_header = request.headers.get("Authorization", "")
    if not auth_header:
        logger.warning("Authentication failed: Missing Authorization header")
        raise Unauthenticated("authentication required")

    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        logger.warning(f"Authentication failed: Invalid Authorization header format: {auth_header[:20]}...")
        raise Unauthenticated("invalid Authorization header format, expected: Bearer <token>")
    return parts[1]


def resolve_request_context(request: Request, issuer: "TokenIssuer") -> RequestContext:
    """
    Resolve the identity from a request's bearer token.

    Raises:
        Unauthenticated: header missing or malformed
        InvalidToken: signature, expiry or claims check failed
    """
    claims = issuer.validate(_bearer_token(request))
    logger.debug(f"Auth via JWT: {claims.subject_id} ({claims.role})")
    return RequestContext(
        user_id=claims.subject_id,
        role=claims.role,
        auth_method="jwt",
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("User-Agent"),
    )


def require_role(ctx: RequestContext, allowed_roles: Iterable[str]) -> str:
    """
    Require the subject's role to be one of allowed_roles (case-insensitive).

    Returns:
        The subject's normalized role

    Raises:
        Forbidden: role not allowed
    """
    allowed = [role.upper() for role in allowed_roles]
    role = (ctx.role or "").upper()
    if role not in allowed:
        logger.warning(
            f"Authorization failed: User {ctx.user_id} has role {ctx.role}, needs one of {allowed}"
        )
        raise Forbidden(
            f"access denied, required role: {', '.join(allowed)}",
            details={"role": ctx.role},
        )
    return role


def _issuer_dependency():
    # Resolved lazily so the token module can import core without a cycle
    from ..token import get_token_issuer

    return get_token_issuer()


async def get_request_context(
    request: Request,
    issuer=Depends(_issuer_dependency),
) -> RequestContext:
    """
    FastAPI dependency for getting the authenticated request context.

        @router.get("/something")
        async def handler(ctx: RequestContext = Depends(get_request_context)):
            # ctx.user_id is the authenticated subject
            pass
    """
    return resolve_request_context(request, issuer)
