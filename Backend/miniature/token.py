"""
Token Issuer/Validator

Issues and verifies the bearer credential shared by the customer, shop and
product routers. Tokens are HS256 JWTs signed with a symmetric secret:

    {
        "sub": "<customer uuid>",
        "role": "SELLER",
        "iat": 1718000000,
        "exp": 1718086400
    }

Expiry is the only invalidation mechanism; there is no revocation list.
The secret and TTL arrive as an immutable TokenConfig built once at startup.

Usage:
    issuer = TokenIssuer(TokenConfig(secret="s3cret", ttl=timedelta(hours=24)))
    token = issuer.issue(str(customer.id), customer.role)
    claims = issuer.validate(token)  # raises InvalidToken
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

import jwt

from .core.config import get_settings
from .core.errors import InvalidToken

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenConfig:
    secret: str
    ttl: timedelta
    algorithm: str = "HS256"

    def __post_init__(self):
        if not self.secret:
            raise ValueError("token secret must not be empty")
        if self.ttl <= timedelta(0):
            raise ValueError(f"token ttl must be positive, got {self.ttl}")


@dataclass(frozen=True)
class TokenClaims:
    """Verified contents of a bearer token."""
    subject_id: str
    role: str
    issued_at: datetime
    expires_at: datetime


class TokenIssuer:
    def __init__(self, config: TokenConfig):
        self.config = config

    def issue(self, subject_id: str, role: str, now: Optional[datetime] = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "sub": subject_id,
            "role": role,
            "iat": issued_at,
            "exp": issued_at + self.config.ttl,
        }
        return jwt.encode(payload, self.config.secret, algorithm=self.config.algorithm)

    def validate(self, token: str) -> TokenClaims:
        """
        Verify signature and expiry and return the decoded claims.

        Raises:
            InvalidToken: signature mismatch, malformed token, missing claims,
                or an expiry in the past.
        """
        try:
            decoded = jwt.decode(
                token,
                self.config.secret,
                algorithms=[self.config.algorithm],
                options={"require": ["sub", "exp", "iat"]},
            )
        except jwt.ExpiredSignatureError as e:
            logger.warning("Token verification failed: Token has expired")
            raise InvalidToken("token has expired") from e
        except jwt.InvalidTokenError as e:
            logger.warning(f"Token verification failed: {e}")
            raise InvalidToken("invalid token") from e

        subject_id = decoded.get("sub")
        role = decoded.get("role")
        if not subject_id or not isinstance(role, str):
            logger.warning("Token verified but missing subject or role claim")
            raise InvalidToken("invalid token claims")

        return TokenClaims(
            subject_id=subject_id,
            role=role,
            issued_at=datetime.fromtimestamp(decoded["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(decoded["exp"], tz=timezone.utc),
        )


@lru_cache(maxsize=1)
def get_token_issuer() -> TokenIssuer:
    """Process-wide issuer built from settings; also a FastAPI dependency."""
    settings = get_settings()
    if settings.uses_dev_secret:
        logger.warning("⚠️ JWT_SECRET not set, signing tokens with the development secret")
    return TokenIssuer(
        TokenConfig(
            secret=settings.jwt_secret,
            ttl=settings.token_ttl,
            algorithm=settings.jwt_algorithm,
        )
    )
