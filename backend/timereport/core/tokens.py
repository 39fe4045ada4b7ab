"""Access and refresh token issuance and verification.

Both token kinds are HS256 JWTs, signed with independent secrets:
- Access token: 15 minutes, carried on every authenticated request.
- Refresh token: 7 days, only used to rotate a session. Carries a random
  ``jti`` so two tokens minted in the same second for the same user differ.

Verification returns ``None`` for every kind of failure. Callers must not
try to infer why a token was rejected.
"""

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Literal

import jwt

from timereport.core.config import MIN_JWT_SECRET_LENGTH, settings
from timereport.core.errors import TokenConfigurationError

ACCESS_TOKEN_TTL = timedelta(minutes=15)
REFRESH_TOKEN_TTL = timedelta(days=7)

_ALGORITHM = "HS256"
_REQUIRED_CLAIMS = ["sub", "email", "exp", "iat", "iss", "aud", "type"]

TokenType = Literal["access", "refresh"]


@dataclass(frozen=True)
class TokenClaims:
    """Identity carried by a verified token.

    Attributes:
        user_id: Subject of the token.
        email: Email of the user at issue time.
    """

    user_id: uuid.UUID
    email: str


def _secret_for(token_type: TokenType) -> str:
    """Return the signing secret for a token type.

    Raises:
        TokenConfigurationError: If the secret is unset or shorter than
            32 characters.
    """
    if token_type == "access":
        name, secret = "JWT_SECRET", settings.jwt_secret.get_secret_value()
    else:
        name, secret = (
            "JWT_REFRESH_SECRET",
            settings.jwt_refresh_secret.get_secret_value(),
        )
    if len(secret) < MIN_JWT_SECRET_LENGTH:
        msg = f"{name} must be at least {MIN_JWT_SECRET_LENGTH} characters"
        raise TokenConfigurationError(msg)
    return secret


def _encode(claims: TokenClaims, token_type: TokenType, ttl: timedelta) -> str:
    now = datetime.now(UTC)
    payload = {
        "sub": str(claims.user_id),
        "email": claims.email,
        "type": token_type,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": now,
        "exp": now + ttl,
    }
    if token_type == "refresh":
        payload["jti"] = str(uuid.uuid4())
    return jwt.encode(payload, _secret_for(token_type), algorithm=_ALGORITHM)


def _decode(token: str, token_type: TokenType) -> TokenClaims | None:
    secret = _secret_for(token_type)
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[_ALGORITHM],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
            options={"require": _REQUIRED_CLAIMS},
        )
        if payload["type"] != token_type:
            return None
        return TokenClaims(user_id=uuid.UUID(payload["sub"]), email=payload["email"])
    except (jwt.InvalidTokenError, KeyError, TypeError, ValueError):
        return None


def create_access_token(claims: TokenClaims) -> str:
    """Issue a 15-minute access token."""
    return _encode(claims, "access", ACCESS_TOKEN_TTL)


def create_refresh_token(claims: TokenClaims) -> str:
    """Issue a 7-day refresh token with a unique ``jti``."""
    return _encode(claims, "refresh", REFRESH_TOKEN_TTL)


def verify_access_token(token: str) -> TokenClaims | None:
    """Verify an access token.

    Returns:
        Decoded claims, or None if the token is invalid for any reason.

    Raises:
        TokenConfigurationError: If the access secret is misconfigured.
    """
    return _decode(token, "access")


def verify_refresh_token(token: str) -> TokenClaims | None:
    """Verify a refresh token.

    Returns:
        Decoded claims, or None if the token is invalid for any reason.

    Raises:
        TokenConfigurationError: If the refresh secret is misconfigured.
    """
    return _decode(token, "refresh")


def refresh_token_expiry(now: datetime | None = None) -> datetime:
    """Server-side session expiry for a refresh token issued at ``now``."""
    return (now or datetime.now(UTC)) + REFRESH_TOKEN_TTL
