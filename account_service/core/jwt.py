"""JWT token creation and validation utilities.

This module issues and verifies the two kinds of bearer tokens used by the
service. Uses python-jose for JWT operations.

- Access tokens: short-lived, signed with JWT_SECRET
- Refresh tokens: long-lived, signed with REFRESH_TOKEN_SECRET

Every token carries ``sub`` (user id), ``type`` (token kind), ``iat``,
``exp`` and a unique ``jti``. The ``jti`` guarantees that two tokens issued
for the same user in the same second still differ, which refresh-token
rotation depends on.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any

from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError

from account_service.core.config import settings
from account_service.core.exceptions import InvalidTokenError


class TokenKind(str, Enum):
    """Bearer token kinds."""

    ACCESS = "access"
    REFRESH = "refresh"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class TokenPayload:
    """Verified claims of a decoded token."""

    user_id: str
    kind: TokenKind
    expires_at: datetime
    jti: str


def _secret_for(kind: TokenKind) -> str:
    if kind is TokenKind.REFRESH:
        return settings.REFRESH_TOKEN_SECRET
    return settings.JWT_SECRET


def _default_lifetime(kind: TokenKind) -> timedelta:
    if kind is TokenKind.REFRESH:
        return timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    return timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)


def create_token(
    subject: str | Any,
    kind: TokenKind,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed JWT of the given kind.

    Args:
        subject: Subject of the token (the user ID)
        kind: Access or refresh
        expires_delta: Optional custom lifetime; defaults to the configured
            lifetime for ``kind``

    Returns:
        Encoded JWT token string
    """
    now = datetime.now(UTC)
    expire = now + (expires_delta if expires_delta is not None else _default_lifetime(kind))

    to_encode = {
        "sub": str(subject),
        "type": kind.value,
        "iat": now,
        "exp": expire,
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(to_encode, _secret_for(kind), algorithm=settings.JWT_ALGORITHM)


def create_access_token(subject: str | Any, expires_delta: timedelta | None = None) -> str:
    """Create a short-lived access token.

    Examples:
        >>> token = create_access_token("user-123")
        >>> decode_token(token, TokenKind.ACCESS).user_id
        'user-123'
    """
    return create_token(subject, TokenKind.ACCESS, expires_delta)


def create_refresh_token(subject: str | Any, expires_delta: timedelta | None = None) -> str:
    """Create a long-lived refresh token."""
    return create_token(subject, TokenKind.REFRESH, expires_delta)


def decode_token(token: str, expected_kind: TokenKind) -> TokenPayload:
    """Decode and validate a JWT of the expected kind.

    Args:
        token: JWT token string to decode
        expected_kind: Kind the caller requires

    Returns:
        Verified token payload

    Raises:
        InvalidTokenError: On expiry, bad signature, malformed structure,
            wrong kind or missing subject
    """
    if not token:
        raise InvalidTokenError("Token is missing")

    try:
        claims = jwt.decode(
            token,
            _secret_for(expected_kind),
            algorithms=[settings.JWT_ALGORITHM],
        )
    except ExpiredSignatureError as e:
        raise InvalidTokenError("Token has expired") from e
    except JWTError as e:
        raise InvalidTokenError() from e

    if claims.get("type") != expected_kind.value:
        raise InvalidTokenError()

    subject = claims.get("sub")
    if not subject:
        raise InvalidTokenError()

    return TokenPayload(
        user_id=str(subject),
        kind=expected_kind,
        expires_at=datetime.fromtimestamp(claims["exp"], tz=UTC),
        jti=str(claims.get("jti", "")),
    )


__all__ = [
    "TokenKind",
    "TokenPayload",
    "create_access_token",
    "create_refresh_token",
    "create_token",
    "decode_token",
]
