"""
Bearer tokens for the identity boundary.

The identity provider's subject (``sub``) is the only thing the library
needs: every track, favorite and play event is keyed by it.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt

from serenity.core.config import settings
from serenity.core.errors import AuthenticationError


def create_access_token(user_id: str, expires_hours: int | None = None) -> str:
    """
    Sign a token for ``user_id``.

    Args:
        user_id: Subject the token identifies
        expires_hours: Validity, defaults to ACCESS_TOKEN_EXPIRE_HOURS

    Returns:
        Signed JWT string
    """
    if not user_id:
        raise AuthenticationError("Cannot issue a token without a user id")
    now = datetime.now(timezone.utc)
    hours = expires_hours or settings.ACCESS_TOKEN_EXPIRE_HOURS
    payload = {
        "type": "access",
        "sub": user_id,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(hours=hours)).timestamp()),
    }
    return jwt.encode(
        payload,
        settings.ACCESS_TOKEN_SECRET,
        algorithm=settings.ACCESS_TOKEN_ALGORITHM,
    )


def decode_access_token(token: str) -> str:
    """
    Validate ``token`` and return its subject.

    Raises:
        AuthenticationError: If the token is expired, forged or has no subject
    """
    try:
        payload = jwt.decode(
            token,
            settings.ACCESS_TOKEN_SECRET,
            algorithms=[settings.ACCESS_TOKEN_ALGORITHM],
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Access token has expired")
    except jwt.InvalidTokenError as e:
        raise AuthenticationError(f"Invalid access token: {e}")

    if payload.get("type") != "access":
        raise AuthenticationError("Invalid token type")
    sub = payload.get("sub")
    if not isinstance(sub, str) or not sub:
        raise AuthenticationError("Token has no subject")
    return sub
