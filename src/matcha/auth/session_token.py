"""
HS256 session token handling.

Tokens are issued by the main application at login; this service only needs
to decode them. ``create_session_token`` mirrors the issuer's claims so that
tooling and tests can mint tokens the gate accepts.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from matcha.config import get_settings

TOKEN_TYPE = "session"


def create_session_token(user_id: int, expires_delta: timedelta | None = None) -> str:
    """
    Create a signed session token.

    Args:
        user_id: The user's database ID.
        expires_delta: Lifetime override; defaults to the configured number of days.

    Returns:
        Encoded JWT string.
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(days=settings.session_token_expire_days)
    payload: dict[str, Any] = {
        "user_id": user_id,
        "iat": now,
        "exp": now + expires_delta,
        "type": TOKEN_TYPE,
    }
    return jwt.encode(payload, settings.session_secret, algorithm=settings.session_algorithm)


def decode_session_token(token: str) -> dict[str, Any]:
    """
    Verify and decode a session token.

    Raises:
        jwt.InvalidTokenError: If the token is invalid, expired, or not a session token.
    """
    settings = get_settings()
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.session_secret,
            algorithms=[settings.session_algorithm],
        )
    except jwt.ExpiredSignatureError:
        msg = "Token has expired"
        raise jwt.InvalidTokenError(msg) from None

    # Tokens from the login endpoint may omit the claim; only a different type is refused
    if payload.get("type", TOKEN_TYPE) != TOKEN_TYPE:
        msg = f"Expected token type '{TOKEN_TYPE}', got '{payload.get('type')}'"
        raise jwt.InvalidTokenError(msg)
    if not isinstance(payload.get("user_id"), int):
        msg = "Token is missing user_id"
        raise jwt.InvalidTokenError(msg)

    return payload
