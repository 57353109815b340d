"""Access token issue/verify. The ``sub`` claim is the user identity."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from evania.config import get_settings


def create_access_token(user_id: str) -> str:
    settings = get_settings()
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": user_id,
        "iat": now,
        "exp": now + timedelta(days=settings.jwt_expire_days),
        "type": "access",
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> dict[str, Any]:
    """Decode and validate a token.

    Raises:
        jwt.InvalidTokenError: bad signature, expired, or missing ``sub``.
    """
    settings = get_settings()
    payload = jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=[settings.jwt_algorithm],
        options={"require": ["exp", "sub"]},
    )
    if payload.get("type") != "access":
        msg = "Not an access token"
        raise jwt.InvalidTokenError(msg)
    return payload
