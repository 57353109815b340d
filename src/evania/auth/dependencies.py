"""Identity resolution for API requests."""

from __future__ import annotations

import jwt
from fastapi import Depends, Header, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from evania.auth.jwt import verify_token
from evania.config import get_settings
from evania.database import get_session
from evania.db.models import User
from evania.errors import UnauthorizedError
from evania.users.service import get_or_create_user

_bearer = HTTPBearer(auto_error=False)


def resolve_identity(
    credentials: HTTPAuthorizationCredentials | None,
    header_user_id: str | None,
) -> str:
    """Bearer token subject, else the X-User-Id header, else the demo identity.

    The header and demo fallbacks only apply when ``dev_identity_fallback`` is on.
    An invalid bearer token is always rejected.
    """
    if credentials is not None:
        try:
            payload = verify_token(credentials.credentials)
        except jwt.InvalidTokenError as e:
            raise UnauthorizedError(str(e)) from e
        return str(payload["sub"])

    settings = get_settings()
    if settings.dev_identity_fallback:
        if header_user_id and header_user_id.strip():
            return header_user_id.strip()
        return settings.demo_user_id

    msg = "Not authenticated"
    raise UnauthorizedError(msg)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    x_user_id: str | None = Header(None, max_length=64),
    db: AsyncSession = Depends(get_session),
) -> User:
    """Resolve the caller and return their user row, creating it on first contact."""
    user_id = resolve_identity(credentials, x_user_id)
    user, _ = await get_or_create_user(db, user_id)
    if db.in_transaction():
        await db.commit()
    return user
