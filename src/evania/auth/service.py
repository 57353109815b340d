"""Email/password registration and login."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

import structlog
from sqlalchemy.exc import IntegrityError

from evania.auth.password import hash_password, needs_rehash, verify_password
from evania.config import get_settings
from evania.db.models import User
from evania.errors import ConflictError, InvalidInputError, UnauthorizedError
from evania.users.service import get_user_by_email, upsert_user

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


async def register_email_user(db: AsyncSession, email: str, password: str) -> User:
    """Create a user with email + password.

    Raises:
        InvalidInputError: password shorter than the configured minimum.
        ConflictError: email already registered.
    """
    settings = get_settings()
    if len(password) < settings.password_min_length:
        msg = f"Password must be at least {settings.password_min_length} characters"
        raise InvalidInputError(msg)

    email = email.lower().strip()
    if await get_user_by_email(db, email) is not None:
        msg = "Email already registered"
        raise ConflictError(msg)

    user_id = str(uuid.uuid4())
    try:
        user = await upsert_user(db, user_id, {"email": email, "password_hash": hash_password(password)})
        await db.commit()
    except IntegrityError as exc:
        # Lost a race with a concurrent registration of the same email.
        await db.rollback()
        msg = "Email already registered"
        raise ConflictError(msg) from exc

    logger.info("user_registered", user_id=user_id)
    return user


async def authenticate_email_user(db: AsyncSession, email: str, password: str) -> User:
    """Raises UnauthorizedError on unknown email or wrong password."""
    user = await get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("login_failed", email_known=user is not None)
        msg = "Invalid email or password"
        raise UnauthorizedError(msg)

    if needs_rehash(user.password_hash):
        user.password_hash = hash_password(password)
        await db.commit()
        logger.info("password_rehashed", user_id=user.id)
    return user
