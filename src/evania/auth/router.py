"""Authentication endpoints under /api/auth."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from evania.auth.jwt import create_access_token
from evania.auth.schemas import LoginRequest, RegisterRequest, TokenResponse
from evania.auth.service import authenticate_email_user, register_email_user
from evania.database import get_session

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post("/register", response_model=TokenResponse)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_session),
) -> TokenResponse:
    """Register with email + password. 409 when the email is taken."""
    user = await register_email_user(db, email=body.email, password=body.password)
    return TokenResponse(access_token=create_access_token(user.id), user_id=user.id)


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_session),
) -> TokenResponse:
    """Login with email + password."""
    user = await authenticate_email_user(db, body.email, body.password)
    return TokenResponse(access_token=create_access_token(user.id), user_id=user.id)
