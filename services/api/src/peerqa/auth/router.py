"""Authentication endpoints — /api/v1/auth/*."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from peerqa.auth.jwt import create_access_token
from peerqa.auth.schemas import LoginRequest, RegisterRequest, TokenResponse
from peerqa.auth.service import authenticate, register_user
from peerqa.database import get_session

router = APIRouter(prefix="/api/v1/auth", tags=["Auth"])


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_session)) -> TokenResponse:
    """Register a new user and return an access token."""
    user = await register_user(
        db,
        name=body.name,
        email=body.email,
        username=body.username,
        password=body.password,
        user_role=body.user_role,
        avatar_url=body.avatar_url,
    )
    return TokenResponse(access_token=create_access_token(user.id, user.username), user_id=user.id)


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_session)) -> TokenResponse:
    user = await authenticate(db, body.email, body.password)
    return TokenResponse(access_token=create_access_token(user.id, user.username), user_id=user.id)
