"""
Authentication business logic.

Registration and credential checks. Token verification lives in
``peerqa.auth.dependencies``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError

from peerqa.auth.password import (
    PasswordStrengthError,
    hash_password,
    validate_password_strength,
    verify_password,
)
from peerqa.db.models import User
from peerqa.errors import ConflictError, UnauthorizedError, ValidationError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


# ---------------------------------------------------------------------------
# User queries
# ---------------------------------------------------------------------------


async def get_user_by_id(db: AsyncSession, user_id: int) -> User | None:
    """Fetch a user by ID."""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Fetch a user by email (case-insensitive)."""
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
    return result.scalar_one_or_none()


# ---------------------------------------------------------------------------
# Registration / login
# ---------------------------------------------------------------------------


async def register_user(
    db: AsyncSession,
    name: str,
    email: str,
    username: str,
    password: str,
    user_role: str = "tester",
    avatar_url: str | None = None,
) -> User:
    """
    Create a user with zeroed review counters.

    Raises:
        ValidationError: If the password is too weak.
        ConflictError: If the email or username is already registered.
    """
    try:
        validate_password_strength(password)
    except PasswordStrengthError as e:
        raise ValidationError(str(e)) from e

    email = email.lower().strip()
    existing = await db.execute(
        select(User.id).where(or_(func.lower(User.email) == email, User.username == username))
    )
    if existing.first() is not None:
        msg = "User already exists"
        raise ConflictError(msg)

    user = User(
        name=name,
        email=email,
        username=username,
        password_hash=hash_password(password),
        user_role=user_role,
        avatar_url=avatar_url,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        msg = "User already exists"
        raise ConflictError(msg) from e

    logger.info("user_registered", user_id=user.id, username=username)
    return user


async def authenticate(db: AsyncSession, email: str, password: str) -> User:
    """Return the user for valid credentials, else raise UnauthorizedError."""
    user = await get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("login_failed", email=email)
        msg = "Invalid credentials"
        raise UnauthorizedError(msg)
    return user
