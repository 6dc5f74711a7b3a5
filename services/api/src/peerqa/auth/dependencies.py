"""FastAPI authentication dependencies."""

from __future__ import annotations

import jwt
import structlog
from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from peerqa.auth.jwt import verify_token
from peerqa.auth.service import get_user_by_id
from peerqa.database import get_session
from peerqa.db.models import User

_bearer = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    db: AsyncSession = Depends(get_session),
) -> User:
    """Identify the caller from the bearer token. Raises 401 on any failure.

    The caller's id is bound to the structlog context for the rest of the request.
    """
    if credentials is None:
        raise HTTPException(status_code=401, detail="No token, authorization denied")
    try:
        payload = verify_token(credentials.credentials, expected_type="access")
        user_id = int(payload["sub"])
    except (jwt.InvalidTokenError, KeyError, ValueError) as e:
        raise HTTPException(status_code=401, detail="Token is not valid") from e

    user = await get_user_by_id(db, user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="User not found")
    structlog.contextvars.bind_contextvars(user_id=user.id)
    return user
