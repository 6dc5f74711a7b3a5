"""User and leaderboard endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from peerqa.auth.dependencies import get_current_user
from peerqa.database import get_session
from peerqa.db.models import User
from peerqa.dependencies import ResourceId
from peerqa.users.schemas import (
    EarnedAchievementResponse,
    EarnedBadgeResponse,
    LeaderboardEntry,
    LeaderboardResponse,
    UserAchievementsResponse,
    UserBadgesResponse,
    UserSnapshot,
)
from peerqa.users.service import (
    get_leaderboard,
    get_user_achievements,
    get_user_badges,
    get_user_snapshot,
    load_user,
)

router = APIRouter(prefix="/api/v1", tags=["Users"])


def user_snapshot(user: User) -> UserSnapshot:
    """Build a UserSnapshot from a User model."""
    return UserSnapshot(
        id=user.id,
        name=user.name,
        username=user.username,
        email=user.email,
        user_role=user.user_role,
        avatar_url=user.avatar_url,
        sending_review_points=user.sending_review_points,
        receiving_review_points=user.receiving_review_points,
        total_points=user.total_points,
        created_at=user.created_at,
    )


@router.get("/users/me", response_model=UserSnapshot)
async def get_me(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Current user with fresh point counters."""
    return user_snapshot(await load_user(db, user.id) or user)


@router.get("/users/{user_id}", response_model=UserSnapshot)
async def get_user(user_id: ResourceId, db: AsyncSession = Depends(get_session)):
    return user_snapshot(await get_user_snapshot(db, user_id))


@router.get("/users/{user_id}/achievements", response_model=UserAchievementsResponse)
async def list_user_achievements(user_id: ResourceId, db: AsyncSession = Depends(get_session)):
    """Achievements earned by a user, oldest grant first."""
    earned = await get_user_achievements(db, user_id)
    return UserAchievementsResponse(
        user_id=user_id,
        achievements=[
            EarnedAchievementResponse(
                achievement_id=a.achievement_id,
                name=a.name,
                description=a.description,
                badge_id=a.badge_id,
                earned_at=a.earned_at,
            )
            for a in earned
        ],
    )


@router.get("/users/{user_id}/badges", response_model=UserBadgesResponse)
async def list_user_badges(user_id: ResourceId, db: AsyncSession = Depends(get_session)):
    """Badges earned by a user, oldest grant first."""
    earned = await get_user_badges(db, user_id)
    return UserBadgesResponse(
        user_id=user_id,
        badges=[
            EarnedBadgeResponse(
                badge_id=b.badge_id,
                name=b.name,
                description=b.description,
                icon=b.icon,
                earned_at=b.earned_at,
            )
            for b in earned
        ],
    )


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def leaderboard(
    limit: int | None = Query(None, ge=1, le=500),
    db: AsyncSession = Depends(get_session),
):
    """Users ranked by total review points."""
    users = await get_leaderboard(db, limit)
    entries = [
        LeaderboardEntry(
            rank=rank,
            user_id=u.id,
            name=u.name,
            username=u.username,
            avatar_url=u.avatar_url,
            sending_review_points=u.sending_review_points,
            receiving_review_points=u.receiving_review_points,
            total_points=u.total_points,
        )
        for rank, u in enumerate(users, start=1)
    ]
    return LeaderboardResponse(entries=entries, total=len(entries))
