"""Badge and achievement catalog endpoints. All require a bearer token."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from peerqa.auth.dependencies import get_current_user
from peerqa.database import get_session
from peerqa.db.models import Achievement, Badge, User
from peerqa.dependencies import ResourceId
from peerqa.gamification.achievement_service import (
    create_achievement,
    delete_achievement,
    get_achievement,
    list_achievements,
    update_achievement,
)
from peerqa.gamification.badge_service import (
    create_badge,
    delete_badge,
    get_badge,
    list_badges,
    update_badge,
)
from peerqa.gamification.schemas import (
    AchievementCreateRequest,
    AchievementResponse,
    AchievementUpdateRequest,
    AllAchievementsResponse,
    AllBadgesResponse,
    BadgeCreateRequest,
    BadgeResponse,
    BadgeUpdateRequest,
    MessageResponse,
)

router = APIRouter(prefix="/api/v1", tags=["Gamification"])


def _badge_response(badge: Badge) -> BadgeResponse:
    return BadgeResponse(
        id=badge.id,
        name=badge.name,
        description=badge.description,
        icon=badge.icon,
        created_at=badge.created_at,
    )


def _achievement_response(achievement: Achievement, badge: Badge) -> AchievementResponse:
    return AchievementResponse(
        id=achievement.id,
        name=achievement.name,
        description=achievement.description,
        sending_review_points=achievement.sending_review_points,
        receiving_review_points=achievement.receiving_review_points,
        badge=_badge_response(badge),
        created_at=achievement.created_at,
    )


# ── Badges ──


@router.get("/badges", response_model=AllBadgesResponse)
async def list_badges_endpoint(
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    return AllBadgesResponse(badges=[_badge_response(b) for b in await list_badges(db)])


@router.post("/badges", response_model=BadgeResponse, status_code=status.HTTP_201_CREATED)
async def create_badge_endpoint(
    body: BadgeCreateRequest,
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    badge = await create_badge(db, body.name, body.description, body.icon)
    return _badge_response(badge)


@router.get("/badges/{badge_id}", response_model=BadgeResponse)
async def get_badge_endpoint(
    badge_id: ResourceId,
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    return _badge_response(await get_badge(db, badge_id))


@router.put("/badges/{badge_id}", response_model=BadgeResponse)
async def update_badge_endpoint(
    badge_id: ResourceId,
    body: BadgeUpdateRequest,
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    badge = await update_badge(db, badge_id, name=body.name, description=body.description, icon=body.icon)
    return _badge_response(badge)


@router.delete("/badges/{badge_id}", response_model=MessageResponse)
async def delete_badge_endpoint(
    badge_id: ResourceId,
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Delete a badge that no achievement links to."""
    await delete_badge(db, badge_id)
    return MessageResponse(msg="Badge deleted successfully")


# ── Achievements ──


@router.get("/achievements", response_model=AllAchievementsResponse)
async def list_achievements_endpoint(
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """All achievements with their linked badge, in evaluation order."""
    rows = await list_achievements(db)
    return AllAchievementsResponse(achievements=[_achievement_response(a, b) for a, b in rows])


@router.post("/achievements", response_model=AchievementResponse, status_code=status.HTTP_201_CREATED)
async def create_achievement_endpoint(
    body: AchievementCreateRequest,
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    achievement, badge = await create_achievement(
        db,
        name=body.name,
        description=body.description,
        sending_review_points=body.sending_review_points,
        receiving_review_points=body.receiving_review_points,
        badge_id=body.badge_id,
    )
    return _achievement_response(achievement, badge)


@router.get("/achievements/{achievement_id}", response_model=AchievementResponse)
async def get_achievement_endpoint(
    achievement_id: ResourceId,
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    achievement, badge = await get_achievement(db, achievement_id)
    return _achievement_response(achievement, badge)


@router.put("/achievements/{achievement_id}", response_model=AchievementResponse)
async def update_achievement_endpoint(
    achievement_id: ResourceId,
    body: AchievementUpdateRequest,
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    achievement, badge = await update_achievement(
        db,
        achievement_id,
        name=body.name,
        description=body.description,
        sending_review_points=body.sending_review_points,
        receiving_review_points=body.receiving_review_points,
        badge_id=body.badge_id,
    )
    return _achievement_response(achievement, badge)


@router.delete("/achievements/{achievement_id}", response_model=MessageResponse)
async def delete_achievement_endpoint(
    achievement_id: ResourceId,
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    await delete_achievement(db, achievement_id)
    return MessageResponse(msg="Achievement deleted successfully")
