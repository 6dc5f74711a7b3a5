"""Response models for user and leaderboard endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class UserSnapshot(BaseModel):
    id: int
    name: str
    username: str
    email: str
    user_role: str
    avatar_url: str | None = None
    sending_review_points: float
    receiving_review_points: float
    total_points: float
    created_at: datetime


class EarnedAchievementResponse(BaseModel):
    achievement_id: int
    name: str
    description: str
    badge_id: int
    earned_at: datetime


class EarnedBadgeResponse(BaseModel):
    badge_id: int
    name: str
    description: str
    icon: str
    earned_at: datetime


class UserAchievementsResponse(BaseModel):
    user_id: int
    achievements: list[EarnedAchievementResponse]


class UserBadgesResponse(BaseModel):
    user_id: int
    badges: list[EarnedBadgeResponse]


# --- Leaderboard ---


class LeaderboardEntry(BaseModel):
    rank: int
    user_id: int
    name: str
    username: str
    avatar_url: str | None = None
    sending_review_points: float
    receiving_review_points: float
    total_points: float


class LeaderboardResponse(BaseModel):
    entries: list[LeaderboardEntry]
    total: int
