"""Pydantic models for badge and achievement administration."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


# --- Badge ---


class BadgeCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=128)
    description: str = Field(min_length=1)
    icon: str = Field(min_length=1, max_length=512)


class BadgeUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=128)
    description: str | None = Field(default=None, min_length=1)
    icon: str | None = Field(default=None, min_length=1, max_length=512)


class BadgeResponse(BaseModel):
    id: int
    name: str
    description: str
    icon: str
    created_at: datetime


class AllBadgesResponse(BaseModel):
    badges: list[BadgeResponse]


# --- Achievement ---


class AchievementCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=128)
    description: str = Field(min_length=1)
    sending_review_points: float = Field(ge=0)
    receiving_review_points: float = Field(ge=0)
    badge_id: int


class AchievementUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=128)
    description: str | None = Field(default=None, min_length=1)
    sending_review_points: float | None = Field(default=None, ge=0)
    receiving_review_points: float | None = Field(default=None, ge=0)
    badge_id: int | None = None


class AchievementResponse(BaseModel):
    id: int
    name: str
    description: str
    sending_review_points: float
    receiving_review_points: float
    badge: BadgeResponse
    created_at: datetime


class AllAchievementsResponse(BaseModel):
    achievements: list[AchievementResponse]


class MessageResponse(BaseModel):
    msg: str
