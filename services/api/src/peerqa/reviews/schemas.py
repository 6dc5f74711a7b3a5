"""Request/response models for review endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from peerqa.users.schemas import UserSnapshot


class ReviewCreateRequest(BaseModel):
    # Blank text is rejected by the service with a 400, not by pydantic
    review_text: str = ""


class CommentCreateRequest(BaseModel):
    text: str = ""


class LikeResponse(BaseModel):
    id: int
    user_id: int
    created_at: datetime


class CommentResponse(BaseModel):
    id: int
    user_id: int
    text: str
    name: str
    avatar: str | None = None
    created_at: datetime


class ReviewResponse(BaseModel):
    id: int
    reviewee_id: int
    reviewer_id: int | None = None
    review_text: str
    reviewer_name: str
    reviewer_email: str
    reviewer_avatar: str | None = None
    created_at: datetime
    likes: list[LikeResponse] = []
    comments: list[CommentResponse] = []


class ReviewListResponse(BaseModel):
    reviews: list[ReviewResponse]
    total: int


class AwardSummary(BaseModel):
    achievements: list[int]
    badges: list[int]


class ReviewSubmissionResponse(BaseModel):
    review: ReviewResponse
    reviewer: UserSnapshot
    reviewee: UserSnapshot
    reviewer_awards: AwardSummary
    reviewee_awards: AwardSummary
