"""Review endpoints — submission, listings, likes, comments."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from peerqa.auth.dependencies import get_current_user
from peerqa.database import get_session
from peerqa.db.models import Review, ReviewComment, ReviewLike, User
from peerqa.dependencies import ResourceId, get_redis_dep
from peerqa.gamification.award_service import AwardResult
from peerqa.gamification.catalog import AchievementCatalog, get_catalog
from peerqa.reviews.schemas import (
    AwardSummary,
    CommentCreateRequest,
    CommentResponse,
    LikeResponse,
    ReviewCreateRequest,
    ReviewListResponse,
    ReviewResponse,
    ReviewSubmissionResponse,
)
from peerqa.reviews.service import (
    ReviewInteractions,
    add_comment,
    delete_comment,
    get_review,
    like_review,
    list_added_reviews,
    list_received_reviews,
    list_reviews,
    load_interactions,
    submit_review,
    unlike_review,
)
from peerqa.users.router import user_snapshot

router = APIRouter(prefix="/api/v1/reviews", tags=["Reviews"])


# ── Helpers ──


def _like_response(like: ReviewLike) -> LikeResponse:
    return LikeResponse(id=like.id, user_id=like.user_id, created_at=like.created_at)


def _comment_response(comment: ReviewComment) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        user_id=comment.user_id,
        text=comment.text,
        name=comment.name,
        avatar=comment.avatar,
        created_at=comment.created_at,
    )


def _review_response(review: Review, interactions: ReviewInteractions | None = None) -> ReviewResponse:
    return ReviewResponse(
        id=review.id,
        reviewee_id=review.reviewee_id,
        reviewer_id=review.reviewer_id,
        review_text=review.review_text,
        reviewer_name=review.reviewer_name,
        reviewer_email=review.reviewer_email,
        reviewer_avatar=review.reviewer_avatar,
        created_at=review.created_at,
        likes=[_like_response(lk) for lk in interactions.likes] if interactions else [],
        comments=[_comment_response(c) for c in interactions.comments] if interactions else [],
    )


def _award_summary(award: AwardResult) -> AwardSummary:
    return AwardSummary(achievements=award.achievements, badges=award.badges)


async def _review_list(db: AsyncSession, reviews: list[Review]) -> ReviewListResponse:
    interactions = await load_interactions(db, [r.id for r in reviews])
    return ReviewListResponse(
        reviews=[_review_response(r, interactions[r.id]) for r in reviews],
        total=len(reviews),
    )


# ── Listings ──


@router.get("", response_model=ReviewListResponse)
async def list_all_reviews(db: AsyncSession = Depends(get_session)):
    """All reviews, newest first."""
    return await _review_list(db, await list_reviews(db))


@router.get("/received", response_model=ReviewListResponse)
async def list_my_received_reviews(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Reviews written about the current user."""
    return await _review_list(db, await list_received_reviews(db, user.id))


@router.get("/added", response_model=ReviewListResponse)
async def list_my_added_reviews(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Reviews written by the current user."""
    return await _review_list(db, await list_added_reviews(db, user.id))


@router.get("/{review_id}", response_model=ReviewResponse)
async def get_review_endpoint(review_id: ResourceId, db: AsyncSession = Depends(get_session)):
    review = await get_review(db, review_id)
    interactions = await load_interactions(db, [review.id])
    return _review_response(review, interactions[review.id])


# ── Submission ──


@router.post("/{user_id}", response_model=ReviewSubmissionResponse, status_code=status.HTTP_201_CREATED)
async def submit_review_endpoint(
    user_id: ResourceId,
    body: ReviewCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    catalog: AchievementCatalog = Depends(get_catalog),
    redis: object = Depends(get_redis_dep),
):
    """Review ``user_id`` as the current user; credits both parties and grants awards."""
    result = await submit_review(db, user.id, user_id, body.review_text, catalog=catalog, redis=redis)
    return ReviewSubmissionResponse(
        review=_review_response(result.review),
        reviewer=user_snapshot(result.reviewer),
        reviewee=user_snapshot(result.reviewee),
        reviewer_awards=_award_summary(result.reviewer_awards),
        reviewee_awards=_award_summary(result.reviewee_awards),
    )


# ── Likes ──


@router.put("/{review_id}/like", response_model=list[LikeResponse])
async def like_review_endpoint(
    review_id: ResourceId,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    likes = await like_review(db, review_id, user.id)
    return [_like_response(lk) for lk in likes]


@router.put("/{review_id}/unlike", response_model=list[LikeResponse])
async def unlike_review_endpoint(
    review_id: ResourceId,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    likes = await unlike_review(db, review_id, user.id)
    return [_like_response(lk) for lk in likes]


# ── Comments ──


@router.post("/{review_id}/comments", response_model=list[CommentResponse], status_code=status.HTTP_201_CREATED)
async def add_comment_endpoint(
    review_id: ResourceId,
    body: CommentCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    comments = await add_comment(db, review_id, user, body.text)
    return [_comment_response(c) for c in comments]


@router.delete("/{review_id}/comments/{comment_id}", response_model=list[CommentResponse])
async def delete_comment_endpoint(
    review_id: ResourceId,
    comment_id: ResourceId,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Delete one of the current user's comments."""
    comments = await delete_comment(db, review_id, comment_id, user.id)
    return [_comment_response(c) for c in comments]
