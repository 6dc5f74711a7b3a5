"""Review business logic.

``submit_review`` is the only path that moves review points: it persists the
review, then credits the reviewer and the reviewee in turn through the point
ledger and the award evaluator. Each step commits on its own; a failure after
the review is stored is logged with the steps that completed and re-raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from peerqa.db.models import MAX_ID, Review, ReviewComment, ReviewLike, User
from peerqa.errors import NotFoundError, PersistenceError, UnauthorizedError, ValidationError
from peerqa.gamification.award_service import AwardResult, evaluate_and_grant
from peerqa.reviews.ledger import ReviewRole, apply_review_points
from peerqa.users.service import load_user

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from peerqa.gamification.catalog import Catalog

logger = structlog.get_logger()


@dataclass
class ReviewInteractions:
    likes: list[ReviewLike]
    comments: list[ReviewComment]


@dataclass
class SubmissionResult:
    review: Review
    reviewer: User
    reviewee: User
    reviewer_awards: AwardResult
    reviewee_awards: AwardResult


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------


async def _credit(
    db: AsyncSession,
    user_id: int,
    role: ReviewRole,
    catalog: Catalog,
    redis: object,
) -> AwardResult:
    balance = await apply_review_points(db, user_id, role)
    kind = role.point_kind
    return await evaluate_and_grant(
        db,
        user_id,
        kind,
        catalog=catalog,
        counter=balance.counter(kind),
        redis=redis,
    )


async def submit_review(
    db: AsyncSession,
    reviewer_id: int,
    reviewee_id: int,
    text: str,
    *,
    catalog: Catalog,
    redis: object = None,
) -> SubmissionResult:
    """Record a review from ``reviewer_id`` about ``reviewee_id``.

    Raises:
        ValidationError: Blank text or a reviewee id outside the key range. Nothing written.
        NotFoundError: Either party does not exist. Nothing written.
        PersistenceError: A store failure. Steps already committed stay committed.
    """
    if not text or not text.strip():
        msg = "Review is required"
        raise ValidationError(msg)
    if not 0 < reviewee_id <= MAX_ID:
        msg = "Invalid reviewee id"
        raise ValidationError(msg)

    reviewee = await load_user(db, reviewee_id)
    if reviewee is None:
        msg = "Reviewee user not found"
        raise NotFoundError(msg)
    reviewer = await load_user(db, reviewer_id)
    if reviewer is None:
        msg = "Reviewer user not found"
        raise NotFoundError(msg)

    review = Review(
        reviewee_id=reviewee.id,
        reviewer_id=reviewer.id,
        review_text=text,
        reviewer_name=reviewer.name,
        reviewer_email=reviewer.email,
        reviewer_avatar=reviewer.avatar_url,
    )
    db.add(review)
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("review_persist_failed", reviewer_id=reviewer_id, reviewee_id=reviewee_id, error=str(e))
        msg = "Could not save review"
        raise PersistenceError(msg) from e

    completed = ["review_saved"]
    try:
        reviewer_awards = await _credit(db, reviewer.id, ReviewRole.REVIEWER, catalog, redis)
        completed.append("reviewer_credited")
        reviewee_awards = await _credit(db, reviewee.id, ReviewRole.REVIEWEE, catalog, redis)
        completed.append("reviewee_credited")
    except Exception:
        logger.exception(
            "review_submission_incomplete",
            review_id=review.id,
            reviewer_id=reviewer.id,
            reviewee_id=reviewee.id,
            completed_steps=completed,
        )
        raise

    reviewer = await load_user(db, reviewer.id)
    reviewee = await load_user(db, reviewee.id)
    if reviewer is None or reviewee is None:
        msg = "User removed during review submission"
        raise PersistenceError(msg)

    logger.info(
        "review_submitted",
        review_id=review.id,
        reviewer_id=reviewer.id,
        reviewee_id=reviewee.id,
        achievements_granted=len(reviewer_awards.achievements) + len(reviewee_awards.achievements),
    )
    return SubmissionResult(
        review=review,
        reviewer=reviewer,
        reviewee=reviewee,
        reviewer_awards=reviewer_awards,
        reviewee_awards=reviewee_awards,
    )


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------


async def list_reviews(db: AsyncSession) -> list[Review]:
    """All reviews, newest first."""
    result = await db.execute(select(Review).order_by(Review.created_at.desc(), Review.id.desc()))
    return list(result.scalars().all())


async def list_received_reviews(db: AsyncSession, user_id: int) -> list[Review]:
    result = await db.execute(
        select(Review).where(Review.reviewee_id == user_id).order_by(Review.created_at.desc(), Review.id.desc())
    )
    return list(result.scalars().all())


async def list_added_reviews(db: AsyncSession, user_id: int) -> list[Review]:
    result = await db.execute(
        select(Review).where(Review.reviewer_id == user_id).order_by(Review.created_at.desc(), Review.id.desc())
    )
    return list(result.scalars().all())


async def get_review(db: AsyncSession, review_id: int) -> Review:
    result = await db.execute(select(Review).where(Review.id == review_id))
    review = result.scalar_one_or_none()
    if review is None:
        msg = "Review not found"
        raise NotFoundError(msg)
    return review


async def load_interactions(db: AsyncSession, review_ids: list[int]) -> dict[int, ReviewInteractions]:
    """Likes and comments for a batch of reviews, each newest first."""
    interactions = {rid: ReviewInteractions(likes=[], comments=[]) for rid in review_ids}
    if not review_ids:
        return interactions

    likes = await db.execute(
        select(ReviewLike)
        .where(ReviewLike.review_id.in_(review_ids))
        .order_by(ReviewLike.created_at.desc(), ReviewLike.id.desc())
    )
    for like in likes.scalars():
        interactions[like.review_id].likes.append(like)

    comments = await db.execute(
        select(ReviewComment)
        .where(ReviewComment.review_id.in_(review_ids))
        .order_by(ReviewComment.created_at.desc(), ReviewComment.id.desc())
    )
    for comment in comments.scalars():
        interactions[comment.review_id].comments.append(comment)

    return interactions


# ---------------------------------------------------------------------------
# Likes
# ---------------------------------------------------------------------------


async def like_review(db: AsyncSession, review_id: int, user_id: int) -> list[ReviewLike]:
    """Like a review once. Returns the review's likes, newest first."""
    await get_review(db, review_id)

    existing = await db.execute(
        select(ReviewLike.id).where(ReviewLike.review_id == review_id, ReviewLike.user_id == user_id)
    )
    if existing.first() is not None:
        msg = "Review already liked"
        raise ValidationError(msg)

    db.add(ReviewLike(review_id=review_id, user_id=user_id))
    try:
        await db.commit()
    except IntegrityError as e:
        # Lost a race with a concurrent like from the same user
        await db.rollback()
        msg = "Review already liked"
        raise ValidationError(msg) from e

    logger.info("review_liked", review_id=review_id, user_id=user_id)
    return (await load_interactions(db, [review_id]))[review_id].likes


async def unlike_review(db: AsyncSession, review_id: int, user_id: int) -> list[ReviewLike]:
    """Remove the caller's like. Returns the remaining likes, newest first."""
    await get_review(db, review_id)

    result = await db.execute(
        delete(ReviewLike).where(ReviewLike.review_id == review_id, ReviewLike.user_id == user_id)
    )
    if result.rowcount == 0:
        await db.rollback()
        msg = "Review has not yet been liked"
        raise ValidationError(msg)
    await db.commit()

    logger.info("review_unliked", review_id=review_id, user_id=user_id)
    return (await load_interactions(db, [review_id]))[review_id].likes


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------


async def add_comment(db: AsyncSession, review_id: int, user: User, text: str) -> list[ReviewComment]:
    """Comment on a review as ``user``. Returns all comments, newest first."""
    if not text or not text.strip():
        msg = "Comment text is required"
        raise ValidationError(msg)
    await get_review(db, review_id)

    db.add(ReviewComment(review_id=review_id, user_id=user.id, text=text, name=user.name, avatar=user.avatar_url))
    await db.commit()

    logger.info("review_commented", review_id=review_id, user_id=user.id)
    return (await load_interactions(db, [review_id]))[review_id].comments


async def delete_comment(db: AsyncSession, review_id: int, comment_id: int, user_id: int) -> list[ReviewComment]:
    """Delete a comment. Only its author may do so."""
    await get_review(db, review_id)

    result = await db.execute(
        select(ReviewComment).where(ReviewComment.id == comment_id, ReviewComment.review_id == review_id)
    )
    comment = result.scalar_one_or_none()
    if comment is None:
        msg = "Comment not found"
        raise NotFoundError(msg)
    if comment.user_id != user_id:
        msg = "User not authorized to delete this comment"
        raise UnauthorizedError(msg)

    await db.delete(comment)
    await db.commit()

    logger.info("review_comment_deleted", review_id=review_id, comment_id=comment_id, user_id=user_id)
    return (await load_interactions(db, [review_id]))[review_id].comments
