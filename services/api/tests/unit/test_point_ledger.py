"""Point ledger unit tests — atomic increments and the total invariant."""

from __future__ import annotations

import asyncio

import pytest

from peerqa.database import get_session_factory
from peerqa.errors import PersistenceError
from peerqa.gamification.catalog import PointKind
from peerqa.reviews.ledger import ReviewRole, apply_review_points
from peerqa.users.service import load_user


class TestApplyReviewPoints:
    @pytest.mark.asyncio
    async def test_reviewer_gains_one_sending_point(self, db_session, make_user):
        user = await make_user()
        balance = await apply_review_points(db_session, user.id, ReviewRole.REVIEWER)

        assert balance.sending_review_points == 1.0
        assert balance.receiving_review_points == 0.0
        assert balance.total_points == 1.0
        assert balance.counter(PointKind.SENDING) == 1.0

    @pytest.mark.asyncio
    async def test_reviewee_gains_half_a_receiving_point(self, db_session, make_user):
        user = await make_user()
        balance = await apply_review_points(db_session, user.id, ReviewRole.REVIEWEE)

        assert balance.sending_review_points == 0.0
        assert balance.receiving_review_points == 0.5
        assert balance.total_points == 0.5
        assert balance.counter(PointKind.RECEIVING) == 0.5

    @pytest.mark.asyncio
    async def test_total_tracks_both_counters(self, db_session, make_user):
        user = await make_user(sending=3.0, receiving=1.5)
        await apply_review_points(db_session, user.id, ReviewRole.REVIEWER)
        balance = await apply_review_points(db_session, user.id, ReviewRole.REVIEWEE)

        assert balance.sending_review_points == 4.0
        assert balance.receiving_review_points == 2.0
        assert balance.total_points == 6.0

        stored = await load_user(db_session, user.id)
        assert stored.total_points == stored.sending_review_points + stored.receiving_review_points

    @pytest.mark.asyncio
    async def test_stale_loaded_user_does_not_lose_increments(self, db_session, make_user):
        user = await make_user()
        # user is held in the identity map with sending_review_points == 0
        await apply_review_points(db_session, user.id, ReviewRole.REVIEWER)
        await apply_review_points(db_session, user.id, ReviewRole.REVIEWER)

        stored = await load_user(db_session, user.id)
        assert stored.sending_review_points == 2.0

    @pytest.mark.asyncio
    async def test_increments_from_separate_sessions_all_land(self, db_session, make_user):
        user = await make_user()

        async def credit() -> None:
            async with get_session_factory()() as session:
                await apply_review_points(session, user.id, ReviewRole.REVIEWER)

        await asyncio.gather(*(credit() for _ in range(5)))

        stored = await load_user(db_session, user.id)
        assert stored.sending_review_points == 5.0
        assert stored.total_points == 5.0

    @pytest.mark.asyncio
    async def test_missing_user_raises_persistence_error(self, db_session):
        with pytest.raises(PersistenceError):
            await apply_review_points(db_session, 999_999, ReviewRole.REVIEWER)

    @pytest.mark.asyncio
    async def test_configured_increments_are_used(self, db_session, make_user, monkeypatch):
        monkeypatch.setenv("PEERQA_REVIEW_SENDING_POINTS", "2")
        from peerqa.config import get_settings

        get_settings.cache_clear()
        user = await make_user()
        balance = await apply_review_points(db_session, user.id, ReviewRole.REVIEWER)
        assert balance.sending_review_points == 2.0


class TestReviewRole:
    def test_point_kinds(self):
        assert ReviewRole.REVIEWER.point_kind is PointKind.SENDING
        assert ReviewRole.REVIEWEE.point_kind is PointKind.RECEIVING
