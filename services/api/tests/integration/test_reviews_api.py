"""Integration tests for /api/v1/reviews."""

from __future__ import annotations

import pytest
from httpx import AsyncClient


class TestSubmitReviewApi:
    @pytest.mark.asyncio
    async def test_submit_review(self, client: AsyncClient, make_user, auth_headers):
        alice, bob = await make_user("Alice"), await make_user("Bob")

        response = await client.post(
            f"/api/v1/reviews/{bob.id}",
            json={"review_text": "Great bug report"},
            headers=auth_headers(alice),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["review"]["reviewee_id"] == bob.id
        assert data["review"]["reviewer_id"] == alice.id
        assert data["review"]["reviewer_name"] == "Alice"
        assert data["reviewer"]["sending_review_points"] == 1.0
        assert data["reviewee"]["receiving_review_points"] == 0.5
        assert data["reviewer_awards"] == {"achievements": [], "badges": []}

    @pytest.mark.asyncio
    async def test_first_review_earns_seeded_awards(self, client: AsyncClient, db_session, make_user, auth_headers):
        from peerqa.gamification.seed import seed_catalog

        await seed_catalog(db_session)
        alice, bob = await make_user(), await make_user()

        response = await client.post(
            f"/api/v1/reviews/{bob.id}", json={"review_text": "First!"}, headers=auth_headers(alice)
        )
        data = response.json()
        assert len(data["reviewer_awards"]["achievements"]) == 1
        assert len(data["reviewer_awards"]["badges"]) == 1
        assert len(data["reviewee_awards"]["achievements"]) == 1

        achievements = await client.get(f"/api/v1/users/{alice.id}/achievements")
        assert [a["name"] for a in achievements.json()["achievements"]] == ["First Review Sent"]
        badges = await client.get(f"/api/v1/users/{bob.id}/badges")
        assert [b["name"] for b in badges.json()["badges"]] == ["First Received Review"]

    @pytest.mark.asyncio
    async def test_blank_review_is_400(self, client: AsyncClient, make_user, auth_headers):
        alice, bob = await make_user(), await make_user()
        response = await client.post(f"/api/v1/reviews/{bob.id}", json={"review_text": " "}, headers=auth_headers(alice))
        assert response.status_code == 400
        assert response.json() == {"detail": "Review is required"}

    @pytest.mark.asyncio
    async def test_unknown_reviewee_is_404(self, client: AsyncClient, make_user, auth_headers):
        alice = await make_user()
        response = await client.post("/api/v1/reviews/9999", json={"review_text": "hi"}, headers=auth_headers(alice))
        assert response.status_code == 404
        assert response.json() == {"detail": "Reviewee user not found"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("reviewee_id", [0, 2**31, 2**70])
    async def test_out_of_range_reviewee_is_422(self, client: AsyncClient, make_user, auth_headers, reviewee_id):
        alice = await make_user()
        response = await client.post(
            f"/api/v1/reviews/{reviewee_id}", json={"review_text": "hi"}, headers=auth_headers(alice)
        )
        assert response.status_code == 422
        assert response.json()["detail"] == "Validation error"

        me = await client.get("/api/v1/users/me", headers=auth_headers(alice))
        assert me.json()["total_points"] == 0.0

    @pytest.mark.asyncio
    async def test_requires_token(self, client: AsyncClient, make_user):
        bob = await make_user()
        response = await client.post(f"/api/v1/reviews/{bob.id}", json={"review_text": "hi"})
        assert response.status_code == 401


class TestReviewReadsApi:
    @pytest.mark.asyncio
    async def test_received_added_and_detail(self, client: AsyncClient, make_user, auth_headers):
        alice, bob = await make_user(), await make_user()
        created = await client.post(
            f"/api/v1/reviews/{bob.id}", json={"review_text": "Nice"}, headers=auth_headers(alice)
        )
        review_id = created.json()["review"]["id"]

        received = await client.get("/api/v1/reviews/received", headers=auth_headers(bob))
        added = await client.get("/api/v1/reviews/added", headers=auth_headers(alice))
        everything = await client.get("/api/v1/reviews")
        detail = await client.get(f"/api/v1/reviews/{review_id}")

        assert [r["id"] for r in received.json()["reviews"]] == [review_id]
        assert [r["id"] for r in added.json()["reviews"]] == [review_id]
        assert everything.json()["total"] == 1
        assert detail.json()["review_text"] == "Nice"

    @pytest.mark.asyncio
    async def test_missing_review_is_404(self, client: AsyncClient):
        response = await client.get("/api/v1/reviews/777")
        assert response.status_code == 404
        assert response.json() == {"detail": "Review not found"}


class TestLikesAndCommentsApi:
    @pytest.mark.asyncio
    async def test_like_flow(self, client: AsyncClient, make_user, auth_headers):
        alice, bob = await make_user(), await make_user()
        created = await client.post(
            f"/api/v1/reviews/{bob.id}", json={"review_text": "Nice"}, headers=auth_headers(alice)
        )
        review_id = created.json()["review"]["id"]

        liked = await client.put(f"/api/v1/reviews/{review_id}/like", headers=auth_headers(bob))
        assert liked.status_code == 200
        assert [lk["user_id"] for lk in liked.json()] == [bob.id]

        again = await client.put(f"/api/v1/reviews/{review_id}/like", headers=auth_headers(bob))
        assert again.status_code == 400
        assert again.json() == {"detail": "Review already liked"}

        unliked = await client.put(f"/api/v1/reviews/{review_id}/unlike", headers=auth_headers(bob))
        assert unliked.json() == []

        not_liked = await client.put(f"/api/v1/reviews/{review_id}/unlike", headers=auth_headers(bob))
        assert not_liked.status_code == 400
        assert not_liked.json() == {"detail": "Review has not yet been liked"}

    @pytest.mark.asyncio
    async def test_comment_flow(self, client: AsyncClient, make_user, auth_headers):
        alice, bob = await make_user(), await make_user("Bob")
        created = await client.post(
            f"/api/v1/reviews/{bob.id}", json={"review_text": "Nice"}, headers=auth_headers(alice)
        )
        review_id = created.json()["review"]["id"]

        added = await client.post(
            f"/api/v1/reviews/{review_id}/comments", json={"text": "Thanks"}, headers=auth_headers(bob)
        )
        assert added.status_code == 201
        comment = added.json()[0]
        assert comment["name"] == "Bob"

        forbidden = await client.delete(
            f"/api/v1/reviews/{review_id}/comments/{comment['id']}", headers=auth_headers(alice)
        )
        assert forbidden.status_code == 401
        assert forbidden.json() == {"detail": "User not authorized to delete this comment"}

        deleted = await client.delete(
            f"/api/v1/reviews/{review_id}/comments/{comment['id']}", headers=auth_headers(bob)
        )
        assert deleted.status_code == 200
        assert deleted.json() == []

        detail = await client.get(f"/api/v1/reviews/{review_id}")
        assert detail.json()["comments"] == []
