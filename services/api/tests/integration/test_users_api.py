"""Integration tests for user views and the leaderboard."""

from __future__ import annotations

import pytest
from httpx import AsyncClient


class TestLeaderboardApi:
    @pytest.mark.asyncio
    async def test_ordered_by_total_then_id(self, client: AsyncClient, make_user):
        low = await make_user(sending=1.0)
        tie_a = await make_user(sending=2.0, receiving=1.0)
        tie_b = await make_user(sending=3.0)
        top = await make_user(sending=5.0, receiving=0.5)

        response = await client.get("/api/v1/leaderboard")

        assert response.status_code == 200
        entries = response.json()["entries"]
        assert [e["user_id"] for e in entries] == [top.id, tie_a.id, tie_b.id, low.id]
        assert [e["rank"] for e in entries] == [1, 2, 3, 4]
        assert entries[0]["total_points"] == 5.5

    @pytest.mark.asyncio
    async def test_limit(self, client: AsyncClient, make_user):
        for _ in range(3):
            await make_user()
        response = await client.get("/api/v1/leaderboard", params={"limit": 2})
        assert response.json()["total"] == 2

    @pytest.mark.asyncio
    async def test_reflects_submitted_reviews(self, client: AsyncClient, make_user, auth_headers):
        alice, bob = await make_user(), await make_user()
        await client.post(f"/api/v1/reviews/{bob.id}", json={"review_text": "x"}, headers=auth_headers(alice))

        entries = (await client.get("/api/v1/leaderboard")).json()["entries"]

        assert [(e["user_id"], e["total_points"]) for e in entries] == [(alice.id, 1.0), (bob.id, 0.5)]


class TestUserViewsApi:
    @pytest.mark.asyncio
    async def test_get_user(self, client: AsyncClient, make_user):
        user = await make_user("Carol", sending=2.0)
        response = await client.get(f"/api/v1/users/{user.id}")
        assert response.status_code == 200
        assert response.json()["name"] == "Carol"
        assert response.json()["total_points"] == 2.0

    @pytest.mark.asyncio
    async def test_unknown_user(self, client: AsyncClient):
        for path in ("/api/v1/users/4040", "/api/v1/users/4040/achievements", "/api/v1/users/4040/badges"):
            response = await client.get(path)
            assert response.status_code == 404
            assert response.json() == {"detail": "User not found"}

    @pytest.mark.asyncio
    async def test_out_of_range_user_id_is_422(self, client: AsyncClient):
        huge = 2**70
        for path in (f"/api/v1/users/{huge}", f"/api/v1/users/{huge}/achievements", f"/api/v1/users/{huge}/badges"):
            response = await client.get(path)
            assert response.status_code == 422
            assert response.json()["detail"] == "Validation error"

    @pytest.mark.asyncio
    async def test_empty_awards(self, client: AsyncClient, make_user):
        user = await make_user()
        achievements = await client.get(f"/api/v1/users/{user.id}/achievements")
        badges = await client.get(f"/api/v1/users/{user.id}/badges")
        assert achievements.json() == {"user_id": user.id, "achievements": []}
        assert badges.json() == {"user_id": user.id, "badges": []}
