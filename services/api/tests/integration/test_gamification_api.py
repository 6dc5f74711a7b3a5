"""Integration tests for badge and achievement administration."""

from __future__ import annotations

import pytest
from httpx import AsyncClient


@pytest.fixture
def admin(make_user, auth_headers):
    async def _headers():
        return auth_headers(await make_user("Admin"))

    return _headers


class TestBadgesApi:
    @pytest.mark.asyncio
    async def test_requires_token(self, client: AsyncClient):
        response = await client.get("/api/v1/badges")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_crud(self, client: AsyncClient, admin):
        headers = await admin()
        created = await client.post(
            "/api/v1/badges",
            json={"name": "Gold", "description": "Top reviewer", "icon": "gold.png"},
            headers=headers,
        )
        assert created.status_code == 201
        badge_id = created.json()["id"]

        duplicate = await client.post(
            "/api/v1/badges",
            json={"name": "Gold", "description": "Again", "icon": "gold.png"},
            headers=headers,
        )
        assert duplicate.status_code == 409

        updated = await client.put(f"/api/v1/badges/{badge_id}", json={"icon": "gold2.png"}, headers=headers)
        assert updated.json()["icon"] == "gold2.png"

        listed = await client.get("/api/v1/badges", headers=headers)
        assert [b["name"] for b in listed.json()["badges"]] == ["Gold"]

        deleted = await client.delete(f"/api/v1/badges/{badge_id}", headers=headers)
        assert deleted.json() == {"msg": "Badge deleted successfully"}

        missing = await client.get(f"/api/v1/badges/{badge_id}", headers=headers)
        assert missing.status_code == 404
        assert missing.json() == {"detail": "Badge not found"}

    @pytest.mark.asyncio
    async def test_missing_fields_are_422(self, client: AsyncClient, admin):
        response = await client.post("/api/v1/badges", json={"name": "Gold"}, headers=await admin())
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_out_of_range_id_is_422(self, client: AsyncClient, admin):
        headers = await admin()
        for path in (f"/api/v1/badges/{2**70}", f"/api/v1/achievements/{2**31}"):
            response = await client.get(path, headers=headers)
            assert response.status_code == 422


class TestAchievementsApi:
    @pytest.mark.asyncio
    async def test_crud(self, client: AsyncClient, admin, badge):
        headers = await admin()
        created = await client.post(
            "/api/v1/achievements",
            json={
                "name": "Sent 3",
                "description": "Three reviews sent",
                "sending_review_points": 3,
                "receiving_review_points": 0,
                "badge_id": badge.id,
            },
            headers=headers,
        )
        assert created.status_code == 201
        achievement = created.json()
        assert achievement["badge"]["id"] == badge.id

        fetched = await client.get(f"/api/v1/achievements/{achievement['id']}", headers=headers)
        assert fetched.json()["sending_review_points"] == 3.0

        updated = await client.put(
            f"/api/v1/achievements/{achievement['id']}", json={"receiving_review_points": 1.5}, headers=headers
        )
        assert updated.json()["receiving_review_points"] == 1.5

        in_use = await client.delete(f"/api/v1/badges/{badge.id}", headers=headers)
        assert in_use.status_code == 409

        deleted = await client.delete(f"/api/v1/achievements/{achievement['id']}", headers=headers)
        assert deleted.json() == {"msg": "Achievement deleted successfully"}

        listed = await client.get("/api/v1/achievements", headers=headers)
        assert listed.json() == {"achievements": []}

    @pytest.mark.asyncio
    async def test_unknown_badge(self, client: AsyncClient, admin):
        response = await client.post(
            "/api/v1/achievements",
            json={
                "name": "Orphan",
                "description": "No badge",
                "sending_review_points": 1,
                "receiving_review_points": 0,
                "badge_id": 12345,
            },
            headers=await admin(),
        )
        assert response.status_code == 404
        assert response.json() == {"detail": "Badge not found"}

    @pytest.mark.asyncio
    async def test_new_achievement_applies_to_next_review(self, client: AsyncClient, admin, badge, make_user, auth_headers):
        headers = await admin()
        await client.post(
            "/api/v1/achievements",
            json={
                "name": "First",
                "description": "First review",
                "sending_review_points": 1,
                "receiving_review_points": 0,
                "badge_id": badge.id,
            },
            headers=headers,
        )
        alice, bob = await make_user(), await make_user()

        response = await client.post(
            f"/api/v1/reviews/{bob.id}", json={"review_text": "hello"}, headers=auth_headers(alice)
        )

        assert response.json()["reviewer_awards"]["badges"] == [badge.id]
