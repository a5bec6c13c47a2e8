"""
Tests for public profiles, profile edits, avatars and vouches.
"""
from httpx import AsyncClient

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


class TestProfiles:

    async def test_public_profile_has_aggregates(self, client: AsyncClient, test_user, test_trade, test_post):
        response = await client.get(f"/api/users/{test_user.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["username"] == "trader_one"
        assert data["trade_count"] == 1
        assert data["forum_post_count"] == 1
        assert data["vouch_count"] == 0
        assert "email" not in data

    async def test_unknown_user(self, client: AsyncClient):
        response = await client.get("/api/users/31337")

        assert response.status_code == 404
        assert response.json() == {"error": "User not found"}

    async def test_update_only_editable_fields(self, client: AsyncClient, auth_headers):
        response = await client.patch(
            "/api/users/me",
            json={"bio": "Collector of hats", "timezone": "Europe/Berlin", "role": "admin"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["bio"] == "Collector of hats"
        assert data["timezone"] == "Europe/Berlin"
        assert data["role"] == "user"

    async def test_upload_avatar(self, client: AsyncClient, auth_headers):
        response = await client.post(
            "/api/users/me/avatar",
            files={"avatar": ("me.png", PNG_BYTES, "image/png")},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["avatar_url"].startswith("/uploads/avatars/")

    async def test_user_trades(self, client: AsyncClient, test_user, test_trade):
        response = await client.get(f"/api/users/{test_user.id}/trades")
        assert [t["id"] for t in response.json()["trades"]] == [test_trade.id]


class TestVouches:

    async def test_vouch_flow(self, client: AsyncClient, test_user, auth_headers_2):
        response = await client.post(
            "/api/vouches",
            json={"user_id": test_user.id, "rating": 5, "comment": "Fast and fair"},
            headers=auth_headers_2,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["credibility_score"] == 1
        assert data["vouch"]["given_by"]["username"] == "trader_two"

        response = await client.get(f"/api/users/{test_user.id}/vouches")
        data = response.json()
        assert data["pagination"]["total"] == 1
        assert data["average_rating"] == 5.0

        response = await client.get(f"/api/users/{test_user.id}")
        assert response.json()["credibility_score"] == 1
        assert response.json()["vouch_count"] == 1

    async def test_self_vouch_rejected(self, client: AsyncClient, test_user, auth_headers):
        response = await client.post(
            "/api/vouches", json={"user_id": test_user.id, "rating": 5}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Cannot vouch for yourself"}

    async def test_rating_bounds_enforced(self, client: AsyncClient, test_user, auth_headers_2):
        response = await client.post(
            "/api/vouches", json={"user_id": test_user.id, "rating": 9}, headers=auth_headers_2
        )
        assert response.status_code == 400

    async def test_remove_vouch(self, client: AsyncClient, test_user, auth_headers_2):
        response = await client.post(
            "/api/vouches", json={"user_id": test_user.id, "rating": 4}, headers=auth_headers_2
        )
        vouch_id = response.json()["vouch"]["id"]

        response = await client.delete(f"/api/vouches/{vouch_id}", headers=auth_headers_2)

        assert response.status_code == 200
        assert response.json()["credibility_score"] == 0
