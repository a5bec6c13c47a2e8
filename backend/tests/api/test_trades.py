"""
Tests for trade listing endpoints, including votes and comments on trades.
"""
from pathlib import Path

from httpx import AsyncClient

from bloxmarket.core.config import settings

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


async def register_and_login(client: AsyncClient, username: str) -> dict:
    await client.post(
        "/api/auth/register",
        json={"username": username, "email": f"{username}@example.com", "password": "secret123"},
    )
    response = await client.post(
        "/api/auth/login", json={"username": username, "password": "secret123"}
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


class TestTradeVotingFlow:
    """A lists a trade, B votes on it."""

    async def test_vote_up_then_flip_down(self, client: AsyncClient):
        seller = await register_and_login(client, "seller_a")
        buyer = await register_and_login(client, "buyer_b")

        response = await client.post(
            "/api/trades",
            data={"item_offered": "Dominus", "item_requested": "Robux", "trade_value": "75000"},
            headers=seller,
        )
        assert response.status_code == 201
        trade = response.json()
        assert trade["item_offered"] == "Dominus"
        assert trade["status"] == "open"
        assert trade["author"]["username"] == "seller_a"
        assert trade["upvotes"] == 0
        assert trade["userVote"] is None

        response = await client.post(
            f"/api/trades/{trade['id']}/vote", json={"direction": "up"}, headers=buyer
        )
        assert response.status_code == 200
        assert response.json() == {"upvotes": 1, "downvotes": 0, "userVote": "up"}

        response = await client.post(
            f"/api/trades/{trade['id']}/vote", json={"direction": "down"}, headers=buyer
        )
        assert response.status_code == 200
        assert response.json() == {"upvotes": 0, "downvotes": 1, "userVote": "down"}

        response = await client.get(f"/api/trades/{trade['id']}", headers=buyer)
        assert response.json()["downvotes"] == 1
        assert response.json()["userVote"] == "down"

    async def test_same_vote_twice_clears(self, client: AsyncClient, test_trade, auth_headers_2):
        url = f"/api/trades/{test_trade.id}/vote"
        await client.post(url, json={"direction": "down"}, headers=auth_headers_2)
        response = await client.post(url, json={"direction": "down"}, headers=auth_headers_2)

        assert response.json() == {"upvotes": 0, "downvotes": 0, "userVote": None}

    async def test_owner_cannot_vote(self, client: AsyncClient, test_trade, auth_headers):
        response = await client.post(
            f"/api/trades/{test_trade.id}/vote", json={"direction": "up"}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Cannot vote on your own trade"}

    async def test_invalid_direction(self, client: AsyncClient, test_trade, auth_headers_2):
        response = await client.post(
            f"/api/trades/{test_trade.id}/vote", json={"direction": "sideways"}, headers=auth_headers_2
        )
        assert response.status_code == 400

    async def test_vote_requires_auth(self, client: AsyncClient, test_trade):
        response = await client.post(f"/api/trades/{test_trade.id}/vote", json={"direction": "up"})
        assert response.status_code == 401

    async def test_vote_on_missing_trade(self, client: AsyncClient, auth_headers_2):
        response = await client.post("/api/trades/999/vote", json={"direction": "up"}, headers=auth_headers_2)

        assert response.status_code == 404
        assert response.json() == {"error": "Trade not found"}


class TestTradeCrud:

    async def test_create_with_image(self, client: AsyncClient, auth_headers):
        response = await client.post(
            "/api/trades",
            data={"item_offered": "Valkyrie Helm"},
            files=[("images", ("helm.png", PNG_BYTES, "image/png"))],
            headers=auth_headers,
        )

        assert response.status_code == 201
        images = response.json()["images"]
        assert len(images) == 1
        assert images[0]["url"].startswith("/uploads/trades/")
        assert images[0]["mime_type"] == "image/png"

    async def test_create_rejects_disguised_executable(self, client: AsyncClient, auth_headers):
        response = await client.post(
            "/api/trades",
            data={"item_offered": "Totally an image"},
            files=[("images", ("evil.png", b"MZ\x90\x00" + b"\x00" * 32, "image/png"))],
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert "executable" in response.json()["error"]

    async def test_rejected_batch_leaves_no_files_behind(self, client: AsyncClient, auth_headers):
        trade_dir = Path(settings.upload_dir) / "trades"
        before = set(trade_dir.iterdir()) if trade_dir.exists() else set()

        response = await client.post(
            "/api/trades",
            data={"item_offered": "Two pictures"},
            files=[
                ("images", ("ok.png", PNG_BYTES, "image/png")),
                ("images", ("evil.png", b"MZ\x90\x00" + b"\x00" * 32, "image/png")),
            ],
            headers=auth_headers,
        )

        assert response.status_code == 400
        after = set(trade_dir.iterdir()) if trade_dir.exists() else set()
        assert after == before

    async def test_delete_removes_image_files(self, client: AsyncClient, auth_headers):
        created = await client.post(
            "/api/trades",
            data={"item_offered": "Shadow Ninja"},
            files=[("images", ("ninja.png", PNG_BYTES, "image/png"))],
            headers=auth_headers,
        )
        trade = created.json()
        stored = Path(settings.upload_dir) / "trades" / trade["images"][0]["url"].rsplit("/", 1)[-1]
        assert stored.exists()

        response = await client.delete(f"/api/trades/{trade['id']}", headers=auth_headers)

        assert response.status_code == 200
        assert not stored.exists()

    async def test_create_requires_item_offered(self, client: AsyncClient, auth_headers):
        response = await client.post("/api/trades", data={"description": "nothing"}, headers=auth_headers)
        assert response.status_code == 400

    async def test_list_paginates_newest_first(self, client: AsyncClient, auth_headers):
        for name in ("Alpha", "Bravo", "Charlie"):
            await client.post("/api/trades", data={"item_offered": name}, headers=auth_headers)

        response = await client.get("/api/trades", params={"page": 1, "limit": 2})

        assert response.status_code == 200
        data = response.json()
        assert [t["item_offered"] for t in data["trades"]] == ["Charlie", "Bravo"]
        assert data["pagination"] == {"page": 1, "limit": 2, "total": 3, "pages": 2}

    async def test_list_filters_by_status_and_search(self, client: AsyncClient, test_trade, auth_headers):
        await client.post("/api/trades", data={"item_offered": "Clockwork Shades"}, headers=auth_headers)
        await client.patch(
            f"/api/trades/{test_trade.id}/status", json={"status": "completed"}, headers=auth_headers
        )

        completed = await client.get("/api/trades", params={"status": "completed"})
        searched = await client.get("/api/trades", params={"search": "clockwork"})

        assert [t["id"] for t in completed.json()["trades"]] == [test_trade.id]
        assert [t["item_offered"] for t in searched.json()["trades"]] == ["Clockwork Shades"]

    async def test_owner_updates_trade(self, client: AsyncClient, test_trade, auth_headers):
        response = await client.patch(
            f"/api/trades/{test_trade.id}", json={"trade_value": 60000}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["trade_value"] == 60000
        assert response.json()["item_offered"] == "Dominus Empyreus"

    async def test_other_user_cannot_update(self, client: AsyncClient, test_trade, auth_headers_2):
        response = await client.patch(
            f"/api/trades/{test_trade.id}", json={"trade_value": 1}, headers=auth_headers_2
        )
        assert response.status_code == 403

    async def test_moderator_can_delete(self, client: AsyncClient, test_trade, moderator_headers):
        response = await client.delete(f"/api/trades/{test_trade.id}", headers=moderator_headers)
        assert response.status_code == 200

        response = await client.get(f"/api/trades/{test_trade.id}")
        assert response.status_code == 404

    async def test_other_user_cannot_delete(self, client: AsyncClient, test_trade, auth_headers_2):
        response = await client.delete(f"/api/trades/{test_trade.id}", headers=auth_headers_2)
        assert response.status_code == 403


class TestTradeComments:

    async def test_comment_and_list(self, client: AsyncClient, test_trade, auth_headers_2):
        response = await client.post(
            f"/api/trades/{test_trade.id}/comments",
            json={"content": "Would you add a Fedora?"},
            headers=auth_headers_2,
        )
        assert response.status_code == 201
        assert response.json()["author"]["username"] == "trader_two"

        response = await client.get(f"/api/trades/{test_trade.id}/comments")
        data = response.json()
        assert data["total"] == 1
        assert data["comments"][0]["content"] == "Would you add a Fedora?"

        response = await client.get(f"/api/trades/{test_trade.id}")
        assert response.json()["comment_count"] == 1

    async def test_empty_comment_rejected(self, client: AsyncClient, test_trade, auth_headers_2):
        response = await client.post(
            f"/api/trades/{test_trade.id}/comments", json={"content": ""}, headers=auth_headers_2
        )
        assert response.status_code == 400
