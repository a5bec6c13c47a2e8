"""
Tests for forum post endpoints.
"""
from httpx import AsyncClient


class TestForumPosts:

    async def test_create_post(self, client: AsyncClient, auth_headers):
        response = await client.post(
            "/api/forum",
            data={"title": "Scam alert", "content": "Watch out for fake middlemen", "category": "scam_reports"},
            headers=auth_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["category"] == "scam_reports"
        assert data["author"]["username"] == "trader_one"
        assert data["comment_count"] == 0

    async def test_content_is_escaped(self, client: AsyncClient, auth_headers):
        response = await client.post(
            "/api/forum",
            data={"title": "Hi", "content": "<script>alert(1)</script>"},
            headers=auth_headers,
        )
        assert response.json()["content"] == "&lt;script&gt;alert(1)&lt;/script&gt;"

    async def test_unknown_category_rejected(self, client: AsyncClient, auth_headers):
        response = await client.post(
            "/api/forum",
            data={"title": "Hi", "content": "there", "category": "memes"},
            headers=auth_headers,
        )
        assert response.status_code == 400

    async def test_list_by_category(self, client: AsyncClient, test_post, auth_headers):
        await client.post(
            "/api/forum",
            data={"title": "Update 42", "content": "Patch notes", "category": "game_updates"},
            headers=auth_headers,
        )

        response = await client.get("/api/forum", params={"category": "general"})

        data = response.json()
        assert [p["id"] for p in data["posts"]] == [test_post.id]
        assert data["pagination"]["total"] == 1

    async def test_owner_edits_post(self, client: AsyncClient, test_post, auth_headers):
        response = await client.patch(
            f"/api/forum/{test_post.id}", json={"title": "Valuing limiteds"}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["title"] == "Valuing limiteds"

    async def test_vote_and_read_back(self, client: AsyncClient, test_post, auth_headers_2):
        await client.post(f"/api/forum/{test_post.id}/vote", json={"direction": "up"}, headers=auth_headers_2)

        response = await client.get(f"/api/forum/{test_post.id}", headers=auth_headers_2)
        anonymous = await client.get(f"/api/forum/{test_post.id}")

        assert response.json()["upvotes"] == 1
        assert response.json()["userVote"] == "up"
        assert anonymous.json()["userVote"] is None

    async def test_delete_removes_comments(self, client: AsyncClient, test_post, auth_headers, auth_headers_2):
        await client.post(
            f"/api/forum/{test_post.id}/comments", json={"content": "Good question"}, headers=auth_headers_2
        )

        response = await client.delete(f"/api/forum/{test_post.id}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == {"message": "Post deleted successfully"}

        response = await client.get(f"/api/forum/{test_post.id}/comments")
        assert response.status_code == 404
        assert response.json() == {"error": "Post not found"}

    async def test_missing_post(self, client: AsyncClient):
        response = await client.get("/api/forum/404")
        assert response.status_code == 404
