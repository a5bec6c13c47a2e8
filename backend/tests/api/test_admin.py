"""
Tests for the admin dashboard: stats, user listing, roles and account status.
"""
from httpx import AsyncClient
from sqlalchemy import select

from bloxmarket.models import RoleHistory


class TestAdminStats:

    async def test_stats_for_moderator(self, client: AsyncClient, test_trade, moderator_headers):
        response = await client.get("/api/admin/stats", headers=moderator_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["users"] == 2
        assert data["trades"] == 1
        assert data["open_trades"] == 1
        assert data["pending_applications"] == 0

    async def test_stats_hidden_from_users(self, client: AsyncClient, auth_headers):
        response = await client.get("/api/admin/stats", headers=auth_headers)
        assert response.status_code == 403


class TestUserManagement:

    async def test_list_users_by_role(self, client: AsyncClient, test_user, admin_headers):
        response = await client.get("/api/admin/users", params={"role": "admin"}, headers=admin_headers)

        assert [u["username"] for u in response.json()["users"]] == ["admin_user"]

    async def test_search_users(self, client: AsyncClient, test_user, test_user_2, admin_headers):
        response = await client.get("/api/admin/users", params={"search": "trader_t"}, headers=admin_headers)

        assert [u["username"] for u in response.json()["users"]] == ["trader_two"]

    async def test_ban_revokes_sessions(
        self, client: AsyncClient, db_session, test_user, auth_headers, admin_headers
    ):
        response = await client.patch(
            f"/api/admin/users/{test_user.id}/role",
            json={"role": "banned", "reason": "Chargeback scam"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["role"] == "banned"
        assert response.json()["ban_reason"] == "Chargeback scam"

        response = await client.get("/api/auth/me", headers=auth_headers)
        assert response.status_code == 401

        response = await client.post(
            "/api/auth/login", json={"username": "trader_one", "password": "password123"}
        )
        assert response.status_code == 403
        assert response.json()["error"] == "Account is banned: Chargeback scam"

        history = (await db_session.execute(
            select(RoleHistory).where(RoleHistory.user_id == test_user.id)
        )).scalars().all()
        assert [(h.old_role, h.new_role) for h in history] == [("user", "banned")]

    async def test_banned_token_gets_403(
        self, client: AsyncClient, test_user, login_headers, db_session
    ):
        headers = await login_headers(test_user)
        test_user.role = "banned"
        await db_session.commit()

        response = await client.get("/api/auth/me", headers=headers)

        assert response.status_code == 403
        assert response.json() == {"error": "Account is banned"}

    async def test_same_role_rejected(self, client: AsyncClient, test_user, admin_headers):
        response = await client.patch(
            f"/api/admin/users/{test_user.id}/role", json={"role": "user"}, headers=admin_headers
        )
        assert response.status_code == 400

    async def test_cannot_change_own_role(self, client: AsyncClient, admin_user, admin_headers):
        response = await client.patch(
            f"/api/admin/users/{admin_user.id}/role", json={"role": "user"}, headers=admin_headers
        )

        assert response.status_code == 400
        assert response.json() == {"error": "You cannot change your own role"}

    async def test_moderator_cannot_change_roles(self, client: AsyncClient, test_user, moderator_headers):
        response = await client.patch(
            f"/api/admin/users/{test_user.id}/role", json={"role": "moderator"}, headers=moderator_headers
        )

        assert response.status_code == 403
        assert response.json() == {"error": "Admin access required"}

    async def test_deactivate_and_reactivate(self, client: AsyncClient, test_user, auth_headers, admin_headers):
        response = await client.patch(
            f"/api/admin/users/{test_user.id}/status",
            json={"is_active": False, "reason": "Inactive for a year"},
            headers=admin_headers,
        )
        assert response.json()["is_active"] is False
        assert response.json()["deactivation_reason"] == "Inactive for a year"

        response = await client.get("/api/auth/me", headers=auth_headers)
        assert response.status_code == 401

        response = await client.patch(
            f"/api/admin/users/{test_user.id}/status", json={"is_active": True}, headers=admin_headers
        )
        assert response.json()["is_active"] is True
        assert response.json()["deactivation_reason"] is None
