"""
Admin dashboard service: platform stats and user management.
"""
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from bloxmarket.db.queries import fetch_page
from bloxmarket.core.constants import (
    DEFAULT_PAGE_SIZE,
    ApplicationStatus,
    ReportStatus,
    TradeStatus,
    UserRole,
)
from bloxmarket.core.exceptions import InvalidInputError, NotFoundError
from bloxmarket.core.permissions import Action, ensure_can
from bloxmarket.models.content import Event, ForumPost, Trade
from bloxmarket.models.report import Report
from bloxmarket.models.user import RoleHistory, User
from bloxmarket.models.verification import MiddlemanApplication
from bloxmarket.services.auth import revoke_all_sessions
from bloxmarket.utils.sanitize import escape_like, sanitize_optional

logger = get_logger()


class AdminService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _count(self, model, *criteria) -> int:
        query = select(func.count(model.id))
        if criteria:
            query = query.where(*criteria)
        return (await self.db.execute(query)).scalar_one()

    async def stats(self) -> dict[str, int]:
        return {
            "users": await self._count(User),
            "active_users": await self._count(User, User.is_active == True),  # noqa: E712
            "banned_users": await self._count(User, User.role == UserRole.BANNED.value),
            "middlemen": await self._count(User, User.role == UserRole.MIDDLEMAN.value),
            "trades": await self._count(Trade),
            "open_trades": await self._count(Trade, Trade.status == TradeStatus.OPEN.value),
            "forum_posts": await self._count(ForumPost),
            "events": await self._count(Event),
            "pending_applications": await self._count(
                MiddlemanApplication,
                MiddlemanApplication.status == ApplicationStatus.PENDING.value,
            ),
            "pending_reports": await self._count(Report, Report.status == ReportStatus.PENDING.value),
        }

    async def list_users(
        self,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
        search: Optional[str] = None,
        role: Optional[UserRole] = None,
    ) -> tuple[list[User], int]:
        query = select(User)
        if search and search.strip():
            pattern = f"%{escape_like(search.strip())}%"
            query = query.where(or_(
                User.username.ilike(pattern, escape="\\"),
                User.email.ilike(pattern, escape="\\"),
            ))
        if role:
            query = query.where(User.role == UserRole(role).value)
        query = query.order_by(User.created_at.desc(), User.id.desc())
        return await fetch_page(self.db, query, limit, offset)

    async def _target(self, user_id: int) -> User:
        user = await self.db.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def change_role(
        self,
        admin: User,
        user_id: int,
        role: UserRole,
        reason: Optional[str] = None,
    ) -> User:
        """Set a user's role and append a role-history entry."""
        ensure_can(admin, Action.MANAGE_USERS, detail="Admin access required")
        if user_id == admin.id:
            raise InvalidInputError("You cannot change your own role")

        user = await self._target(user_id)
        new_role = UserRole(role).value
        old_role = user.role
        if old_role == new_role:
            raise InvalidInputError(f"User already has role '{new_role}'")

        reason = sanitize_optional(reason)
        user.role = new_role
        if new_role == UserRole.BANNED.value:
            user.ban_reason = reason or "No reason provided"
            await revoke_all_sessions(self.db, user.id)
        elif old_role == UserRole.BANNED.value:
            user.ban_reason = None

        self.db.add(RoleHistory(
            user_id=user.id,
            old_role=old_role,
            new_role=new_role,
            changed_by=admin.id,
            reason=reason,
        ))
        await self.db.flush()

        logger.info(
            "user_role_changed",
            user_id=user.id,
            admin_id=admin.id,
            old_role=old_role,
            new_role=new_role,
        )
        return user

    async def set_active(
        self,
        admin: User,
        user_id: int,
        is_active: bool,
        reason: Optional[str] = None,
    ) -> User:
        """Activate or deactivate an account; deactivation revokes its sessions."""
        ensure_can(admin, Action.MANAGE_USERS, detail="Admin access required")
        if user_id == admin.id:
            raise InvalidInputError("You cannot change your own status")

        user = await self._target(user_id)
        user.is_active = is_active
        if is_active:
            user.deactivation_reason = None
        else:
            user.deactivation_reason = sanitize_optional(reason) or "No reason provided"
            await revoke_all_sessions(self.db, user.id)
        await self.db.flush()

        logger.info("user_status_changed", user_id=user.id, admin_id=admin.id, is_active=is_active)
        return user
