"""Public profiles and self-service profile edits."""
from typing import Any, Optional

from fastapi import UploadFile
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from bloxmarket.utils.file_validation import IMAGE_EXTENSIONS
from bloxmarket.core.constants import UploadCategory
from bloxmarket.core.exceptions import NotFoundError
from bloxmarket.models.content import ForumPost, Trade
from bloxmarket.models.user import User
from bloxmarket.models.vouch import Vouch
from bloxmarket.services.uploads import delete_after_commit, save_upload, upload_root
from bloxmarket.utils.sanitize import sanitize_optional

logger = get_logger()

EDITABLE_PROFILE_FIELDS = {
    "bio": 1000,
    "roblox_username": 50,
    "discord_username": 50,
    "timezone": 64,
}


class UserService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user_id: int) -> User:
        user = await self.db.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def stats(self, user_ids: list[int]) -> dict[int, dict[str, Any]]:
        """Trade, forum post and vouch counts plus average rating per user."""
        stats = {
            user_id: {"trade_count": 0, "forum_post_count": 0, "vouch_count": 0, "average_rating": None}
            for user_id in user_ids
        }
        if not user_ids:
            return stats

        trades = await self.db.execute(
            select(Trade.user_id, func.count(Trade.id))
            .where(Trade.user_id.in_(user_ids))
            .group_by(Trade.user_id)
        )
        for user_id, count in trades.all():
            stats[user_id]["trade_count"] = count

        posts = await self.db.execute(
            select(ForumPost.user_id, func.count(ForumPost.id))
            .where(ForumPost.user_id.in_(user_ids))
            .group_by(ForumPost.user_id)
        )
        for user_id, count in posts.all():
            stats[user_id]["forum_post_count"] = count

        vouches = await self.db.execute(
            select(Vouch.user_id, func.count(Vouch.id), func.avg(Vouch.rating))
            .where(Vouch.user_id.in_(user_ids))
            .group_by(Vouch.user_id)
        )
        for user_id, count, average in vouches.all():
            stats[user_id]["vouch_count"] = count
            stats[user_id]["average_rating"] = round(float(average), 2) if average is not None else None

        return stats

    async def update_profile(self, user: User, fields: dict[str, Any]) -> User:
        """Only bio, roblox_username, discord_username and timezone are editable."""
        changed = []
        for name, value in fields.items():
            if name not in EDITABLE_PROFILE_FIELDS:
                continue
            setattr(user, name, sanitize_optional(value, EDITABLE_PROFILE_FIELDS[name]))
            changed.append(name)
        await self.db.flush()

        logger.info("profile_updated", user_id=user.id, fields=changed)
        return user

    async def set_avatar(self, user: User, upload: UploadFile) -> User:
        stored = await save_upload(upload, UploadCategory.AVATARS, IMAGE_EXTENSIONS)

        previous: Optional[str] = user.avatar_url
        user.avatar_url = stored.url
        await self.db.flush()

        prefix = f"/uploads/{UploadCategory.AVATARS.value}/"
        if previous and previous.startswith(prefix):
            delete_after_commit(
                self.db, [str(upload_root() / UploadCategory.AVATARS.value / previous[len(prefix):])]
            )

        logger.info("avatar_updated", user_id=user.id, filename=stored.filename)
        return user
