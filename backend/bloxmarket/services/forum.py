"""Forum post service."""
from typing import Optional

from fastapi import UploadFile
from sqlalchemy import select
from structlog import get_logger

from bloxmarket.core.constants import DEFAULT_PAGE_SIZE, ForumCategory, TargetType
from bloxmarket.core.exceptions import InvalidInputError
from bloxmarket.models.content import ForumPost
from bloxmarket.models.user import User
from bloxmarket.services.content import ContentService

logger = get_logger()


class ForumService(ContentService[ForumPost]):

    model = ForumPost
    target_type = TargetType.FORUM_POST
    text_fields = {"title": 200, "content": 20000}
    search_fields = ("title", "content")
    required_fields = ("title", "content")

    async def create(
        self,
        actor: User,
        title: str,
        content: str,
        category: ForumCategory = ForumCategory.GENERAL,
        images: Optional[list[UploadFile]] = None,
    ) -> ForumPost:
        fields = self.clean({"title": title, "content": content})
        if not fields["title"] or not fields["content"]:
            raise InvalidInputError("Title and content are required")

        post = ForumPost(user=actor, category=ForumCategory(category).value, **fields)
        self.db.add(post)
        await self.db.flush()

        if images:
            await self.engagement.attach_images(self.target_type, post.id, actor, images)

        logger.info("forum_post_created", post_id=post.id, user_id=actor.id, category=post.category)
        return post

    async def list_posts(
        self,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
        category: Optional[ForumCategory] = None,
        search: Optional[str] = None,
        user_id: Optional[int] = None,
    ) -> tuple[list[ForumPost], int]:
        query = select(ForumPost)
        if category:
            query = query.where(ForumPost.category == ForumCategory(category).value)
        if user_id:
            query = query.where(ForumPost.user_id == user_id)
        query = self.apply_search(query, search)
        return await self.page(query, limit, offset)
