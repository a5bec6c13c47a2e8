"""Forum post schemas."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from bloxmarket.core.constants import ForumCategory
from bloxmarket.schemas.common import AuthorBrief, EngagementFields, PaginationMeta


class ForumPostUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    content: Optional[str] = Field(None, min_length=1, max_length=20000)
    category: Optional[ForumCategory] = None


class ForumPostResponse(EngagementFields):
    id: int
    user_id: int
    title: str
    content: str
    category: ForumCategory
    created_at: datetime
    updated_at: datetime
    author: AuthorBrief = Field(validation_alias="user")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class ForumPostListResponse(BaseModel):
    posts: list[ForumPostResponse]
    pagination: PaginationMeta
