"""
Shared response shapes: pagination, author briefs, votes, comments and
image attachments.
"""
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from bloxmarket.core.constants import VoteDirection


class MessageResponse(BaseModel):
    message: str


class PaginationMeta(BaseModel):
    """Offset pagination block returned by every list endpoint."""
    page: int
    limit: int
    total: int
    pages: int


class AuthorBrief(BaseModel):
    """Denormalized author fields embedded in content and comments."""
    id: int
    username: str
    credibility_score: int = 0
    avatar_url: Optional[str] = None
    role: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class VoteRequest(BaseModel):
    direction: VoteDirection


class VoteResponse(BaseModel):
    upvotes: int
    downvotes: int
    user_vote: Optional[VoteDirection] = Field(default=None, alias="userVote")

    model_config = ConfigDict(populate_by_name=True)


class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)


class CommentResponse(BaseModel):
    id: int
    content: str
    created_at: datetime
    author: AuthorBrief = Field(validation_alias="user")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class CommentListResponse(BaseModel):
    comments: list[CommentResponse]
    total: int


class AttachmentResponse(BaseModel):
    """An uploaded image; `uploaded_at` is the attachment's creation time."""
    id: int
    url: str
    original_filename: Optional[str] = None
    mime_type: Optional[str] = None
    uploaded_at: datetime = Field(validation_alias="created_at")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class EngagementFields(BaseModel):
    """Vote tally, caller's vote, comment count and images of a piece of content."""
    upvotes: int = 0
    downvotes: int = 0
    user_vote: Optional[VoteDirection] = Field(default=None, alias="userVote")
    comment_count: int = 0
    images: list[AttachmentResponse] = []

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def build(cls, obj: Any, engagement: Optional[dict] = None, **extra: Any):
        """Validate an ORM object and merge the engagement summary into it."""
        base = cls.model_validate(obj, from_attributes=True)
        return base.model_copy(update={**(engagement or {}), **extra})
