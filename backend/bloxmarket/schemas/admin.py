"""Admin dashboard schemas."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from bloxmarket.core.constants import UserRole
from bloxmarket.schemas.common import PaginationMeta


class PlatformStats(BaseModel):
    users: int
    active_users: int
    banned_users: int
    middlemen: int
    trades: int
    open_trades: int
    forum_posts: int
    events: int
    pending_applications: int
    pending_reports: int


class AdminUserRow(BaseModel):
    id: int
    username: str
    email: str
    role: str
    credibility_score: int
    is_active: bool
    ban_reason: Optional[str] = None
    deactivation_reason: Optional[str] = None
    created_at: datetime
    last_login: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class AdminUserListResponse(BaseModel):
    users: list[AdminUserRow]
    pagination: PaginationMeta


class RoleUpdate(BaseModel):
    role: UserRole
    reason: Optional[str] = Field(None, max_length=1000)


class StatusUpdate(BaseModel):
    is_active: bool
    reason: Optional[str] = Field(None, max_length=1000)
