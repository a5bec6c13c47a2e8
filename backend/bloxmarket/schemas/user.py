"""Public profile schemas."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PublicProfile(BaseModel):
    id: int
    username: str
    roblox_username: Optional[str] = None
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    discord_username: Optional[str] = None
    timezone: Optional[str] = None
    role: str
    credibility_score: int
    created_at: datetime

    # Aggregates
    trade_count: int = 0
    forum_post_count: int = 0
    vouch_count: int = 0
    average_rating: Optional[float] = None

    model_config = ConfigDict(from_attributes=True)


class ProfileUpdate(BaseModel):
    """Only these fields are editable by the user."""
    bio: Optional[str] = Field(None, max_length=1000)
    roblox_username: Optional[str] = Field(None, max_length=50)
    discord_username: Optional[str] = Field(None, max_length=50)
    timezone: Optional[str] = Field(None, max_length=64)
