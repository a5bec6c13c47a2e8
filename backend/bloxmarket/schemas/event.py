"""Event and giveaway schemas."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from bloxmarket.core.constants import EventStatus, EventType
from bloxmarket.schemas.common import AuthorBrief, EngagementFields, PaginationMeta


class EventUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1, max_length=10000)
    event_type: Optional[EventType] = None
    prize: Optional[str] = Field(None, max_length=200)
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None
    max_participants: Optional[int] = Field(None, ge=1)


class EventResponse(EngagementFields):
    id: int
    user_id: int
    title: str
    description: str
    event_type: EventType
    prize: Optional[str] = None
    starts_at: datetime
    ends_at: datetime
    max_participants: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    author: AuthorBrief = Field(validation_alias="user")

    # Derived when read
    status: Optional[EventStatus] = None
    participant_count: int = 0
    joined: bool = False

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class EventListResponse(BaseModel):
    events: list[EventResponse]
    pagination: PaginationMeta


class EventParticipationResponse(BaseModel):
    message: str
    participant_count: int
    joined: bool
