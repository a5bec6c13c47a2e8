"""
Event and giveaway endpoints.
"""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, File, Form, Query, UploadFile, status

from bloxmarket.api.deps import CurrentUser, DbSession, OptionalUser
from bloxmarket.api.routes.engagement import register_engagement_routes
from bloxmarket.api.utils.pagination import Pagination
from bloxmarket.core.constants import EventStatus, EventType, TargetType
from bloxmarket.models.content import Event
from bloxmarket.models.user import User
from bloxmarket.schemas.common import MessageResponse
from bloxmarket.schemas.event import (
    EventListResponse,
    EventParticipationResponse,
    EventResponse,
    EventUpdate,
)
from bloxmarket.services.events import EventService, event_status

router = APIRouter()


async def build_event_responses(
    service: EventService,
    events: list[Event],
    viewer: Optional[User],
) -> list[EventResponse]:
    ids = [event.id for event in events]
    engagement = await service.summarize(events, viewer)
    participation = await service.participation(ids, viewer)
    return [
        EventResponse.build(
            event,
            engagement[event.id].as_dict(),
            status=event_status(event.starts_at, event.ends_at),
            participant_count=participation[event.id][0],
            joined=participation[event.id][1],
        )
        for event in events
    ]


@router.get("", response_model=EventListResponse)
async def list_events(
    db: DbSession,
    page: Pagination,
    viewer: OptionalUser,
    event_status_filter: Optional[EventStatus] = Query(None, alias="status"),
    event_type: Optional[EventType] = Query(None, alias="type"),
    search: Optional[str] = Query(None, max_length=100),
    user_id: Optional[int] = Query(None),
):
    """Browse events; `status` is evaluated against the current time."""
    service = EventService(db)
    events, total = await service.list_events(
        page.limit,
        page.offset,
        status=event_status_filter,
        event_type=event_type,
        search=search,
        user_id=user_id,
    )
    return EventListResponse(
        events=await build_event_responses(service, events, viewer),
        pagination=page.meta(total),
    )


@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    current_user: CurrentUser,
    db: DbSession,
    title: str = Form(..., max_length=200),
    description: str = Form(..., max_length=10000),
    starts_at: datetime = Form(...),
    ends_at: datetime = Form(...),
    event_type: EventType = Form(EventType.EVENT),
    prize: Optional[str] = Form(None, max_length=200),
    max_participants: Optional[int] = Form(None, ge=1),
    images: Optional[list[UploadFile]] = File(None),
):
    service = EventService(db)
    event = await service.create(
        current_user,
        title=title,
        description=description,
        starts_at=starts_at,
        ends_at=ends_at,
        event_type=event_type,
        prize=prize,
        max_participants=max_participants,
        images=images,
    )
    return (await build_event_responses(service, [event], current_user))[0]


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(event_id: int, db: DbSession, viewer: OptionalUser):
    service = EventService(db)
    event = await service.get(event_id)
    return (await build_event_responses(service, [event], viewer))[0]


@router.patch("/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: int,
    updates: EventUpdate,
    current_user: CurrentUser,
    db: DbSession,
):
    service = EventService(db)
    event = await service.get(event_id)
    event = await service.update(event, current_user, updates.model_dump(exclude_unset=True))
    return (await build_event_responses(service, [event], current_user))[0]


@router.delete("/{event_id}", response_model=MessageResponse)
async def delete_event(event_id: int, current_user: CurrentUser, db: DbSession):
    service = EventService(db)
    event = await service.get(event_id)
    await service.delete(event, current_user)
    return MessageResponse(message="Event deleted successfully")


@router.post("/{event_id}/join", response_model=EventParticipationResponse)
async def join_event(event_id: int, current_user: CurrentUser, db: DbSession):
    service = EventService(db)
    event = await service.get(event_id)
    count = await service.join(event, current_user)
    return EventParticipationResponse(message="Joined event", participant_count=count, joined=True)


@router.delete("/{event_id}/join", response_model=EventParticipationResponse)
async def leave_event(event_id: int, current_user: CurrentUser, db: DbSession):
    service = EventService(db)
    event = await service.get(event_id)
    count = await service.leave(event, current_user)
    return EventParticipationResponse(message="Left event", participant_count=count, joined=False)


register_engagement_routes(router, TargetType.EVENT)
