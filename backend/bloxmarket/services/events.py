"""
Event and giveaway service.

An event's lifecycle is a function of its start and end timestamps and the
current time; nothing is stored and nothing runs on a schedule:

    now < starts_at                       upcoming
    now >= ends_at                        ended
    ends_at - now < ending-soon window    ending-soon
    otherwise                             active
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from fastapi import UploadFile
from sqlalchemy import and_, delete, func, select
from structlog import get_logger

from bloxmarket.core.config import settings
from bloxmarket.core.constants import DEFAULT_PAGE_SIZE, EventStatus, EventType, TargetType
from bloxmarket.core.exceptions import ConflictError, InvalidInputError
from bloxmarket.core.permissions import Action, ensure_can
from bloxmarket.db.base import as_utc, utcnow
from bloxmarket.db.transaction import savepoint
from bloxmarket.models.content import Event, EventParticipant
from bloxmarket.models.user import User
from bloxmarket.services.content import ContentService

logger = get_logger()


def ending_soon_window() -> timedelta:
    return timedelta(hours=settings.event_ending_soon_hours)


def to_utc(value: datetime) -> datetime:
    """Naive values are taken as UTC; aware values are converted to UTC."""
    return as_utc(value).astimezone(timezone.utc)


def event_status(starts_at: datetime, ends_at: datetime, now: Optional[datetime] = None) -> EventStatus:
    now = now or utcnow()
    starts_at, ends_at = as_utc(starts_at), as_utc(ends_at)

    if now < starts_at:
        return EventStatus.UPCOMING
    if now >= ends_at:
        return EventStatus.ENDED
    if ends_at - now < ending_soon_window():
        return EventStatus.ENDING_SOON
    return EventStatus.ACTIVE


def status_clause(status: EventStatus, now: Optional[datetime] = None):
    """SQL filter equivalent to `event_status(...) == status`."""
    now = now or utcnow()
    soon = now + ending_soon_window()

    if status == EventStatus.UPCOMING:
        return Event.starts_at > now
    if status == EventStatus.ENDED:
        return Event.ends_at <= now
    if status == EventStatus.ENDING_SOON:
        return and_(Event.starts_at <= now, Event.ends_at > now, Event.ends_at < soon)
    return and_(Event.starts_at <= now, Event.ends_at >= soon)


class EventService(ContentService[Event]):

    model = Event
    target_type = TargetType.EVENT
    text_fields = {"title": 200, "description": 10000, "prize": 200}
    search_fields = ("title", "description", "prize")
    required_fields = ("title", "description")

    async def create(
        self,
        actor: User,
        title: str,
        description: str,
        starts_at: datetime,
        ends_at: datetime,
        event_type: EventType = EventType.EVENT,
        prize: Optional[str] = None,
        max_participants: Optional[int] = None,
        images: Optional[list[UploadFile]] = None,
    ) -> Event:
        fields = self.clean({"title": title, "description": description, "prize": prize})
        if not fields["title"] or not fields["description"]:
            raise InvalidInputError("Title and description are required")

        starts_at, ends_at = to_utc(starts_at), to_utc(ends_at)
        if ends_at <= starts_at:
            raise InvalidInputError("End date must be after start date")
        if max_participants is not None and max_participants < 1:
            raise InvalidInputError("Max participants must be at least 1")

        event = Event(
            user=actor,
            event_type=EventType(event_type).value,
            starts_at=starts_at,
            ends_at=ends_at,
            max_participants=max_participants,
            **fields,
        )
        self.db.add(event)
        await self.db.flush()

        if images:
            await self.engagement.attach_images(self.target_type, event.id, actor, images)

        logger.info("event_created", event_id=event.id, user_id=actor.id, event_type=event.event_type)
        return event

    async def update(self, obj: Event, actor: User, fields: dict[str, Any]) -> Event:
        """Edits keep `ends_at` after `starts_at`."""
        ensure_can(actor, Action.UPDATE, obj, detail="Not authorized to update this event")
        for name in ("starts_at", "ends_at"):
            if fields.get(name) is not None:
                fields[name] = to_utc(fields[name])
            elif name in fields:
                raise InvalidInputError("Event dates cannot be empty")

        starts_at = fields.get("starts_at", obj.starts_at)
        ends_at = fields.get("ends_at", obj.ends_at)
        if as_utc(ends_at) <= as_utc(starts_at):
            raise InvalidInputError("End date must be after start date")

        return await super().update(obj, actor, fields)

    async def list_events(
        self,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
        status: Optional[EventStatus] = None,
        event_type: Optional[EventType] = None,
        search: Optional[str] = None,
        user_id: Optional[int] = None,
    ) -> tuple[list[Event], int]:
        query = select(Event)
        if status:
            query = query.where(status_clause(EventStatus(status)))
        if event_type:
            query = query.where(Event.event_type == EventType(event_type).value)
        if user_id:
            query = query.where(Event.user_id == user_id)
        query = self.apply_search(query, search)
        return await self.page(query, limit, offset)

    async def participation(self, event_ids: list[int], viewer: Optional[User]) -> dict[int, tuple[int, bool]]:
        """Participant count and whether the viewer joined, per event."""
        info = {event_id: (0, False) for event_id in event_ids}
        if not event_ids:
            return info

        result = await self.db.execute(
            select(EventParticipant.event_id, func.count(EventParticipant.id))
            .where(EventParticipant.event_id.in_(event_ids))
            .group_by(EventParticipant.event_id)
        )
        counts = dict(result.all())

        joined: set[int] = set()
        if viewer is not None:
            result = await self.db.execute(
                select(EventParticipant.event_id).where(
                    EventParticipant.event_id.in_(event_ids),
                    EventParticipant.user_id == viewer.id,
                )
            )
            joined = set(result.scalars())

        return {event_id: (counts.get(event_id, 0), event_id in joined) for event_id in event_ids}

    async def join(self, event: Event, actor: User) -> int:
        """Join an event that has not ended. Returns the new participant count."""
        if event_status(event.starts_at, event.ends_at) == EventStatus.ENDED:
            raise InvalidInputError("Event has ended")

        count, joined = (await self.participation([event.id], actor))[event.id]
        if joined:
            raise ConflictError("Already joined this event")
        if event.max_participants is not None and count >= event.max_participants:
            raise InvalidInputError("Event is full")

        async with savepoint(self.db, "event_join", conflict="Already joined this event"):
            self.db.add(EventParticipant(event_id=event.id, user_id=actor.id))
            await self.db.flush()

        logger.info("event_joined", event_id=event.id, user_id=actor.id)
        return count + 1

    async def leave(self, event: Event, actor: User) -> int:
        result = await self.db.execute(
            delete(EventParticipant).where(
                EventParticipant.event_id == event.id,
                EventParticipant.user_id == actor.id,
            )
        )
        if not result.rowcount:
            raise InvalidInputError("You have not joined this event")

        logger.info("event_left", event_id=event.id, user_id=actor.id)
        count, _ = (await self.participation([event.id], None))[event.id]
        return count

    async def delete(self, obj: Event, actor: User) -> None:
        ensure_can(actor, Action.DELETE, obj, detail="Not authorized to delete this event")
        await self.db.execute(delete(EventParticipant).where(EventParticipant.event_id == obj.id))
        await super().delete(obj, actor)
