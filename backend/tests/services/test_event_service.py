"""
Tests for event lifecycle and participation.
"""
from datetime import datetime, timedelta, timezone

import pytest

from bloxmarket.core.constants import EventStatus
from bloxmarket.core.exceptions import ConflictError, InvalidInputError
from bloxmarket.db.base import utcnow
from bloxmarket.services.events import EventService, event_status

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


class TestEventStatus:
    """Status is a pure function of the timestamps and the clock."""

    def test_upcoming(self):
        assert event_status(NOW + timedelta(hours=1), NOW + timedelta(days=5), now=NOW) == EventStatus.UPCOMING

    def test_active(self):
        assert event_status(NOW - timedelta(days=1), NOW + timedelta(days=5), now=NOW) == EventStatus.ACTIVE

    def test_ending_soon_inside_window(self):
        assert event_status(NOW - timedelta(days=1), NOW + timedelta(hours=3), now=NOW) == EventStatus.ENDING_SOON

    def test_ended_at_exact_end(self):
        assert event_status(NOW - timedelta(days=1), NOW, now=NOW) == EventStatus.ENDED

    def test_started_exactly_now_is_not_upcoming(self):
        assert event_status(NOW, NOW + timedelta(days=2), now=NOW) == EventStatus.ACTIVE

    def test_naive_timestamps_are_utc(self):
        starts = (NOW - timedelta(days=1)).replace(tzinfo=None)
        ends = (NOW + timedelta(days=2)).replace(tzinfo=None)
        assert event_status(starts, ends, now=NOW) == EventStatus.ACTIVE


class TestCreateEvent:

    async def test_end_must_follow_start(self, db_session, test_user):
        now = utcnow()
        with pytest.raises(InvalidInputError) as exc_info:
            await EventService(db_session).create(
                test_user,
                title="Backwards",
                description="Ends before it starts",
                starts_at=now + timedelta(days=2),
                ends_at=now + timedelta(days=1),
            )
        assert exc_info.value.message == "End date must be after start date"

    async def test_update_keeps_date_order(self, db_session, test_user, test_event):
        with pytest.raises(InvalidInputError):
            await EventService(db_session).update(
                test_event, test_user, {"ends_at": test_event.starts_at - timedelta(hours=1)}
            )


class TestListByStatus:

    async def test_status_filter_matches_lifecycle(self, db_session, test_user, test_event):
        service = EventService(db_session)
        now = utcnow()
        ended = await service.create(
            test_user,
            title="Last week",
            description="Already over",
            starts_at=now - timedelta(days=7),
            ends_at=now - timedelta(days=6),
        )
        upcoming = await service.create(
            test_user,
            title="Next week",
            description="Not started",
            starts_at=now + timedelta(days=7),
            ends_at=now + timedelta(days=8),
        )

        active_events, _ = await service.list_events(status=EventStatus.ACTIVE)
        ended_events, _ = await service.list_events(status=EventStatus.ENDED)
        upcoming_events, _ = await service.list_events(status=EventStatus.UPCOMING)

        assert [e.id for e in active_events] == [test_event.id]
        assert [e.id for e in ended_events] == [ended.id]
        assert [e.id for e in upcoming_events] == [upcoming.id]


class TestParticipation:

    async def test_join_and_leave(self, db_session, test_event, test_user_2):
        service = EventService(db_session)

        assert await service.join(test_event, test_user_2) == 1
        count, joined = (await service.participation([test_event.id], test_user_2))[test_event.id]
        assert (count, joined) == (1, True)

        assert await service.leave(test_event, test_user_2) == 0

    async def test_join_twice_conflicts(self, db_session, test_event, test_user_2):
        service = EventService(db_session)
        await service.join(test_event, test_user_2)

        with pytest.raises(ConflictError):
            await service.join(test_event, test_user_2)

    async def test_event_full(self, db_session, test_event, test_user, test_user_2, moderator_user):
        service = EventService(db_session)
        await service.join(test_event, test_user)
        await service.join(test_event, test_user_2)

        with pytest.raises(InvalidInputError) as exc_info:
            await service.join(test_event, moderator_user)
        assert exc_info.value.message == "Event is full"

    async def test_cannot_join_ended_event(self, db_session, test_user, test_user_2):
        service = EventService(db_session)
        now = utcnow()
        event = await service.create(
            test_user,
            title="Over",
            description="Finished yesterday",
            starts_at=now - timedelta(days=2),
            ends_at=now - timedelta(days=1),
        )

        with pytest.raises(InvalidInputError) as exc_info:
            await service.join(event, test_user_2)
        assert exc_info.value.message == "Event has ended"

    async def test_leave_without_joining(self, db_session, test_event, test_user_2):
        with pytest.raises(InvalidInputError):
            await EventService(db_session).leave(test_event, test_user_2)
