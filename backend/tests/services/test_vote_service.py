"""
Tests for the vote toggle and tallies shared by trades, posts and events.
"""
import pytest
from sqlalchemy import func, select

from bloxmarket.core.constants import TargetType, VoteDirection
from bloxmarket.core.exceptions import InvalidInputError, NotFoundError
from bloxmarket.models import Vote
from bloxmarket.services.engagement import VoteService


async def vote_rows(db, target_type, target_id) -> int:
    result = await db.execute(
        select(func.count(Vote.id)).where(
            Vote.target_type == target_type.value,
            Vote.target_id == target_id,
        )
    )
    return result.scalar_one()


class TestVoteToggle:
    """The none/up/down state machine."""

    async def test_first_vote_is_recorded(self, db_session, test_trade, test_user_2):
        tally = await VoteService(db_session).toggle(
            TargetType.TRADE, test_trade.id, test_user_2, VoteDirection.UP
        )

        assert tally.upvotes == 1
        assert tally.downvotes == 0
        assert tally.user_vote == VoteDirection.UP

    async def test_same_direction_twice_clears_vote(self, db_session, test_trade, test_user_2):
        service = VoteService(db_session)
        await service.toggle(TargetType.TRADE, test_trade.id, test_user_2, VoteDirection.UP)
        tally = await service.toggle(TargetType.TRADE, test_trade.id, test_user_2, VoteDirection.UP)

        assert tally.upvotes == 0
        assert tally.downvotes == 0
        assert tally.user_vote is None
        assert await vote_rows(db_session, TargetType.TRADE, test_trade.id) == 0

    async def test_opposite_direction_flips_vote(self, db_session, test_trade, test_user_2):
        service = VoteService(db_session)
        await service.toggle(TargetType.TRADE, test_trade.id, test_user_2, VoteDirection.UP)
        tally = await service.toggle(TargetType.TRADE, test_trade.id, test_user_2, VoteDirection.DOWN)

        assert tally.upvotes == 0
        assert tally.downvotes == 1
        assert tally.user_vote == VoteDirection.DOWN
        # Never counted on both sides
        assert await vote_rows(db_session, TargetType.TRADE, test_trade.id) == 1

    async def test_votes_from_several_users_add_up(
        self, db_session, test_post, test_user_2, moderator_user
    ):
        service = VoteService(db_session)
        await service.toggle(TargetType.FORUM_POST, test_post.id, test_user_2, VoteDirection.UP)
        tally = await service.toggle(TargetType.FORUM_POST, test_post.id, moderator_user, VoteDirection.DOWN)

        assert tally.upvotes == 1
        assert tally.downvotes == 1
        assert tally.user_vote == VoteDirection.DOWN

    async def test_cannot_vote_on_own_content(self, db_session, test_event, test_user):
        with pytest.raises(InvalidInputError) as exc_info:
            await VoteService(db_session).toggle(
                TargetType.EVENT, test_event.id, test_user, VoteDirection.UP
            )
        assert "own event" in exc_info.value.message

    async def test_missing_target(self, db_session, test_user_2):
        with pytest.raises(NotFoundError) as exc_info:
            await VoteService(db_session).toggle(TargetType.TRADE, 9999, test_user_2, VoteDirection.UP)
        assert exc_info.value.message == "Trade not found"


class TestTallyMany:

    async def test_viewer_vote_only_for_viewer(self, db_session, test_trade, test_user, test_user_2):
        service = VoteService(db_session)
        await service.toggle(TargetType.TRADE, test_trade.id, test_user_2, VoteDirection.DOWN)

        as_owner = await service.tally_many(TargetType.TRADE, [test_trade.id], test_user)
        anonymous = await service.tally_many(TargetType.TRADE, [test_trade.id])

        assert as_owner[test_trade.id].downvotes == 1
        assert as_owner[test_trade.id].user_vote is None
        assert anonymous[test_trade.id].user_vote is None

    async def test_targets_without_votes_get_zero(self, db_session):
        tallies = await VoteService(db_session).tally_many(TargetType.EVENT, [1, 2])
        assert tallies[1].upvotes == 0
        assert tallies[2].downvotes == 0
