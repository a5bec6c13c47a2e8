"""
Tests for vouches and the credibility score they drive.
"""
import pytest

from bloxmarket.core.exceptions import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
    PermissionDeniedError,
)
from bloxmarket.services.vouches import VouchService


class TestCreateVouch:

    async def test_vouch_raises_credibility_by_one(self, db_session, test_user, test_user_2):
        service = VouchService(db_session)

        vouch = await service.create(test_user_2, test_user.id, rating=5, comment="Smooth trade")

        assert vouch.id is not None
        assert vouch.given_by_user_id == test_user_2.id
        assert await service.credibility(test_user.id) == 1

    async def test_vouches_for_different_trades_accumulate(
        self, db_session, test_user, test_user_2, test_trade
    ):
        service = VouchService(db_session)
        await service.create(test_user_2, test_user.id, rating=4)
        await service.create(test_user_2, test_user.id, rating=5, trade_id=test_trade.id)

        assert await service.credibility(test_user.id) == 2
        assert await service.average_rating(test_user.id) == 4.5

    async def test_cannot_vouch_for_yourself(self, db_session, test_user):
        with pytest.raises(InvalidInputError) as exc_info:
            await VouchService(db_session).create(test_user, test_user.id, rating=5)
        assert exc_info.value.message == "Cannot vouch for yourself"

    @pytest.mark.parametrize("rating", [0, 6])
    async def test_rating_out_of_range(self, db_session, test_user, test_user_2, rating):
        with pytest.raises(InvalidInputError):
            await VouchService(db_session).create(test_user_2, test_user.id, rating=rating)

    async def test_duplicate_vouch_rejected(self, db_session, test_user, test_user_2):
        service = VouchService(db_session)
        await service.create(test_user_2, test_user.id, rating=5)

        with pytest.raises(ConflictError):
            await service.create(test_user_2, test_user.id, rating=3)
        assert await service.credibility(test_user.id) == 1

    async def test_unknown_ratee(self, db_session, test_user):
        with pytest.raises(NotFoundError):
            await VouchService(db_session).create(test_user, 9999, rating=5)

    async def test_unknown_trade(self, db_session, test_user, test_user_2):
        with pytest.raises(NotFoundError) as exc_info:
            await VouchService(db_session).create(test_user_2, test_user.id, rating=5, trade_id=9999)
        assert exc_info.value.message == "Trade not found"


class TestDeleteVouch:

    async def test_rater_removes_vouch_and_score_drops(self, db_session, test_user, test_user_2):
        service = VouchService(db_session)
        vouch = await service.create(test_user_2, test_user.id, rating=5)

        score = await service.delete(vouch.id, test_user_2)

        assert score == 0

    async def test_ratee_cannot_remove_vouch(self, db_session, test_user, test_user_2):
        service = VouchService(db_session)
        vouch = await service.create(test_user_2, test_user.id, rating=1)

        with pytest.raises(PermissionDeniedError):
            await service.delete(vouch.id, test_user)

    async def test_moderator_removes_vouch(self, db_session, test_user, test_user_2, moderator_user):
        service = VouchService(db_session)
        vouch = await service.create(test_user_2, test_user.id, rating=2)

        assert await service.delete(vouch.id, moderator_user) == 0


class TestListVouches:

    async def test_list_newest_first_with_average(self, db_session, test_user, test_user_2, moderator_user):
        service = VouchService(db_session)
        await service.create(test_user_2, test_user.id, rating=3)
        await service.create(moderator_user, test_user.id, rating=5)

        vouches, total, average = await service.list_for_user(test_user.id, limit=10)

        assert total == 2
        assert vouches[0].given_by_user_id == moderator_user.id
        assert average == 4.0

    async def test_list_for_unknown_user(self, db_session):
        with pytest.raises(NotFoundError):
            await VouchService(db_session).list_for_user(12345)
