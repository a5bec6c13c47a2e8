"""
Vouch service and credibility scoring.

Handles:
- Creating vouches (one per rater, ratee and trade)
- Removing vouches
- Keeping `User.credibility_score` in step: +1 per vouch created, -1 per
  vouch removed, applied as an in-database increment
"""
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from bloxmarket.core.constants import DEFAULT_PAGE_SIZE
from bloxmarket.db.queries import fetch_page
from bloxmarket.core.exceptions import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
    PermissionDeniedError,
)
from bloxmarket.core.permissions import Action, can
from bloxmarket.db.transaction import atomic
from bloxmarket.models.content import Trade
from bloxmarket.models.user import User
from bloxmarket.models.vouch import Vouch
from bloxmarket.utils.sanitize import sanitize_optional

logger = get_logger()


class VouchService:
    """Service for vouches and the credibility counter they drive."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _adjust_credibility(self, user_id: int, delta: int) -> None:
        await self.db.execute(
            update(User)
            .where(User.id == user_id)
            .values(credibility_score=User.credibility_score + delta)
        )

    async def credibility(self, user_id: int) -> int:
        result = await self.db.execute(select(User.credibility_score).where(User.id == user_id))
        return result.scalar_one()

    async def create(
        self,
        rater: User,
        ratee_id: int,
        rating: int,
        comment: Optional[str] = None,
        trade_id: Optional[int] = None,
    ) -> Vouch:
        """
        Vouch for another user.

        The vouch row and the credibility increment commit together.

        Raises:
            InvalidInputError: self-vouch or rating outside 1-5
            NotFoundError: ratee or trade does not exist
            ConflictError: this rater already vouched for this ratee on this trade
        """
        if rating < 1 or rating > 5:
            raise InvalidInputError("Rating must be between 1 and 5")
        if ratee_id == rater.id:
            raise InvalidInputError("Cannot vouch for yourself")

        if await self.db.get(User, ratee_id) is None:
            raise NotFoundError("User not found")
        if trade_id is not None and await self.db.get(Trade, trade_id) is None:
            raise NotFoundError("Trade not found")

        duplicate = await self.db.execute(
            select(Vouch.id).where(
                Vouch.given_by_user_id == rater.id,
                Vouch.user_id == ratee_id,
                Vouch.trade_id.is_(None) if trade_id is None else Vouch.trade_id == trade_id,
            )
        )
        if duplicate.first() is not None:
            raise ConflictError("You have already vouched for this user")

        vouch = Vouch(
            user_id=ratee_id,
            giver=rater,
            trade_id=trade_id,
            rating=rating,
            comment=sanitize_optional(comment),
        )
        async with atomic(
            self.db, "vouch_create", conflict="You have already vouched for this user"
        ):
            self.db.add(vouch)
            await self.db.flush()
            await self._adjust_credibility(ratee_id, +1)

        logger.info(
            "vouch_created",
            vouch_id=vouch.id,
            rater_id=rater.id,
            ratee_id=ratee_id,
            rating=rating,
            trade_id=trade_id,
        )
        return vouch

    async def delete(self, vouch_id: int, actor: User) -> int:
        """Remove a vouch (rater or staff). Returns the ratee's new score."""
        vouch = await self.db.get(Vouch, vouch_id)
        if vouch is None:
            raise NotFoundError("Vouch not found")

        # Vouch.user_id is the ratee; the rater is the owner here
        if vouch.given_by_user_id != actor.id and not can(actor, Action.MODERATE):
            raise PermissionDeniedError("Not authorized to delete this vouch")

        ratee_id = vouch.user_id
        async with atomic(self.db, "vouch_delete"):
            await self.db.delete(vouch)
            await self.db.flush()
            await self._adjust_credibility(ratee_id, -1)

        logger.info("vouch_deleted", vouch_id=vouch_id, ratee_id=ratee_id, user_id=actor.id)
        return await self.credibility(ratee_id)

    async def list_for_user(
        self,
        user_id: int,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> tuple[list[Vouch], int, Optional[float]]:
        """Vouches received by a user, newest first, plus their average rating."""
        if await self.db.get(User, user_id) is None:
            raise NotFoundError("User not found")

        query = (
            select(Vouch)
            .where(Vouch.user_id == user_id)
            .order_by(Vouch.created_at.desc(), Vouch.id.desc())
        )
        vouches, total = await fetch_page(self.db, query, limit, offset)
        average = await self.average_rating(user_id)
        return vouches, total, average

    async def average_rating(self, user_id: int) -> Optional[float]:
        result = await self.db.execute(select(func.avg(Vouch.rating)).where(Vouch.user_id == user_id))
        average = result.scalar()
        return round(float(average), 2) if average is not None else None
