"""
Trade listing service.

Handles:
- Creating listings with optional images
- Filtered, paginated browsing
- Owner/staff edits and status changes
"""
from typing import Optional

from fastapi import UploadFile
from sqlalchemy import select
from structlog import get_logger

from bloxmarket.core.constants import DEFAULT_PAGE_SIZE, TargetType, TradeStatus
from bloxmarket.core.exceptions import InvalidInputError
from bloxmarket.core.permissions import Action, ensure_can
from bloxmarket.models.content import Trade
from bloxmarket.models.user import User
from bloxmarket.services.content import ContentService

logger = get_logger()


class TradeService(ContentService[Trade]):
    """Service for managing trade listings."""

    model = Trade
    target_type = TargetType.TRADE
    text_fields = {"item_offered": 200, "item_requested": 200, "description": 5000}
    search_fields = ("item_offered", "item_requested", "description")
    required_fields = ("item_offered",)

    async def create(
        self,
        actor: User,
        item_offered: str,
        item_requested: Optional[str] = None,
        description: Optional[str] = None,
        trade_value: Optional[int] = None,
        images: Optional[list[UploadFile]] = None,
    ) -> Trade:
        """Create an open trade listing owned by `actor`."""
        fields = self.clean({
            "item_offered": item_offered,
            "item_requested": item_requested,
            "description": description,
        })
        if not fields["item_offered"]:
            raise InvalidInputError("Item offered is required")
        if trade_value is not None and trade_value < 0:
            raise InvalidInputError("Trade value cannot be negative")

        trade = Trade(
            user=actor,
            status=TradeStatus.OPEN.value,
            trade_value=trade_value,
            **fields,
        )
        self.db.add(trade)
        await self.db.flush()

        if images:
            await self.engagement.attach_images(self.target_type, trade.id, actor, images)

        logger.info("trade_created", trade_id=trade.id, user_id=actor.id)
        return trade

    async def list_trades(
        self,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
        status: Optional[TradeStatus] = None,
        search: Optional[str] = None,
        user_id: Optional[int] = None,
    ) -> tuple[list[Trade], int]:
        """Newest first."""
        query = select(Trade)
        if status:
            query = query.where(Trade.status == TradeStatus(status).value)
        if user_id:
            query = query.where(Trade.user_id == user_id)
        query = self.apply_search(query, search)
        return await self.page(query, limit, offset)

    async def set_status(self, trade: Trade, actor: User, status: TradeStatus) -> Trade:
        ensure_can(actor, Action.UPDATE, trade, detail="Not authorized to update this trade")
        old_status = trade.status
        trade.status = TradeStatus(status).value
        await self.db.flush()

        logger.info(
            "trade_status_changed",
            trade_id=trade.id,
            user_id=actor.id,
            old_status=old_status,
            new_status=trade.status,
        )
        return trade
