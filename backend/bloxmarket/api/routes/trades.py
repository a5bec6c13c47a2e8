"""
Trade listing endpoints.
"""
from typing import Optional

from fastapi import APIRouter, File, Form, Query, UploadFile, status

from bloxmarket.api.deps import CurrentUser, DbSession, OptionalUser
from bloxmarket.api.routes.engagement import register_engagement_routes
from bloxmarket.api.utils.pagination import Pagination
from bloxmarket.core.constants import TargetType, TradeStatus
from bloxmarket.models.content import Trade
from bloxmarket.models.user import User
from bloxmarket.schemas.common import MessageResponse
from bloxmarket.schemas.trade import (
    TradeListResponse,
    TradeResponse,
    TradeStatusUpdate,
    TradeUpdate,
)
from bloxmarket.services.trades import TradeService

router = APIRouter()


async def build_trade_responses(
    service: TradeService,
    trades: list[Trade],
    viewer: Optional[User],
) -> list[TradeResponse]:
    engagement = await service.summarize(trades, viewer)
    return [TradeResponse.build(trade, engagement[trade.id].as_dict()) for trade in trades]


async def build_trade_response(service: TradeService, trade: Trade, viewer: Optional[User]) -> TradeResponse:
    return (await build_trade_responses(service, [trade], viewer))[0]


@router.get("", response_model=TradeListResponse)
async def list_trades(
    db: DbSession,
    page: Pagination,
    viewer: OptionalUser,
    trade_status: Optional[TradeStatus] = Query(None, alias="status", description="Filter by status"),
    search: Optional[str] = Query(None, max_length=100, description="Search items and description"),
    user_id: Optional[int] = Query(None, description="Only trades of this user"),
):
    """Browse trades, newest first."""
    service = TradeService(db)
    trades, total = await service.list_trades(page.limit, page.offset, status=trade_status, search=search, user_id=user_id)
    return TradeListResponse(
        trades=await build_trade_responses(service, trades, viewer),
        pagination=page.meta(total),
    )


@router.post("", response_model=TradeResponse, status_code=status.HTTP_201_CREATED)
async def create_trade(
    current_user: CurrentUser,
    db: DbSession,
    item_offered: str = Form(..., max_length=200),
    item_requested: Optional[str] = Form(None, max_length=200),
    description: Optional[str] = Form(None, max_length=5000),
    trade_value: Optional[int] = Form(None, ge=0),
    images: Optional[list[UploadFile]] = File(None),
):
    """
    Create a trade listing (multipart form).

    Up to five images may be attached under the `images` field.
    """
    service = TradeService(db)
    trade = await service.create(
        current_user,
        item_offered=item_offered,
        item_requested=item_requested,
        description=description,
        trade_value=trade_value,
        images=images,
    )
    return await build_trade_response(service, trade, current_user)


@router.get("/{trade_id}", response_model=TradeResponse)
async def get_trade(trade_id: int, db: DbSession, viewer: OptionalUser):
    service = TradeService(db)
    trade = await service.get(trade_id)
    return await build_trade_response(service, trade, viewer)


@router.patch("/{trade_id}", response_model=TradeResponse)
async def update_trade(
    trade_id: int,
    updates: TradeUpdate,
    current_user: CurrentUser,
    db: DbSession,
):
    service = TradeService(db)
    trade = await service.get(trade_id)
    trade = await service.update(trade, current_user, updates.model_dump(exclude_unset=True))
    return await build_trade_response(service, trade, current_user)


@router.patch("/{trade_id}/status", response_model=TradeResponse)
async def update_trade_status(
    trade_id: int,
    body: TradeStatusUpdate,
    current_user: CurrentUser,
    db: DbSession,
):
    service = TradeService(db)
    trade = await service.get(trade_id)
    trade = await service.set_status(trade, current_user, body.status)
    return await build_trade_response(service, trade, current_user)


@router.delete("/{trade_id}", response_model=MessageResponse)
async def delete_trade(trade_id: int, current_user: CurrentUser, db: DbSession):
    service = TradeService(db)
    trade = await service.get(trade_id)
    await service.delete(trade, current_user)
    return MessageResponse(message="Trade deleted successfully")


register_engagement_routes(router, TargetType.TRADE)
