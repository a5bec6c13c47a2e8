"""
User profile endpoints.
"""
from fastapi import APIRouter, File, UploadFile

from bloxmarket.api.deps import CurrentUser, DbSession, OptionalUser
from bloxmarket.api.routes.trades import build_trade_responses
from bloxmarket.api.utils.pagination import Pagination
from bloxmarket.schemas.auth import UserResponse
from bloxmarket.schemas.trade import TradeListResponse
from bloxmarket.schemas.user import ProfileUpdate, PublicProfile
from bloxmarket.schemas.vouch import VouchListResponse, VouchResponse
from bloxmarket.schemas.wishlist import WishlistItemResponse, WishlistListResponse
from bloxmarket.services.trades import TradeService
from bloxmarket.services.users import UserService
from bloxmarket.services.vouches import VouchService
from bloxmarket.services.wishlist import WishlistService

router = APIRouter()


@router.patch("/me", response_model=UserResponse)
async def update_profile(updates: ProfileUpdate, current_user: CurrentUser, db: DbSession):
    """Update bio, Roblox username, Discord username or timezone."""
    return await UserService(db).update_profile(current_user, updates.model_dump(exclude_unset=True))


@router.post("/me/avatar", response_model=UserResponse)
async def upload_avatar(current_user: CurrentUser, db: DbSession, avatar: UploadFile = File(...)):
    return await UserService(db).set_avatar(current_user, avatar)


@router.get("/{user_id}", response_model=PublicProfile)
async def get_profile(user_id: int, db: DbSession):
    """Public profile with trade, forum and vouch aggregates."""
    service = UserService(db)
    user = await service.get(user_id)
    stats = (await service.stats([user.id]))[user.id]
    return PublicProfile.model_validate(user).model_copy(update=stats)


@router.get("/{user_id}/vouches", response_model=VouchListResponse)
async def get_user_vouches(user_id: int, db: DbSession, page: Pagination):
    vouches, total, average = await VouchService(db).list_for_user(user_id, page.limit, page.offset)
    return VouchListResponse(
        vouches=[VouchResponse.model_validate(vouch) for vouch in vouches],
        average_rating=average,
        pagination=page.meta(total),
    )


@router.get("/{user_id}/wishlist", response_model=WishlistListResponse)
async def get_user_wishlist(user_id: int, db: DbSession, page: Pagination):
    await UserService(db).get(user_id)
    items, total = await WishlistService(db).list_items(page.limit, page.offset, user_id=user_id)
    return WishlistListResponse(
        wishlists=[WishlistItemResponse.model_validate(item) for item in items],
        pagination=page.meta(total),
    )


@router.get("/{user_id}/trades", response_model=TradeListResponse)
async def get_user_trades(user_id: int, db: DbSession, page: Pagination, viewer: OptionalUser):
    await UserService(db).get(user_id)
    service = TradeService(db)
    trades, total = await service.list_trades(page.limit, page.offset, user_id=user_id)
    return TradeListResponse(
        trades=await build_trade_responses(service, trades, viewer),
        pagination=page.meta(total),
    )
