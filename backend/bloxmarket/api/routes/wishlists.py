"""
Wishlist endpoints.
"""
from typing import Optional

from fastapi import APIRouter, Query, status

from bloxmarket.api.deps import CurrentUser, DbSession
from bloxmarket.api.utils.pagination import Pagination
from bloxmarket.schemas.common import MessageResponse
from bloxmarket.schemas.wishlist import (
    WishlistItemCreate,
    WishlistItemResponse,
    WishlistItemUpdate,
    WishlistListResponse,
)
from bloxmarket.services.wishlist import WishlistService

router = APIRouter()


@router.get("", response_model=WishlistListResponse)
async def list_wishlists(
    db: DbSession,
    page: Pagination,
    search: Optional[str] = Query(None, max_length=100),
):
    """Everyone's wishlist items, newest first."""
    items, total = await WishlistService(db).list_items(page.limit, page.offset, search=search)
    return WishlistListResponse(
        wishlists=[WishlistItemResponse.model_validate(item) for item in items],
        pagination=page.meta(total),
    )


@router.get("/me", response_model=WishlistListResponse)
async def my_wishlist(current_user: CurrentUser, db: DbSession, page: Pagination):
    items, total = await WishlistService(db).list_items(page.limit, page.offset, user_id=current_user.id)
    return WishlistListResponse(
        wishlists=[WishlistItemResponse.model_validate(item) for item in items],
        pagination=page.meta(total),
    )


@router.post("", response_model=WishlistItemResponse, status_code=status.HTTP_201_CREATED)
async def add_wishlist_item(body: WishlistItemCreate, current_user: CurrentUser, db: DbSession):
    item = await WishlistService(db).create(
        current_user,
        item_name=body.item_name,
        description=body.description,
        max_price=body.max_price,
    )
    return WishlistItemResponse.model_validate(item)


@router.patch("/{item_id}", response_model=WishlistItemResponse)
async def update_wishlist_item(
    item_id: int,
    updates: WishlistItemUpdate,
    current_user: CurrentUser,
    db: DbSession,
):
    service = WishlistService(db)
    item = await service.get(item_id)
    item = await service.update(item, current_user, updates.model_dump(exclude_unset=True))
    return WishlistItemResponse.model_validate(item)


@router.delete("/{item_id}", response_model=MessageResponse)
async def delete_wishlist_item(item_id: int, current_user: CurrentUser, db: DbSession):
    service = WishlistService(db)
    item = await service.get(item_id)
    await service.delete(item, current_user)
    return MessageResponse(message="Item removed from wishlist")
