"""Wishlist schemas."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from bloxmarket.schemas.common import AuthorBrief, PaginationMeta


class WishlistItemCreate(BaseModel):
    item_name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    max_price: Optional[int] = Field(None, ge=0)


class WishlistItemUpdate(BaseModel):
    item_name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    max_price: Optional[int] = Field(None, ge=0)


class WishlistItemResponse(BaseModel):
    id: int
    user_id: int
    item_name: str
    description: Optional[str] = None
    max_price: Optional[int] = None
    created_at: datetime
    owner: AuthorBrief = Field(validation_alias="user")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class WishlistListResponse(BaseModel):
    wishlists: list[WishlistItemResponse]
    pagination: PaginationMeta
