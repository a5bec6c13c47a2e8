"""Vouch schemas."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from bloxmarket.schemas.common import AuthorBrief, PaginationMeta


class VouchCreate(BaseModel):
    user_id: int
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=1000)
    trade_id: Optional[int] = None


class VouchResponse(BaseModel):
    id: int
    user_id: int
    given_by_user_id: int
    trade_id: Optional[int] = None
    rating: int
    comment: Optional[str] = None
    created_at: datetime
    given_by: AuthorBrief = Field(validation_alias="giver")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class VouchCreatedResponse(BaseModel):
    message: str
    vouch: VouchResponse
    credibility_score: int


class VouchListResponse(BaseModel):
    vouches: list[VouchResponse]
    average_rating: Optional[float] = None
    pagination: PaginationMeta
