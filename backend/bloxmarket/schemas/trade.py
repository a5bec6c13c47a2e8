"""Trade listing schemas."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from bloxmarket.core.constants import TradeStatus
from bloxmarket.schemas.common import AuthorBrief, EngagementFields, PaginationMeta


class TradeUpdate(BaseModel):
    item_offered: Optional[str] = Field(None, min_length=1, max_length=200)
    item_requested: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    trade_value: Optional[int] = Field(None, ge=0)


class TradeStatusUpdate(BaseModel):
    status: TradeStatus


class TradeResponse(EngagementFields):
    id: int
    user_id: int
    item_offered: str
    item_requested: Optional[str] = None
    description: Optional[str] = None
    trade_value: Optional[int] = None
    status: TradeStatus
    created_at: datetime
    updated_at: datetime
    author: AuthorBrief = Field(validation_alias="user")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class TradeListResponse(BaseModel):
    trades: list[TradeResponse]
    pagination: PaginationMeta
