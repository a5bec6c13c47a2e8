"""Report schemas."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from bloxmarket.core.constants import ReportStatus, ReportType
from bloxmarket.schemas.common import AuthorBrief, PaginationMeta


class ReportCreate(BaseModel):
    reported_user_id: int
    reason: str = Field(..., min_length=1, max_length=2000)
    report_type: ReportType = ReportType.OTHER
    post_id: Optional[int] = None


class ReportStatusUpdate(BaseModel):
    status: ReportStatus


class ReportResponse(BaseModel):
    id: int
    reported_user_id: int
    reported_by_user_id: int
    post_id: Optional[int] = None
    reason: str
    report_type: ReportType
    status: ReportStatus
    created_at: datetime
    updated_at: datetime
    reported_user: Optional[AuthorBrief] = None
    reporter: Optional[AuthorBrief] = None

    model_config = ConfigDict(from_attributes=True)


class ReportListResponse(BaseModel):
    reports: list[ReportResponse]
    pagination: PaginationMeta
