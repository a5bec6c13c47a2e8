"""
Middleman verification schemas.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from bloxmarket.core.constants import ApplicationStatus
from bloxmarket.schemas.common import AuthorBrief, PaginationMeta


class ApplicationSubmittedResponse(BaseModel):
    message: str
    application_id: int = Field(alias="applicationId")

    model_config = ConfigDict(populate_by_name=True)


class DocumentResponse(BaseModel):
    id: int
    document_type: str
    original_filename: str
    mime_type: str
    file_size: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ApplicationResponse(BaseModel):
    id: int
    user_id: int
    experience: str
    availability: str
    why_middleman: str
    referral_codes: Optional[str] = None
    external_links: list[str] = []
    preferred_trade_types: list[str] = []
    status: ApplicationStatus
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    documents: list[DocumentResponse] = []

    model_config = ConfigDict(from_attributes=True)


class ApplicationDetail(ApplicationResponse):
    """Staff view: applicant brief plus trade and vouch counts."""
    applicant: Optional[AuthorBrief] = Field(default=None, validation_alias="user")
    trades: int = 0
    vouches: int = 0

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class ApplicationCounts(BaseModel):
    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0


class ApplicationListResponse(BaseModel):
    applications: list[ApplicationDetail]
    counts: ApplicationCounts
    pagination: PaginationMeta


class ReviewRequest(BaseModel):
    # Plain str: an unknown action is reported by the review workflow.
    action: str
    reason: Optional[str] = None


class ReviewResponse(BaseModel):
    message: str
    application: ApplicationResponse


class MiddlemanResponse(BaseModel):
    id: int
    username: str
    roblox_username: Optional[str] = None
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    credibility_score: int
    trade_count: int = 0
    vouch_count: int = 0
    average_rating: Optional[float] = None
    verified_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class MiddlemanListResponse(BaseModel):
    middlemen: list[MiddlemanResponse]
