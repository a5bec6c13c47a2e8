"""
Middleman verification endpoints.
"""
import os
from typing import Optional

from fastapi import APIRouter, File, Form, Query, UploadFile, status
from fastapi.responses import FileResponse

from bloxmarket.api.deps import CurrentUser, DbSession, ModeratorUser
from bloxmarket.api.utils.pagination import Pagination
from bloxmarket.core.exceptions import NotFoundError
from bloxmarket.models.verification import MiddlemanApplication
from bloxmarket.schemas.verification import (
    ApplicationCounts,
    ApplicationDetail,
    ApplicationListResponse,
    ApplicationResponse,
    ApplicationSubmittedResponse,
    MiddlemanListResponse,
    MiddlemanResponse,
    ReviewRequest,
    ReviewResponse,
)
from bloxmarket.services.verification import VerificationService

router = APIRouter()


async def build_details(
    service: VerificationService,
    applications: list[MiddlemanApplication],
) -> list[ApplicationDetail]:
    activity = await service.applicant_activity(sorted({app.user_id for app in applications}))
    return [
        ApplicationDetail.model_validate(app).model_copy(update={
            "trades": activity[app.user_id][0],
            "vouches": activity[app.user_id][1],
        })
        for app in applications
    ]


@router.post("/apply", response_model=ApplicationSubmittedResponse, status_code=status.HTTP_201_CREATED)
async def apply(
    current_user: CurrentUser,
    db: DbSession,
    experience: Optional[str] = Form(None),
    availability: Optional[str] = Form(None),
    why_middleman: Optional[str] = Form(None),
    referral_codes: Optional[str] = Form(None),
    external_links: Optional[str] = Form(None, description="Comma-separated"),
    preferred_trade_types: Optional[str] = Form(None, description="Comma-separated"),
    documents: Optional[list[UploadFile]] = File(None),
):
    """
    Apply to become a middleman (multipart form).

    Up to five supporting documents (jpg, jpeg, png, gif or pdf, 10MB each).
    """
    application = await VerificationService(db).submit(
        current_user,
        experience=experience,
        availability=availability,
        why_middleman=why_middleman,
        referral_codes=referral_codes,
        external_links=external_links,
        preferred_trade_types=preferred_trade_types,
        documents=documents,
    )
    return ApplicationSubmittedResponse(
        message="Application submitted successfully",
        application_id=application.id,
    )


@router.get("/my-application", response_model=ApplicationResponse)
async def my_application(current_user: CurrentUser, db: DbSession):
    """The caller's most recent application."""
    return await VerificationService(db).latest_for(current_user.id)


@router.get("/applications", response_model=ApplicationListResponse)
async def list_applications(
    moderator: ModeratorUser,
    db: DbSession,
    page: Pagination,
    application_status: str = Query("all", alias="status", description="pending, approved, rejected or all"),
):
    service = VerificationService(db)
    applications, total = await service.list_applications(page.limit, page.offset, status=application_status)
    return ApplicationListResponse(
        applications=await build_details(service, applications),
        counts=ApplicationCounts(**await service.counts()),
        pagination=page.meta(total),
    )


@router.get("/applications/{application_id}", response_model=ApplicationDetail)
async def get_application(application_id: int, moderator: ModeratorUser, db: DbSession):
    service = VerificationService(db)
    application = await service.get(application_id)
    return (await build_details(service, [application]))[0]


@router.post("/applications/{application_id}/review", response_model=ReviewResponse)
async def review_application(
    application_id: int,
    body: ReviewRequest,
    moderator: ModeratorUser,
    db: DbSession,
):
    """
    Approve or reject a pending application.

    Rejection requires a reason. Approval makes the applicant a middleman.
    """
    application = await VerificationService(db).review(
        application_id,
        moderator,
        action=body.action,
        reason=body.reason,
    )
    return ReviewResponse(
        message=f"Application {application.status} successfully",
        application=ApplicationResponse.model_validate(application),
    )


@router.get("/middlemen", response_model=MiddlemanListResponse)
async def list_middlemen(current_user: CurrentUser, db: DbSession):
    """Verified middlemen with their activity and rating."""
    middlemen = await VerificationService(db).middlemen()
    return MiddlemanListResponse(middlemen=[MiddlemanResponse(**row) for row in middlemen])


@router.get("/documents/{document_id}")
async def get_document(document_id: int, current_user: CurrentUser, db: DbSession):
    """Stream a verification document to its owner or staff."""
    document = await VerificationService(db).get_document(document_id, current_user)
    if not os.path.isfile(document.file_path):
        raise NotFoundError("Document file not found")
    return FileResponse(
        document.file_path,
        media_type=document.mime_type,
        filename=document.original_filename,
    )
