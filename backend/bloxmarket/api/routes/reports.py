"""
User report endpoints.
"""
from fastapi import APIRouter, status

from bloxmarket.api.deps import CurrentUser, DbSession
from bloxmarket.schemas.report import ReportCreate, ReportResponse
from bloxmarket.services.reports import ReportService

router = APIRouter()


@router.post("", response_model=ReportResponse, status_code=status.HTTP_201_CREATED)
async def create_report(body: ReportCreate, current_user: CurrentUser, db: DbSession):
    """Report a user, optionally pointing at one of their forum posts."""
    report = await ReportService(db).create(
        current_user,
        reported_user_id=body.reported_user_id,
        reason=body.reason,
        report_type=body.report_type,
        post_id=body.post_id,
    )
    return ReportResponse.model_validate(report)
