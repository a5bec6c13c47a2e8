"""
Admin dashboard endpoints.

Reads are open to moderators; role and account-status changes need an admin.
"""
from typing import Optional

from fastapi import APIRouter, Query

from bloxmarket.api.deps import AdminUser, DbSession, ModeratorUser
from bloxmarket.api.utils.pagination import Pagination
from bloxmarket.core.constants import ReportStatus, UserRole
from bloxmarket.schemas.admin import (
    AdminUserListResponse,
    AdminUserRow,
    PlatformStats,
    RoleUpdate,
    StatusUpdate,
)
from bloxmarket.schemas.report import ReportListResponse, ReportResponse, ReportStatusUpdate
from bloxmarket.services.admin import AdminService
from bloxmarket.services.reports import ReportService

router = APIRouter()


@router.get("/stats", response_model=PlatformStats)
async def get_stats(moderator: ModeratorUser, db: DbSession):
    return PlatformStats(**await AdminService(db).stats())


@router.get("/users", response_model=AdminUserListResponse)
async def list_users(
    moderator: ModeratorUser,
    db: DbSession,
    page: Pagination,
    search: Optional[str] = Query(None, max_length=100, description="Match username or email"),
    role: Optional[UserRole] = Query(None),
):
    users, total = await AdminService(db).list_users(page.limit, page.offset, search=search, role=role)
    return AdminUserListResponse(
        users=[AdminUserRow.model_validate(user) for user in users],
        pagination=page.meta(total),
    )


@router.patch("/users/{user_id}/role", response_model=AdminUserRow)
async def change_user_role(user_id: int, body: RoleUpdate, admin: AdminUser, db: DbSession):
    """Change a user's role; `banned` also records the ban reason."""
    user = await AdminService(db).change_role(admin, user_id, body.role, body.reason)
    return AdminUserRow.model_validate(user)


@router.patch("/users/{user_id}/status", response_model=AdminUserRow)
async def change_user_status(user_id: int, body: StatusUpdate, admin: AdminUser, db: DbSession):
    """Activate or deactivate an account."""
    user = await AdminService(db).set_active(admin, user_id, body.is_active, body.reason)
    return AdminUserRow.model_validate(user)


@router.get("/reports", response_model=ReportListResponse)
async def list_reports(
    moderator: ModeratorUser,
    db: DbSession,
    page: Pagination,
    report_status: Optional[ReportStatus] = Query(None, alias="status"),
):
    reports, total = await ReportService(db).list_reports(page.limit, page.offset, status=report_status)
    return ReportListResponse(
        reports=[ReportResponse.model_validate(report) for report in reports],
        pagination=page.meta(total),
    )


@router.patch("/reports/{report_id}", response_model=ReportResponse)
async def update_report(report_id: int, body: ReportStatusUpdate, moderator: ModeratorUser, db: DbSession):
    report = await ReportService(db).set_status(report_id, moderator, body.status)
    return ReportResponse.model_validate(report)
