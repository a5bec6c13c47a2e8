"""User report service."""
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from bloxmarket.db.queries import fetch_page
from bloxmarket.core.constants import DEFAULT_PAGE_SIZE, ReportStatus, ReportType
from bloxmarket.core.exceptions import InvalidInputError, NotFoundError
from bloxmarket.core.permissions import Action, ensure_can
from bloxmarket.models.content import ForumPost
from bloxmarket.models.report import Report
from bloxmarket.models.user import User
from bloxmarket.utils.sanitize import sanitize_optional

logger = get_logger()


class ReportService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        reporter: User,
        reported_user_id: int,
        reason: str,
        report_type: ReportType = ReportType.OTHER,
        post_id: Optional[int] = None,
    ) -> Report:
        if reported_user_id == reporter.id:
            raise InvalidInputError("Cannot report yourself")

        text = sanitize_optional(reason, 2000)
        if not text:
            raise InvalidInputError("Reason is required")

        reported = await self.db.get(User, reported_user_id)
        if reported is None:
            raise NotFoundError("Reported user not found")
        if post_id is not None and await self.db.get(ForumPost, post_id) is None:
            raise NotFoundError("Post not found")

        report = Report(
            reported_user=reported,
            reporter=reporter,
            post_id=post_id,
            reason=text,
            report_type=ReportType(report_type).value,
            status=ReportStatus.PENDING.value,
        )
        self.db.add(report)
        await self.db.flush()

        logger.info(
            "report_filed",
            report_id=report.id,
            reporter_id=reporter.id,
            reported_user_id=reported_user_id,
            report_type=report.report_type,
        )
        return report

    async def list_reports(
        self,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
        status: Optional[ReportStatus] = None,
    ) -> tuple[list[Report], int]:
        query = select(Report)
        if status:
            query = query.where(Report.status == ReportStatus(status).value)
        query = query.order_by(Report.created_at.desc(), Report.id.desc())
        return await fetch_page(self.db, query, limit, offset)

    async def set_status(self, report_id: int, actor: User, status: ReportStatus) -> Report:
        ensure_can(actor, Action.MODERATE)
        report = await self.db.get(Report, report_id)
        if report is None:
            raise NotFoundError("Report not found")

        old_status = report.status
        report.status = ReportStatus(status).value
        await self.db.flush()

        logger.info(
            "report_status_changed",
            report_id=report.id,
            moderator_id=actor.id,
            old_status=old_status,
            new_status=report.status,
        )
        return report
