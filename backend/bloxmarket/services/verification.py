"""
Middleman verification workflow.

Applications move `pending -> approved` or `pending -> rejected`; both are
terminal. A user holds at most one pending application at a time.

Review validates everything up front (action, reason, application state,
applicant) and then performs every write inside one transaction, so the
application and the applicant's role change together or not at all.
"""
from typing import Optional

from fastapi import UploadFile
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from bloxmarket.utils.file_validation import DOCUMENT_EXTENSIONS
from bloxmarket.db.queries import fetch_page
from bloxmarket.core.config import settings
from bloxmarket.core.constants import (
    DEFAULT_PAGE_SIZE,
    ApplicationStatus,
    ReviewAction,
    UploadCategory,
    UserRole,
)
from bloxmarket.core.exceptions import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
)
from bloxmarket.core.permissions import Action, ensure_can
from bloxmarket.db.base import utcnow
from bloxmarket.db.transaction import atomic
from bloxmarket.models.content import Trade
from bloxmarket.models.user import RoleHistory, User
from bloxmarket.models.verification import MiddlemanApplication, VerificationDocument
from bloxmarket.models.vouch import Vouch
from bloxmarket.services.uploads import StoredFile, delete_stored_file, save_upload
from bloxmarket.utils.sanitize import sanitize_optional, sanitize_string, split_csv_field

logger = get_logger()


class VerificationService:
    """Service for middleman applications and their documents."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def pending_for(self, user_id: int) -> Optional[MiddlemanApplication]:
        result = await self.db.execute(
            select(MiddlemanApplication).where(
                MiddlemanApplication.user_id == user_id,
                MiddlemanApplication.status == ApplicationStatus.PENDING.value,
            )
        )
        return result.scalars().first()

    async def submit(
        self,
        applicant: User,
        experience: Optional[str],
        availability: Optional[str],
        why_middleman: Optional[str],
        referral_codes: Optional[str] = None,
        external_links: Optional[str] = None,
        preferred_trade_types: Optional[str] = None,
        documents: Optional[list[UploadFile]] = None,
    ) -> MiddlemanApplication:
        """
        File a new application with up to `max_application_documents` files.

        Raises:
            InvalidInputError: missing fields, too many or invalid documents
            ConflictError: the applicant already has a pending application
        """
        experience = sanitize_string(experience, 5000)
        availability = sanitize_string(availability, 2000)
        why_middleman = sanitize_string(why_middleman, 5000)
        if not (experience and availability and why_middleman):
            raise InvalidInputError("Missing required fields")

        documents = [doc for doc in (documents or []) if doc is not None and doc.filename]
        if len(documents) > settings.max_application_documents:
            raise InvalidInputError(
                f"Too many documents. Maximum is {settings.max_application_documents}"
            )

        if await self.pending_for(applicant.id) is not None:
            raise ConflictError("You already have a pending application")

        stored: list[StoredFile] = []
        try:
            for upload in documents:
                stored.append(await save_upload(upload, UploadCategory.DOCUMENTS, DOCUMENT_EXTENSIONS))
        except InvalidInputError:
            for item in stored:
                delete_stored_file(item.path)
            raise

        application = MiddlemanApplication(
            user_id=applicant.id,
            experience=experience,
            availability=availability,
            why_middleman=why_middleman,
            referral_codes=sanitize_optional(referral_codes, 500),
            external_links=split_csv_field(external_links),
            preferred_trade_types=split_csv_field(preferred_trade_types),
            status=ApplicationStatus.PENDING.value,
            documents=[
                VerificationDocument(
                    user_id=applicant.id,
                    filename=item.filename,
                    original_filename=item.original_filename,
                    file_path=item.path,
                    mime_type=item.mime_type,
                    file_size=item.size,
                )
                for item in stored
            ],
        )
        self.db.add(application)
        applicant.middleman_requested = True
        await self.db.flush()

        logger.info(
            "middleman_application_submitted",
            application_id=application.id,
            user_id=applicant.id,
            documents=len(stored),
        )
        return application

    async def latest_for(self, user_id: int) -> MiddlemanApplication:
        result = await self.db.execute(
            select(MiddlemanApplication)
            .where(MiddlemanApplication.user_id == user_id)
            .order_by(MiddlemanApplication.created_at.desc(), MiddlemanApplication.id.desc())
            .limit(1)
        )
        application = result.scalars().first()
        if application is None:
            raise NotFoundError("No application found")
        return application

    async def get(self, application_id: int) -> MiddlemanApplication:
        application = await self.db.get(MiddlemanApplication, application_id)
        if application is None:
            raise NotFoundError("Application not found")
        return application

    async def list_applications(
        self,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
        status: Optional[str] = None,
    ) -> tuple[list[MiddlemanApplication], int]:
        """`status` of None or "all" lists every application."""
        query = select(MiddlemanApplication)
        if status and status != "all":
            try:
                query = query.where(MiddlemanApplication.status == ApplicationStatus(status).value)
            except ValueError:
                raise InvalidInputError("Invalid status filter")
        query = query.order_by(MiddlemanApplication.created_at.desc(), MiddlemanApplication.id.desc())
        return await fetch_page(self.db, query, limit, offset)

    async def counts(self) -> dict[str, int]:
        result = await self.db.execute(
            select(MiddlemanApplication.status, func.count(MiddlemanApplication.id))
            .group_by(MiddlemanApplication.status)
        )
        counts = {status.value: 0 for status in ApplicationStatus}
        counts.update(dict(result.all()))
        counts["total"] = sum(counts[status.value] for status in ApplicationStatus)
        return counts

    async def applicant_activity(self, user_ids: list[int]) -> dict[int, tuple[int, int]]:
        """(trades, vouches received) per applicant."""
        activity = {user_id: (0, 0) for user_id in user_ids}
        if not user_ids:
            return activity

        trades = dict((await self.db.execute(
            select(Trade.user_id, func.count(Trade.id))
            .where(Trade.user_id.in_(user_ids))
            .group_by(Trade.user_id)
        )).all())
        vouches = dict((await self.db.execute(
            select(Vouch.user_id, func.count(Vouch.id))
            .where(Vouch.user_id.in_(user_ids))
            .group_by(Vouch.user_id)
        )).all())
        return {user_id: (trades.get(user_id, 0), vouches.get(user_id, 0)) for user_id in user_ids}

    async def review(
        self,
        application_id: int,
        reviewer: User,
        action: str,
        reason: Optional[str] = None,
    ) -> MiddlemanApplication:
        """
        Approve or reject a pending application.

        Nothing is written until every check has passed:
        1. reviewer is staff (403)
        2. action is approve/reject (400); reject needs a non-empty reason (400)
        3. application exists (404) and is still pending (400 conflict)
        4. applicant still exists (404)

        Approve sets the applicant's role to `middleman` and records the
        previous role in role history. Reject leaves the role alone. Both
        clear `middleman_requested`.
        """
        ensure_can(reviewer, Action.REVIEW_APPLICATION, detail="Staff access required")

        try:
            review_action = ReviewAction(action)
        except ValueError:
            raise InvalidInputError("Invalid action. Must be 'approve' or 'reject'")

        reason = (reason or "").strip()
        if review_action == ReviewAction.REJECT and not reason:
            raise InvalidInputError("Rejection reason is required")

        application = await self.get(application_id)
        if not application.is_pending:
            raise ConflictError(f"Application has already been {application.status}")

        applicant = await self.db.get(User, application.user_id)
        if applicant is None:
            raise NotFoundError("Applicant not found")

        async with atomic(self.db, "middleman_review"):
            application.reviewed_by = reviewer.id
            application.reviewed_at = utcnow()
            applicant.middleman_requested = False

            if review_action == ReviewAction.APPROVE:
                application.status = ApplicationStatus.APPROVED.value
                old_role = applicant.role
                applicant.role = UserRole.MIDDLEMAN.value
                applicant.is_verified = True
                self.db.add(RoleHistory(
                    user_id=applicant.id,
                    old_role=old_role,
                    new_role=UserRole.MIDDLEMAN.value,
                    changed_by=reviewer.id,
                    reason="Middleman application approved",
                ))
            else:
                application.status = ApplicationStatus.REJECTED.value
                application.rejection_reason = sanitize_string(reason, 2000)

            await self.db.flush()

        logger.info(
            "middleman_application_reviewed",
            application_id=application.id,
            applicant_id=applicant.id,
            reviewer_id=reviewer.id,
            action=review_action.value,
        )
        return application

    async def get_document(self, document_id: int, viewer: User) -> VerificationDocument:
        """Owner or staff only."""
        document = await self.db.get(VerificationDocument, document_id)
        if document is None:
            raise NotFoundError("Document not found")
        ensure_can(viewer, Action.VIEW_DOCUMENT, document, detail="Not authorized to view this document")
        return document

    async def middlemen(self) -> list[dict]:
        """Active middlemen with activity counts, rating and verification date."""
        result = await self.db.execute(
            select(User)
            .where(User.role == UserRole.MIDDLEMAN.value, User.is_active == True)  # noqa: E712
            .order_by(User.credibility_score.desc(), User.username)
        )
        users = list(result.scalars().all())
        if not users:
            return []
        user_ids = [user.id for user in users]

        activity = await self.applicant_activity(user_ids)
        ratings = dict((await self.db.execute(
            select(Vouch.user_id, func.avg(Vouch.rating))
            .where(Vouch.user_id.in_(user_ids))
            .group_by(Vouch.user_id)
        )).all())
        verified = dict((await self.db.execute(
            select(RoleHistory.user_id, func.min(RoleHistory.created_at))
            .where(
                RoleHistory.user_id.in_(user_ids),
                RoleHistory.new_role == UserRole.MIDDLEMAN.value,
            )
            .group_by(RoleHistory.user_id)
        )).all())

        return [
            {
                "id": user.id,
                "username": user.username,
                "roblox_username": user.roblox_username,
                "avatar_url": user.avatar_url,
                "bio": user.bio,
                "credibility_score": user.credibility_score,
                "trade_count": activity[user.id][0],
                "vouch_count": activity[user.id][1],
                "average_rating": round(float(ratings[user.id]), 2) if user.id in ratings else None,
                "verified_at": verified.get(user.id),
            }
            for user in users
        ]
