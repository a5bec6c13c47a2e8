"""
Middleman verification models.

A MiddlemanApplication moves `pending -> approved` or `pending -> rejected`
and never leaves a terminal state. Documents are uploaded with the
application and can be viewed by the applicant or staff.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bloxmarket.core.constants import ApplicationStatus
from bloxmarket.db.base import Base
from bloxmarket.models.user import User


class MiddlemanApplication(Base):
    __tablename__ = "middleman_applications"

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    experience: Mapped[str] = mapped_column(Text, nullable=False)
    availability: Mapped[str] = mapped_column(Text, nullable=False)
    why_middleman: Mapped[str] = mapped_column(Text, nullable=False)
    referral_codes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    external_links: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    preferred_trade_types: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        default=ApplicationStatus.PENDING.value,
        nullable=False,
        index=True,
    )
    reviewed_by: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # No ORM cascade: the applicant may be deleted out from under a pending application.
    user: Mapped[Optional["User"]] = relationship("User", foreign_keys=[user_id], lazy="joined")
    documents: Mapped[list["VerificationDocument"]] = relationship(
        "VerificationDocument",
        back_populates="application",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="VerificationDocument.id",
    )

    @property
    def is_pending(self) -> bool:
        return self.status == ApplicationStatus.PENDING.value

    def __repr__(self) -> str:
        return f"<MiddlemanApplication id={self.id} user={self.user_id} status={self.status}>"


class VerificationDocument(Base):
    __tablename__ = "verification_documents"

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    application_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("middleman_applications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    document_type: Mapped[str] = mapped_column(String(30), default="middleman_application", nullable=False)
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    original_filename: Mapped[str] = mapped_column(String(255), nullable=False)
    file_path: Mapped[str] = mapped_column(String(500), nullable=False)
    mime_type: Mapped[str] = mapped_column(String(100), nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    application: Mapped["MiddlemanApplication"] = relationship(
        "MiddlemanApplication", back_populates="documents"
    )
