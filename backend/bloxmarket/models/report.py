"""User reports reviewed by moderators."""
from typing import Optional

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bloxmarket.core.constants import ReportStatus, ReportType
from bloxmarket.db.base import Base
from bloxmarket.models.user import User


class Report(Base):
    __tablename__ = "reports"

    reported_user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    reported_by_user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    post_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("forum_posts.id", ondelete="SET NULL"),
        nullable=True,
    )
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    report_type: Mapped[str] = mapped_column(
        String(30),
        default=ReportType.OTHER.value,
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        default=ReportStatus.PENDING.value,
        nullable=False,
        index=True,
    )

    reported_user: Mapped["User"] = relationship(
        "User", foreign_keys=[reported_user_id], lazy="joined"
    )
    reporter: Mapped["User"] = relationship(
        "User", foreign_keys=[reported_by_user_id], lazy="joined"
    )

    def __repr__(self) -> str:
        return f"<Report id={self.id} type={self.report_type} status={self.status}>"
