"""
Votes, comments and image attachments shared by trades, forum posts and
events.

Rows point at their target with `(target_type, target_id)`; there is no
foreign key because the target lives in one of three tables. Services delete
them together with the target.
"""
from typing import Optional

from sqlalchemy import (
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bloxmarket.db.base import Base
from bloxmarket.models.user import User


class Vote(Base):
    """
    A user's vote on one target.

    At most one row per (target, user): the unique constraint is what makes
    "up and down at the same time" impossible. No row means no vote.
    """

    __tablename__ = "votes"

    target_type: Mapped[str] = mapped_column(String(20), nullable=False)
    target_id: Mapped[int] = mapped_column(Integer, nullable=False)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    direction: Mapped[str] = mapped_column(String(4), nullable=False)

    __table_args__ = (
        UniqueConstraint("target_type", "target_id", "user_id", name="uq_vote_per_user"),
        Index("ix_votes_target", "target_type", "target_id"),
    )

    def __repr__(self) -> str:
        return f"<Vote {self.target_type}:{self.target_id} user={self.user_id} {self.direction}>"


class Comment(Base):
    """A comment appended to a trade, forum post or event."""

    __tablename__ = "comments"

    target_type: Mapped[str] = mapped_column(String(20), nullable=False)
    target_id: Mapped[int] = mapped_column(Integer, nullable=False)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)

    user: Mapped["User"] = relationship("User", lazy="joined")

    __table_args__ = (
        Index("ix_comments_target", "target_type", "target_id", "created_at"),
    )


class Attachment(Base):
    """An uploaded image attached to a trade, forum post or event."""

    __tablename__ = "attachments"

    target_type: Mapped[str] = mapped_column(String(20), nullable=False)
    target_id: Mapped[int] = mapped_column(Integer, nullable=False)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    file_path: Mapped[str] = mapped_column(String(500), nullable=False)
    url: Mapped[str] = mapped_column(String(500), nullable=False)
    original_filename: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    mime_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    file_size: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    __table_args__ = (
        Index("ix_attachments_target", "target_type", "target_id"),
    )
