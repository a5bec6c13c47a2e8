"""
Community content: trade listings, forum posts and events.

All three share the same engagement surface (votes, comments, image
attachments), kept in `bloxmarket.models.engagement` and keyed by
`(target_type, target_id)`.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bloxmarket.core.constants import (
    ForumCategory,
    EventType,
    TargetType,
    TradeStatus,
)
from bloxmarket.db.base import Base
from bloxmarket.models.user import User


class Trade(Base):
    """A trade offer: what the owner gives and what they want back."""

    __tablename__ = "trades"
    target_type = TargetType.TRADE

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    item_offered: Mapped[str] = mapped_column(String(200), nullable=False)
    item_requested: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    trade_value: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        default=TradeStatus.OPEN.value,
        nullable=False,
        index=True,
    )

    user: Mapped["User"] = relationship("User", lazy="joined")

    def __repr__(self) -> str:
        return f"<Trade id={self.id} user={self.user_id} status={self.status}>"


class ForumPost(Base):
    """A discussion thread."""

    __tablename__ = "forum_posts"
    target_type = TargetType.FORUM_POST

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(
        String(30),
        default=ForumCategory.GENERAL.value,
        nullable=False,
        index=True,
    )

    user: Mapped["User"] = relationship("User", lazy="joined")

    def __repr__(self) -> str:
        return f"<ForumPost id={self.id} user={self.user_id} category={self.category}>"


class Event(Base):
    """
    An event or giveaway.

    Lifecycle (upcoming / active / ending-soon / ended) is derived from
    `starts_at` and `ends_at` when read, never stored.
    """

    __tablename__ = "events"
    target_type = TargetType.EVENT

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    event_type: Mapped[str] = mapped_column(
        String(20),
        default=EventType.EVENT.value,
        nullable=False,
    )
    prize: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    starts_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    ends_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    max_participants: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    user: Mapped["User"] = relationship("User", lazy="joined")

    def __repr__(self) -> str:
        return f"<Event id={self.id} type={self.event_type}>"


class EventParticipant(Base):
    """A user who joined an event or entered a giveaway."""

    __tablename__ = "event_participants"

    event_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="uq_event_participant"),
    )
