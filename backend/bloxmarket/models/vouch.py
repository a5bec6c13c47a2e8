"""
Vouch model.

A vouch is a 1-5 rating one user gives another, optionally tied to a trade.
Each vouch moves the ratee's `credibility_score` by one.
"""
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bloxmarket.db.base import Base
from bloxmarket.models.user import User


class Vouch(Base):
    __tablename__ = "vouches"

    # Ratee
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    # Rater
    given_by_user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    trade_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("trades.id", ondelete="SET NULL"),
        nullable=True,
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    giver: Mapped["User"] = relationship("User", foreign_keys=[given_by_user_id], lazy="joined")

    __table_args__ = (
        UniqueConstraint("given_by_user_id", "user_id", "trade_id", name="uq_vouch_per_trade"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_vouch_rating_range"),
        Index("ix_vouches_user", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Vouch {self.given_by_user_id}->{self.user_id} rating={self.rating}>"
