"""
User model for authentication, roles and reputation.
"""
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bloxmarket.core.constants import UserRole
from bloxmarket.db.base import Base

if TYPE_CHECKING:
    from bloxmarket.models.session import UserSession


class User(Base):
    """
    A marketplace account.

    Passwords are stored using bcrypt hashing. `credibility_score` is a
    running counter moved by vouches; `role_history` is append-only.
    """

    __tablename__ = "users"

    # Core user fields
    username: Mapped[str] = mapped_column(
        String(30),
        unique=True,
        nullable=False,
        index=True
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True
    )
    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False
    )

    # Profile fields
    roblox_username: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    avatar_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    discord_username: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    timezone: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    # Role and reputation
    role: Mapped[str] = mapped_column(
        String(20),
        default=UserRole.USER.value,
        nullable=False,
        index=True,
    )
    credibility_score: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    middleman_requested: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Account status
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    ban_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    deactivation_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    last_login: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    sessions: Mapped[list["UserSession"]] = relationship(
        "UserSession",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    role_history: Mapped[list["RoleHistory"]] = relationship(
        "RoleHistory",
        foreign_keys="RoleHistory.user_id",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="RoleHistory.id",
    )

    @property
    def is_banned(self) -> bool:
        return self.role == UserRole.BANNED.value

    def __repr__(self) -> str:
        return f"<User {self.username} role={self.role}>"


class RoleHistory(Base):
    """One role change: who changed it, from what, to what, and why."""

    __tablename__ = "role_history"

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    old_role: Mapped[str] = mapped_column(String(20), nullable=False)
    new_role: Mapped[str] = mapped_column(String(20), nullable=False)
    changed_by: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    user: Mapped["User"] = relationship(
        "User",
        foreign_keys=[user_id],
        back_populates="role_history",
    )

    def __repr__(self) -> str:
        return f"<RoleHistory user={self.user_id} {self.old_role}->{self.new_role}>"
