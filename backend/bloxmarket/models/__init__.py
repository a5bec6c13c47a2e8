"""
SQLAlchemy ORM models.
"""
from bloxmarket.models.user import User, RoleHistory
from bloxmarket.models.session import UserSession
from bloxmarket.models.content import Trade, ForumPost, Event, EventParticipant
from bloxmarket.models.engagement import Vote, Comment, Attachment
from bloxmarket.models.wishlist import WishlistItem
from bloxmarket.models.vouch import Vouch
from bloxmarket.models.report import Report
from bloxmarket.models.verification import MiddlemanApplication, VerificationDocument

__all__ = [
    "User",
    "RoleHistory",
    "UserSession",
    "Trade",
    "ForumPost",
    "Event",
    "EventParticipant",
    "Vote",
    "Comment",
    "Attachment",
    "WishlistItem",
    "Vouch",
    "Report",
    "MiddlemanApplication",
    "VerificationDocument",
]
