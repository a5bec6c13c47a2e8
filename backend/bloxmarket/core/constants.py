"""
Core enums shared by models, schemas and services.

String-valued enums so they serialize to the same values the web client
already understands.
"""
from enum import Enum


class UserRole(str, Enum):
    """Platform roles. `banned` doubles as the ban flag."""
    USER = "user"
    MODERATOR = "moderator"
    ADMIN = "admin"
    MIDDLEMAN = "middleman"
    BANNED = "banned"


STAFF_ROLES = frozenset({UserRole.ADMIN, UserRole.MODERATOR})


class TradeStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ForumCategory(str, Enum):
    GENERAL = "general"
    TRADING_TIPS = "trading_tips"
    SCAM_REPORTS = "scam_reports"
    GAME_UPDATES = "game_updates"
    OFF_TOPIC = "off_topic"


class EventType(str, Enum):
    EVENT = "event"
    GIVEAWAY = "giveaway"
    COMPETITION = "competition"
    TOURNAMENT = "tournament"


class EventStatus(str, Enum):
    """Event lifecycle, derived from start/end timestamps at read time."""
    UPCOMING = "upcoming"
    ACTIVE = "active"
    ENDING_SOON = "ending-soon"
    ENDED = "ended"


class VoteDirection(str, Enum):
    UP = "up"
    DOWN = "down"

    @property
    def opposite(self) -> "VoteDirection":
        return VoteDirection.DOWN if self is VoteDirection.UP else VoteDirection.UP


class TargetType(str, Enum):
    """Content kinds that carry votes, comments and attachments."""
    TRADE = "trade"
    FORUM_POST = "forum_post"
    EVENT = "event"

    @property
    def label(self) -> str:
        return {
            TargetType.TRADE: "trade",
            TargetType.FORUM_POST: "post",
            TargetType.EVENT: "event",
        }[self]


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ReviewAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


class ReportStatus(str, Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    RESOLVED = "resolved"


class ReportType(str, Enum):
    SCAMMING = "scamming"
    HARASSMENT = "harassment"
    INAPPROPRIATE_CONTENT = "inappropriate_content"
    SPAM = "spam"
    IMPERSONATION = "impersonation"
    OTHER = "other"


class UploadCategory(str, Enum):
    """Sub-directories under the upload root, served at /uploads/<category>."""
    TRADES = "trades"
    FORUM = "forum"
    EVENT = "event"
    AVATARS = "avatars"
    DOCUMENTS = "documents"


TARGET_UPLOAD_CATEGORY: dict[TargetType, UploadCategory] = {
    TargetType.TRADE: UploadCategory.TRADES,
    TargetType.FORUM_POST: UploadCategory.FORUM,
    TargetType.EVENT: UploadCategory.EVENT,
}

# Page size bounds for list endpoints
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
