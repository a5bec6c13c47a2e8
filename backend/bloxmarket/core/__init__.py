"""
Core module containing configuration and shared utilities.
"""
from bloxmarket.core.config import settings
from bloxmarket.core.constants import (
    UserRole,
    TradeStatus,
    ForumCategory,
    EventType,
    EventStatus,
    VoteDirection,
    TargetType,
    ApplicationStatus,
    ReviewAction,
    ReportStatus,
    ReportType,
    UploadCategory,
)

__all__ = [
    "settings",
    "UserRole",
    "TradeStatus",
    "ForumCategory",
    "EventType",
    "EventStatus",
    "VoteDirection",
    "TargetType",
    "ApplicationStatus",
    "ReviewAction",
    "ReportStatus",
    "ReportType",
    "UploadCategory",
]
