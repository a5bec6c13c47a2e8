"""
Pydantic schemas for API request/response validation.
"""
from bloxmarket.schemas.common import (
    MessageResponse,
    PaginationMeta,
    AuthorBrief,
    VoteRequest,
    VoteResponse,
    CommentCreate,
    CommentResponse,
    CommentListResponse,
    AttachmentResponse,
)
from bloxmarket.schemas.auth import UserRegister, UserLogin, UserResponse, AuthResponse

__all__ = [
    "MessageResponse",
    "PaginationMeta",
    "AuthorBrief",
    "VoteRequest",
    "VoteResponse",
    "CommentCreate",
    "CommentResponse",
    "CommentListResponse",
    "AttachmentResponse",
    "UserRegister",
    "UserLogin",
    "UserResponse",
    "AuthResponse",
]
