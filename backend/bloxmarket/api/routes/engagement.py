"""
Vote and comment sub-routes shared by trades, forum posts and events.
"""
from fastapi import APIRouter, status

from bloxmarket.api.deps import CurrentUser, DbSession
from bloxmarket.core.constants import TargetType
from bloxmarket.schemas.common import (
    CommentCreate,
    CommentListResponse,
    CommentResponse,
    VoteRequest,
    VoteResponse,
)
from bloxmarket.services.engagement import CommentService, VoteService


def register_engagement_routes(router: APIRouter, target_type: TargetType) -> None:
    """Add `POST /{id}/vote`, `GET /{id}/comments` and `POST /{id}/comments` to `router`."""

    @router.post("/{target_id}/vote", response_model=VoteResponse)
    async def vote(
        target_id: int,
        body: VoteRequest,
        current_user: CurrentUser,
        db: DbSession,
    ):
        """
        Toggle the caller's vote.

        Same direction again clears the vote; the opposite direction flips it.
        """
        tally = await VoteService(db).toggle(target_type, target_id, current_user, body.direction)
        return VoteResponse(**tally.as_dict())

    @router.get("/{target_id}/comments", response_model=CommentListResponse)
    async def list_comments(target_id: int, db: DbSession):
        """Comments, oldest first."""
        comments = await CommentService(db).list_comments(target_type, target_id)
        return CommentListResponse(
            comments=[CommentResponse.model_validate(comment) for comment in comments],
            total=len(comments),
        )

    @router.post(
        "/{target_id}/comments",
        response_model=CommentResponse,
        status_code=status.HTTP_201_CREATED,
    )
    async def add_comment(
        target_id: int,
        body: CommentCreate,
        current_user: CurrentUser,
        db: DbSession,
    ):
        comment = await CommentService(db).add(target_type, target_id, current_user, body.content)
        return CommentResponse.model_validate(comment)
