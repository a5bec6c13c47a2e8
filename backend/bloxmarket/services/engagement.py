"""
Votes, comments and image attachments shared by trades, forum posts and
events.

`VoteService.toggle` implements the three-way vote state change:

    none -> up/down       insert a vote row
    up -> up, down -> down   delete the row (retraction)
    up -> down, down -> up   update the row (flip)

One row per (target, user) is guaranteed by a unique constraint, so a user
can never be counted on both sides.
"""
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Iterable, Optional, Union

from fastapi import UploadFile
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from bloxmarket.utils.file_validation import IMAGE_EXTENSIONS
from bloxmarket.core.config import settings
from bloxmarket.core.constants import TARGET_UPLOAD_CATEGORY, TargetType, VoteDirection
from bloxmarket.core.exceptions import InvalidInputError, NotFoundError
from bloxmarket.core.permissions import Action, ensure_can
from bloxmarket.db.transaction import savepoint
from bloxmarket.models.content import Event, ForumPost, Trade
from bloxmarket.models.engagement import Attachment, Comment, Vote
from bloxmarket.models.user import User
from bloxmarket.schemas.common import AttachmentResponse
from bloxmarket.services.uploads import StoredFile, delete_after_commit, delete_stored_file, save_upload
from bloxmarket.utils.sanitize import sanitize_string

logger = structlog.get_logger()

Target = Union[Trade, ForumPost, Event]

TARGET_MODELS: dict[TargetType, type] = {
    TargetType.TRADE: Trade,
    TargetType.FORUM_POST: ForumPost,
    TargetType.EVENT: Event,
}


async def load_target(db: AsyncSession, target_type: TargetType, target_id: int) -> Target:
    """Fetch a trade, forum post or event, or raise NotFoundError."""
    target = await db.get(TARGET_MODELS[target_type], target_id)
    if target is None:
        raise NotFoundError(f"{target_type.label.capitalize()} not found")
    return target


@dataclass
class VoteTally:
    upvotes: int = 0
    downvotes: int = 0
    user_vote: Optional[VoteDirection] = None

    def as_dict(self) -> dict:
        return {"upvotes": self.upvotes, "downvotes": self.downvotes, "user_vote": self.user_vote}


@dataclass
class Engagement:
    """Everything a content read needs besides the row itself."""
    tally: VoteTally = field(default_factory=VoteTally)
    comment_count: int = 0
    images: list[AttachmentResponse] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            **self.tally.as_dict(),
            "comment_count": self.comment_count,
            "images": self.images,
        }


class VoteService:
    """Vote toggling and tallies."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def toggle(
        self,
        target_type: TargetType,
        target_id: int,
        actor: User,
        direction: VoteDirection,
    ) -> VoteTally:
        """
        Apply `direction` for `actor` on the target and return the new tally.

        Raises:
            NotFoundError: target does not exist
            InvalidInputError: actor owns the target
            ConflictError: a concurrent request inserted the same vote
        """
        direction = VoteDirection(direction)
        target = await load_target(self.db, target_type, target_id)
        ensure_can(actor, Action.VOTE, target, detail=f"Cannot vote on your own {target_type.label}")

        result = await self.db.execute(
            select(Vote).where(
                Vote.target_type == target_type.value,
                Vote.target_id == target_id,
                Vote.user_id == actor.id,
            )
        )
        existing = result.scalar_one_or_none()

        if existing is None:
            async with savepoint(
                self.db, "vote_insert", conflict="Vote already recorded, please retry"
            ):
                self.db.add(Vote(
                    target_type=target_type.value,
                    target_id=target_id,
                    user_id=actor.id,
                    direction=direction.value,
                ))
                await self.db.flush()
            outcome = "cast"
        elif existing.direction == direction.value:
            await self.db.delete(existing)
            await self.db.flush()
            outcome = "retracted"
        else:
            existing.direction = direction.value
            await self.db.flush()
            outcome = "flipped"

        logger.info(
            "vote_recorded",
            target_type=target_type.value,
            target_id=target_id,
            user_id=actor.id,
            direction=direction.value,
            outcome=outcome,
        )
        tallies = await self.tally_many(target_type, [target_id], actor)
        return tallies[target_id]

    async def tally_many(
        self,
        target_type: TargetType,
        target_ids: Iterable[int],
        viewer: Optional[User] = None,
    ) -> dict[int, VoteTally]:
        """Up/down counts for several targets plus the viewer's own vote on each."""
        ids = list(target_ids)
        tallies = {target_id: VoteTally() for target_id in ids}
        if not ids:
            return tallies

        result = await self.db.execute(
            select(Vote.target_id, Vote.direction, func.count(Vote.id))
            .where(Vote.target_type == target_type.value, Vote.target_id.in_(ids))
            .group_by(Vote.target_id, Vote.direction)
        )
        for target_id, direction, count in result.all():
            if direction == VoteDirection.UP.value:
                tallies[target_id].upvotes = count
            else:
                tallies[target_id].downvotes = count

        if viewer is not None:
            result = await self.db.execute(
                select(Vote.target_id, Vote.direction).where(
                    Vote.target_type == target_type.value,
                    Vote.target_id.in_(ids),
                    Vote.user_id == viewer.id,
                )
            )
            for target_id, direction in result.all():
                tallies[target_id].user_vote = VoteDirection(direction)

        return tallies


class CommentService:
    """Append-only comments."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def add(
        self,
        target_type: TargetType,
        target_id: int,
        actor: User,
        content: str,
    ) -> Comment:
        """Append a comment; the author brief is resolved from `actor` right away."""
        await load_target(self.db, target_type, target_id)

        text = sanitize_string(content, max_length=2000)
        if not text:
            raise InvalidInputError("Comment content is required")

        comment = Comment(
            target_type=target_type.value,
            target_id=target_id,
            user=actor,
            content=text,
        )
        self.db.add(comment)
        await self.db.flush()

        logger.info(
            "comment_added",
            target_type=target_type.value,
            target_id=target_id,
            comment_id=comment.id,
            user_id=actor.id,
        )
        return comment

    async def list_comments(self, target_type: TargetType, target_id: int) -> list[Comment]:
        """Comments on a target, oldest first."""
        await load_target(self.db, target_type, target_id)
        result = await self.db.execute(
            select(Comment)
            .where(Comment.target_type == target_type.value, Comment.target_id == target_id)
            .order_by(Comment.created_at.asc(), Comment.id.asc())
        )
        return list(result.scalars().all())

    async def count_many(self, target_type: TargetType, target_ids: Iterable[int]) -> dict[int, int]:
        ids = list(target_ids)
        if not ids:
            return {}
        result = await self.db.execute(
            select(Comment.target_id, func.count(Comment.id))
            .where(Comment.target_type == target_type.value, Comment.target_id.in_(ids))
            .group_by(Comment.target_id)
        )
        return dict(result.all())


class EngagementService:
    """Attachments, cascade cleanup and the combined read-side summary."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.votes = VoteService(db)
        self.comments = CommentService(db)

    async def attach_images(
        self,
        target_type: TargetType,
        target_id: int,
        actor: User,
        images: list[UploadFile],
    ) -> list[Attachment]:
        """Store uploaded images and attach them to the target."""
        images = [image for image in images if image is not None and image.filename]
        if len(images) > settings.max_post_images:
            raise InvalidInputError(f"At most {settings.max_post_images} images are allowed")

        stored_files: list[StoredFile] = []
        try:
            for image in images:
                stored_files.append(
                    await save_upload(image, TARGET_UPLOAD_CATEGORY[target_type], IMAGE_EXTENSIONS)
                )
        except InvalidInputError:
            for stored in stored_files:
                delete_stored_file(stored.path)
            raise

        attachments = []
        for stored in stored_files:
            attachment = Attachment(
                target_type=target_type.value,
                target_id=target_id,
                user_id=actor.id,
                file_path=stored.path,
                url=stored.url,
                original_filename=stored.original_filename,
                mime_type=stored.mime_type,
                file_size=stored.size,
            )
            self.db.add(attachment)
            attachments.append(attachment)

        if attachments:
            await self.db.flush()
        return attachments

    async def summarize(
        self,
        target_type: TargetType,
        target_ids: Iterable[int],
        viewer: Optional[User] = None,
    ) -> dict[int, Engagement]:
        ids = list(target_ids)
        tallies = await self.votes.tally_many(target_type, ids, viewer)
        comment_counts = await self.comments.count_many(target_type, ids)

        images: dict[int, list[AttachmentResponse]] = defaultdict(list)
        if ids:
            result = await self.db.execute(
                select(Attachment)
                .where(Attachment.target_type == target_type.value, Attachment.target_id.in_(ids))
                .order_by(Attachment.id)
            )
            for attachment in result.scalars():
                images[attachment.target_id].append(AttachmentResponse.model_validate(attachment))

        return {
            target_id: Engagement(
                tally=tallies[target_id],
                comment_count=comment_counts.get(target_id, 0),
                images=images[target_id],
            )
            for target_id in ids
        }

    async def purge(self, target_type: TargetType, target_id: int) -> None:
        """
        Delete votes, comments and attachments of a target.

        Attachment files are removed only after the transaction commits.
        """
        result = await self.db.execute(
            select(Attachment.file_path).where(
                Attachment.target_type == target_type.value,
                Attachment.target_id == target_id,
            )
        )
        paths = list(result.scalars())

        for model in (Vote, Comment, Attachment):
            await self.db.execute(
                delete(model).where(
                    model.target_type == target_type.value,
                    model.target_id == target_id,
                )
            )

        delete_after_commit(self.db, paths)
