"""
Shared behavior of trades, forum posts and events.

Each of them is owned by a user, editable and deletable by its owner or
staff, and carries votes, comments and image attachments.
"""
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from sqlalchemy import Select, or_
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from bloxmarket.db.queries import fetch_page
from bloxmarket.core.constants import TargetType
from bloxmarket.core.exceptions import InvalidInputError
from bloxmarket.core.permissions import Action, ensure_can
from bloxmarket.models.user import User
from bloxmarket.services.engagement import Engagement, EngagementService, load_target
from bloxmarket.utils.sanitize import escape_like, sanitize_optional

logger = structlog.get_logger()

ModelT = TypeVar("ModelT")


class ContentService(Generic[ModelT]):
    """Base service; subclasses set `model`, `target_type` and the text limits."""

    model: type
    target_type: TargetType
    # field name -> max length, for free-text fields accepted on create/update
    text_fields: dict[str, int] = {}
    search_fields: tuple[str, ...] = ()
    required_fields: tuple[str, ...] = ()

    def __init__(self, db: AsyncSession):
        self.db = db
        self.engagement = EngagementService(db)

    async def get(self, content_id: int) -> ModelT:
        return await load_target(self.db, self.target_type, content_id)

    def clean(self, fields: dict[str, Any]) -> dict[str, Any]:
        """Sanitize free-text values and unwrap enums; other values pass through."""
        cleaned = {}
        for name, value in fields.items():
            if isinstance(value, Enum):
                value = value.value
            elif name in self.text_fields and isinstance(value, str):
                value = sanitize_optional(value, self.text_fields[name])
            cleaned[name] = value
        return cleaned

    def apply_search(self, query: Select, search: Optional[str]) -> Select:
        if not search or not search.strip():
            return query
        pattern = f"%{escape_like(search.strip())}%"
        return query.where(
            or_(*(getattr(self.model, name).ilike(pattern, escape="\\") for name in self.search_fields))
        )

    async def page(self, query: Select, limit: int, offset: int) -> tuple[list[ModelT], int]:
        query = query.order_by(self.model.created_at.desc(), self.model.id.desc())
        return await fetch_page(self.db, query, limit, offset)

    async def update(self, obj: ModelT, actor: User, fields: dict[str, Any]) -> ModelT:
        """Owner or staff edit. `fields` holds only the values the caller sent."""
        ensure_can(actor, Action.UPDATE, obj, detail=f"Not authorized to update this {self.target_type.label}")
        cleaned = self.clean(fields)
        for name in self.required_fields:
            if name in cleaned and not cleaned[name]:
                raise InvalidInputError(f"{name.replace('_', ' ').capitalize()} cannot be empty")
        for name, value in cleaned.items():
            setattr(obj, name, value)
        await self.db.flush()

        logger.info(
            f"{self.target_type.value}_updated",
            content_id=obj.id,
            user_id=actor.id,
            fields=sorted(fields),
        )
        return obj

    async def delete(self, obj: ModelT, actor: User) -> None:
        """Hard delete, together with votes, comments and attachments."""
        ensure_can(actor, Action.DELETE, obj, detail=f"Not authorized to delete this {self.target_type.label}")
        content_id = obj.id
        await self.engagement.purge(self.target_type, content_id)
        await self.db.delete(obj)
        await self.db.flush()

        logger.info(f"{self.target_type.value}_deleted", content_id=content_id, user_id=actor.id)

    async def summarize(self, items: list[ModelT], viewer: Optional[User]) -> dict[int, Engagement]:
        return await self.engagement.summarize(self.target_type, [item.id for item in items], viewer)
