"""Wishlist service."""
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from bloxmarket.core.constants import DEFAULT_PAGE_SIZE
from bloxmarket.db.queries import fetch_page
from bloxmarket.core.exceptions import ConflictError, InvalidInputError, NotFoundError
from bloxmarket.core.permissions import Action, ensure_can
from bloxmarket.models.user import User
from bloxmarket.models.wishlist import WishlistItem
from bloxmarket.utils.sanitize import escape_like, sanitize_optional

logger = get_logger()


class WishlistService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, item_id: int) -> WishlistItem:
        item = await self.db.get(WishlistItem, item_id)
        if item is None:
            raise NotFoundError("Wishlist item not found")
        return item

    async def _ensure_unique(self, user_id: int, item_name: str, exclude_id: Optional[int] = None) -> None:
        query = select(WishlistItem.id).where(
            WishlistItem.user_id == user_id,
            func.lower(WishlistItem.item_name) == item_name.lower(),
        )
        if exclude_id is not None:
            query = query.where(WishlistItem.id != exclude_id)
        if (await self.db.execute(query)).first() is not None:
            raise ConflictError("Item already in wishlist")

    async def create(
        self,
        actor: User,
        item_name: str,
        description: Optional[str] = None,
        max_price: Optional[int] = None,
    ) -> WishlistItem:
        name = sanitize_optional(item_name, 200)
        if not name:
            raise InvalidInputError("Item name is required")
        await self._ensure_unique(actor.id, name)

        item = WishlistItem(
            user=actor,
            item_name=name,
            description=sanitize_optional(description, 2000),
            max_price=max_price,
        )
        self.db.add(item)
        await self.db.flush()

        logger.info("wishlist_item_added", item_id=item.id, user_id=actor.id)
        return item

    async def update(self, item: WishlistItem, actor: User, fields: dict[str, Any]) -> WishlistItem:
        ensure_can(actor, Action.UPDATE, item, detail="Not authorized to update this wishlist item")

        if "item_name" in fields:
            name = sanitize_optional(fields["item_name"], 200)
            if not name:
                raise InvalidInputError("Item name is required")
            await self._ensure_unique(item.user_id, name, exclude_id=item.id)
            item.item_name = name
        if "description" in fields:
            item.description = sanitize_optional(fields["description"], 2000)
        if "max_price" in fields:
            item.max_price = fields["max_price"]
        await self.db.flush()

        logger.info("wishlist_item_updated", item_id=item.id, user_id=actor.id)
        return item

    async def delete(self, item: WishlistItem, actor: User) -> None:
        ensure_can(actor, Action.DELETE, item, detail="Not authorized to delete this wishlist item")
        await self.db.delete(item)
        await self.db.flush()
        logger.info("wishlist_item_removed", item_id=item.id, user_id=actor.id)

    async def list_items(
        self,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
        search: Optional[str] = None,
        user_id: Optional[int] = None,
    ) -> tuple[list[WishlistItem], int]:
        query = select(WishlistItem)
        if user_id is not None:
            query = query.where(WishlistItem.user_id == user_id)
        if search and search.strip():
            pattern = f"%{escape_like(search.strip())}%"
            query = query.where(WishlistItem.item_name.ilike(pattern, escape="\\"))
        query = query.order_by(WishlistItem.created_at.desc(), WishlistItem.id.desc())
        return await fetch_page(self.db, query, limit, offset)
