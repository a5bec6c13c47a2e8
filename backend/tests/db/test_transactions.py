"""
Tests for transaction context managers.

Tests atomic() and savepoint() behavior for proper transaction boundaries.
"""
import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from bloxmarket.core.exceptions import ConflictError
from bloxmarket.db.transaction import atomic, savepoint
from bloxmarket.models import WishlistItem


@pytest.mark.asyncio
async def test_atomic_commits_on_success(db_session, test_user):
    """Atomic context commits all changes on success."""
    async with atomic(db_session) as session:
        session.add(WishlistItem(user_id=test_user.id, item_name="Atomic Fedora"))

    result = await db_session.execute(
        select(WishlistItem).where(WishlistItem.item_name == "Atomic Fedora")
    )
    assert result.scalar_one_or_none() is not None


@pytest.mark.asyncio
async def test_atomic_rollbacks_on_failure(db_session, test_user):
    """Atomic context rolls back all changes on exception."""
    user_id = test_user.id
    with pytest.raises(ValueError):
        async with atomic(db_session) as session:
            session.add(WishlistItem(user_id=user_id, item_name="Rolled Back Crown"))
            await session.flush()  # Write to DB
            raise ValueError("Simulated failure")

    result = await db_session.execute(
        select(WishlistItem).where(WishlistItem.item_name == "Rolled Back Crown")
    )
    assert result.scalar_one_or_none() is None


@pytest.mark.asyncio
async def test_savepoint_success_keeps_changes(db_session, test_user):
    """Changes made inside a savepoint that exits cleanly stay in the transaction."""
    async with savepoint(db_session, "wishlist_insert"):
        db_session.add(WishlistItem(user_id=test_user.id, item_name="Savepoint Shades"))
        await db_session.flush()

    await db_session.commit()

    result = await db_session.execute(
        select(WishlistItem).where(WishlistItem.item_name == "Savepoint Shades")
    )
    assert result.scalar_one_or_none() is not None


@pytest.mark.asyncio
async def test_savepoint_conflict_keeps_outer_transaction(db_session, test_user):
    """A duplicate insert in a savepoint raises ConflictError and leaves earlier rows alone."""
    db_session.add(WishlistItem(user_id=test_user.id, item_name="Sparkle Time Fedora"))
    await db_session.flush()

    with pytest.raises(ConflictError, match="Item already in wishlist"):
        async with savepoint(db_session, "wishlist_insert", conflict="Item already in wishlist"):
            db_session.add(WishlistItem(user_id=test_user.id, item_name="Sparkle Time Fedora"))
            await db_session.flush()

    await db_session.commit()
    result = await db_session.execute(
        select(WishlistItem).where(WishlistItem.item_name == "Sparkle Time Fedora")
    )
    assert len(result.scalars().all()) == 1


@pytest.mark.asyncio
async def test_atomic_without_conflict_message_reraises_integrity_error(db_session, test_user):
    user_id = test_user.id
    db_session.add(WishlistItem(user_id=user_id, item_name="Domino Crown"))
    await db_session.commit()

    with pytest.raises(IntegrityError):
        async with atomic(db_session, "wishlist_insert") as session:
            session.add(WishlistItem(user_id=user_id, item_name="Domino Crown"))
            await session.flush()
