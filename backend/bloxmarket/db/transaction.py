"""
Transaction boundaries for multi-step writes.

Both helpers accept a ``conflict`` message: a unique-constraint violation
raised inside the block is surfaced as a ``ConflictError`` carrying it, so
services can race on inserts without catching driver errors themselves.
"""
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from bloxmarket.core.exceptions import ConflictError

logger = structlog.get_logger()


@asynccontextmanager
async def atomic(
    db: AsyncSession,
    label: str = "transaction",
    conflict: Optional[str] = None,
) -> AsyncGenerator[AsyncSession, None]:
    """
    Commit everything in the block, or nothing.

    Usage:
        async with atomic(db, "middleman_review"):
            application.status = ApplicationStatus.APPROVED.value
            applicant.role = UserRole.MIDDLEMAN.value
    """
    try:
        yield db
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        logger.info("transaction_conflict", label=label, error=str(e.orig))
        if conflict is None:
            raise
        raise ConflictError(conflict) from e
    except Exception:
        await db.rollback()
        logger.error("transaction_rolled_back", label=label, exc_info=True)
        raise
    else:
        logger.debug("transaction_committed", label=label)


@asynccontextmanager
async def savepoint(
    db: AsyncSession,
    label: str = "sp",
    conflict: Optional[str] = None,
) -> AsyncGenerator[AsyncSession, None]:
    """
    Roll back only the block on failure; the outer transaction survives.

    Used for inserts guarded by a unique constraint (votes, event joins).
    """
    try:
        async with db.begin_nested():
            yield db
    except IntegrityError as e:
        logger.info("savepoint_conflict", label=label, error=str(e.orig))
        if conflict is None:
            raise
        raise ConflictError(conflict) from e
