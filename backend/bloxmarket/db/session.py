"""
Database session management.

Provides async session factory and dependency injection for FastAPI.
"""
from collections.abc import AsyncGenerator

import structlog
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from bloxmarket.core.config import settings

logger = structlog.get_logger()


def _engine_options() -> dict:
    options: dict = {"echo": settings.db_echo, "pool_pre_ping": True}
    if settings.is_postgres:
        options.update(
            pool_size=20,
            max_overflow=30,
            pool_recycle=1800,  # Recycle connections after 30 minutes
            pool_timeout=20,
            connect_args={
                "server_settings": {
                    "statement_timeout": "25000",  # milliseconds
                    "application_name": "bloxmarket_api",
                },
                "command_timeout": 25,
            },
        )
    return options


engine = create_async_engine(settings.database_url_computed, **_engine_options())

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides an async database session.

    Commits when the request handler returns, rolls back on any error.

    Usage:
        @router.get("/trades")
        async def list_trades(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            await session.rollback()
            logger.error(
                "Database session error",
                error=str(e),
                error_type=type(e).__name__,
            )
            raise


async def create_all_tables() -> None:
    """Create tables straight from metadata (dev and test setups)."""
    from bloxmarket.db.base import Base
    import bloxmarket.models  # noqa: F401  registers every model on Base.metadata

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured")
