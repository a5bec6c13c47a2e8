"""
Query helpers shared by services.
"""
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession


async def fetch_page(db: AsyncSession, query: Select, limit: int, offset: int = 0) -> tuple[list, int]:
    """
    Run `query` for one page and count the full result set.

    The query must already carry its filters and ordering.

    Returns:
        Tuple of (items, total_count)
    """
    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total = (await db.execute(count_query)).scalar_one()

    result = await db.execute(query.limit(limit).offset(offset))
    return list(result.unique().scalars().all()), total
