"""
Health check endpoints.
"""
from fastapi import APIRouter
from sqlalchemy import text

from bloxmarket.api.deps import DbSession
from bloxmarket.core.config import settings

router = APIRouter()


@router.get("/")
async def root():
    return {"message": f"{settings.app_name} is running"}


@router.get("/health")
async def health_check(db: DbSession):
    """
    Health check endpoint.

    Returns the status of the API and its database connection.
    """
    db_status = "healthy"
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        db_status = f"unhealthy: {type(e).__name__}"

    return {
        "status": "healthy" if db_status == "healthy" else "degraded",
        "database": db_status,
    }
