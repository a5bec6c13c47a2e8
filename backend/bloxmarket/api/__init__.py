"""
API module for FastAPI routes.
"""
from fastapi import APIRouter

from bloxmarket.api.routes import (
    admin,
    auth,
    events,
    forum,
    health,
    reports,
    trades,
    users,
    verification,
    vouches,
    wishlists,
)

api_router = APIRouter()

# Include all route modules
api_router.include_router(health.router, tags=["Health"])
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(trades.router, prefix="/trades", tags=["Trades"])
api_router.include_router(forum.router, prefix="/forum", tags=["Forum"])
api_router.include_router(events.router, prefix="/events", tags=["Events"])
api_router.include_router(wishlists.router, prefix="/wishlists", tags=["Wishlists"])
api_router.include_router(vouches.router, prefix="/vouches", tags=["Vouches"])
api_router.include_router(reports.router, prefix="/reports", tags=["Reports"])
api_router.include_router(verification.router, prefix="/verification", tags=["Verification"])
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])
