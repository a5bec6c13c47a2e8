"""
API dependencies for authentication and authorization.
"""
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from bloxmarket.core.permissions import Action, can
from bloxmarket.db.base import utcnow
from bloxmarket.db.session import get_db
from bloxmarket.models.user import User
from bloxmarket.services.auth import decode_access_token, get_active_session, get_user_by_id

# Security scheme for JWT bearer tokens
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    db: Annotated[AsyncSession, Depends(get_db)],
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> User:
    """
    Get the current authenticated user from the bearer token.

    The token must verify, belong to a live session and point at an existing
    user (401 otherwise). Deactivated and banned accounts get 403.
    """
    if not credentials:
        raise _unauthorized("Not authenticated")

    token = credentials.credentials
    payload = decode_access_token(token)
    if not payload:
        raise _unauthorized("Invalid or expired token")

    try:
        user_id = int(payload.sub)
    except (ValueError, TypeError):
        raise _unauthorized("Invalid token payload")

    session = await get_active_session(db, token)
    if not session or session.user_id != user_id:
        raise _unauthorized("Session has been revoked")

    user = await get_user_by_id(db, user_id)
    if not user:
        raise _unauthorized("User not found")

    if user.is_banned:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is banned")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is deactivated")

    session.last_active = utcnow()
    return user


async def get_current_user_optional(
    db: Annotated[AsyncSession, Depends(get_db)],
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> Optional[User]:
    """
    Get the current user if authenticated, otherwise return None.

    Useful for public reads that still report the caller's own vote.
    """
    if not credentials:
        return None

    try:
        return await get_current_user(db, credentials)
    except HTTPException:
        return None


async def get_current_moderator(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Admins and moderators only (403 otherwise)."""
    if not can(current_user, Action.MODERATE):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Staff access required",
        )
    return current_user


async def get_current_admin_user(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """
    Get the current user and verify they are an admin.

    Raises HTTPException 403 if user is not an admin.
    """
    if not can(current_user, Action.MANAGE_USERS):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_user


async def get_bearer_token(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> str:
    if not credentials:
        raise _unauthorized("Not authenticated")
    return credentials.credentials


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db)]
CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[Optional[User], Depends(get_current_user_optional)]
ModeratorUser = Annotated[User, Depends(get_current_moderator)]
AdminUser = Annotated[User, Depends(get_current_admin_user)]
BearerToken = Annotated[str, Depends(get_bearer_token)]

