"""
Authentication API endpoints: registration, login, logout and the current user.
"""
from fastapi import APIRouter, Request, status
import structlog

from bloxmarket.api.deps import BearerToken, CurrentUser, DbSession
from bloxmarket.core.config import settings
from bloxmarket.core.limiter import limiter
from bloxmarket.schemas.auth import AuthResponse, UserLogin, UserRegister, UserResponse
from bloxmarket.schemas.common import MessageResponse
from bloxmarket.services.auth import (
    authenticate_user,
    create_session,
    register_user,
    revoke_all_sessions,
    revoke_session,
)

router = APIRouter()
logger = structlog.get_logger()

AUTH_LIMIT = f"{settings.auth_requests_per_minute}/minute"


def _client_info(request: Request) -> dict:
    return {
        "ip_address": request.client.host if request.client else None,
        "device_info": request.headers.get("user-agent"),
    }


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(AUTH_LIMIT)
async def register(
    request: Request,
    user_data: UserRegister,
    db: DbSession,
):
    """
    Register a new account and sign it in.

    - **username**: 3-30 characters, letters, numbers and underscores (unique, any case)
    - **email**: valid email address (unique)
    - **password**: at least 6 characters
    - **roblox_username**: optional
    """
    user = await register_user(db, user_data)
    token = await create_session(db, user, **_client_info(request))

    return AuthResponse(
        message="User registered successfully",
        token=token,
        user=UserResponse.model_validate(user),
    )


@router.post("/login", response_model=AuthResponse)
@limiter.limit(AUTH_LIMIT)
async def login(
    request: Request,
    credentials: UserLogin,
    db: DbSession,
):
    """
    Login with username or email and receive a bearer token.

    The token should be included in the Authorization header as:
    `Authorization: Bearer <token>`
    """
    user = await authenticate_user(db, credentials.identifier, credentials.password)
    token = await create_session(db, user, **_client_info(request))

    return AuthResponse(
        message="Login successful",
        token=token,
        user=UserResponse.model_validate(user),
    )


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user: CurrentUser):
    """
    Get the current authenticated user's profile.
    """
    return current_user


@router.post("/logout", response_model=MessageResponse)
async def logout(current_user: CurrentUser, token: BearerToken, db: DbSession):
    """Revoke the session of the presented token."""
    await revoke_session(db, token)
    logger.info("user_logged_out", user_id=current_user.id)
    return MessageResponse(message="Logged out successfully")


@router.post("/logout-all", response_model=MessageResponse)
async def logout_all(current_user: CurrentUser, db: DbSession):
    """Revoke every session of the current user."""
    revoked = await revoke_all_sessions(db, current_user.id)
    logger.info("user_logged_out_everywhere", user_id=current_user.id, sessions=revoked)
    return MessageResponse(message="Logged out from all devices")
