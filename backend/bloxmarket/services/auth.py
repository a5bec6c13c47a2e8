"""
Authentication service: password hashing, JWT tokens and session tracking.

Security measures implemented:
- bcrypt password hashing (cost factor from settings)
- JWT tokens with expiration and a unique `jti`
- Every issued token is tracked as a UserSession so logout revokes it
- At most `max_sessions_per_user` live sessions; the oldest is revoked first
- Dummy hash on unknown users to keep login timing flat
"""
from datetime import datetime, timedelta, timezone
from typing import Optional
import hashlib
import uuid

from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel
from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from bloxmarket.core.config import settings
from bloxmarket.core.constants import UserRole
from bloxmarket.core.exceptions import (
    AuthenticationError,
    InvalidInputError,
    PermissionDeniedError,
)
from bloxmarket.db.base import utcnow
from bloxmarket.models.session import UserSession
from bloxmarket.models.user import User
from bloxmarket.schemas.auth import UserRegister

logger = structlog.get_logger()

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)


class TokenPayload(BaseModel):
    """Claims carried by an access token."""

    sub: str  # user id
    role: Optional[str] = None
    jti: Optional[str] = None
    exp: datetime
    iat: datetime
    type: str = "access"


def normalize_email(email: str) -> str:
    """Normalize email address for consistent comparison."""
    return email.lower().strip()


def hash_token(token: str) -> str:
    """SHA256 of a token, the form in which sessions store it."""
    return hashlib.sha256(token.encode()).hexdigest()


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def create_access_token(user: User, expires_delta: Optional[timedelta] = None) -> tuple[str, datetime]:
    """Create a signed JWT for `user`. Returns the token and its expiry."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes))

    payload = {
        "sub": str(user.id),
        "role": user.role,
        "jti": uuid.uuid4().hex,
        "exp": expire,
        "iat": now,
        "type": "access",
    }

    token = jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)
    return token, expire


def decode_access_token(token: str) -> Optional[TokenPayload]:
    """
    Decode and validate a JWT access token.

    Validates:
    - Token signature
    - Token expiration
    - Token type (must be "access")
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
        token_data = TokenPayload(**payload)

        if token_data.type != "access":
            logger.warning("Invalid token type", token_type=token_data.type)
            return None

        return token_data
    except (JWTError, ValueError) as e:
        logger.warning("JWT decode error", error=str(e))
        return None


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    """Get a user by email address (case-insensitive)."""
    result = await db.execute(
        select(User).where(User.email == normalize_email(email))
    )
    return result.scalar_one_or_none()


async def get_user_by_username(db: AsyncSession, username: str) -> Optional[User]:
    """Get a user by username (case-insensitive)."""
    result = await db.execute(
        select(User).where(func.lower(User.username) == username.strip().lower())
    )
    return result.scalar_one_or_none()


async def get_user_by_id(db: AsyncSession, user_id: int) -> Optional[User]:
    return await db.get(User, user_id)


async def create_session(
    db: AsyncSession,
    user: User,
    ip_address: Optional[str] = None,
    device_info: Optional[str] = None,
) -> str:
    """
    Issue a token for `user` and record it as a session.

    Revokes the oldest live sessions so that at most
    `max_sessions_per_user` remain active.
    """
    token, expires_at = create_access_token(user)

    result = await db.execute(
        select(UserSession)
        .where(UserSession.user_id == user.id)
        .where(UserSession.is_revoked == False)  # noqa: E712
        .order_by(UserSession.created_at.desc(), UserSession.id.desc())
    )
    live = result.scalars().all()
    for stale in live[settings.max_sessions_per_user - 1:]:
        stale.is_revoked = True

    db.add(UserSession(
        user_id=user.id,
        token_hash=hash_token(token),
        ip_address=ip_address,
        device_info=device_info[:255] if device_info else None,
        expires_at=expires_at,
    ))
    await db.flush()

    return token


async def get_active_session(db: AsyncSession, token: str) -> Optional[UserSession]:
    """Return the live session for `token`, or None if unknown, revoked or expired."""
    result = await db.execute(
        select(UserSession)
        .where(UserSession.token_hash == hash_token(token))
        .where(UserSession.is_revoked == False)  # noqa: E712
        .where(UserSession.expires_at > utcnow())
    )
    return result.scalar_one_or_none()


async def revoke_session(db: AsyncSession, token: str) -> None:
    await db.execute(
        update(UserSession)
        .where(UserSession.token_hash == hash_token(token))
        .values(is_revoked=True)
    )


async def revoke_all_sessions(db: AsyncSession, user_id: int) -> int:
    """Revoke every live session of a user. Returns how many were revoked."""
    result = await db.execute(
        update(UserSession)
        .where(UserSession.user_id == user_id)
        .where(UserSession.is_revoked == False)  # noqa: E712
        .values(is_revoked=True)
    )
    return result.rowcount or 0


async def register_user(db: AsyncSession, user_data: UserRegister) -> User:
    """
    Create a new account with role `user` and a zero credibility score.

    Email is normalized to lowercase; usernames are unique regardless of case.
    """
    if await get_user_by_email(db, user_data.email):
        raise InvalidInputError("Email already exists")
    if await get_user_by_username(db, user_data.username):
        raise InvalidInputError("Username already exists")

    user = User(
        email=normalize_email(user_data.email),
        username=user_data.username.strip(),
        hashed_password=get_password_hash(user_data.password),
        roblox_username=user_data.roblox_username.strip() if user_data.roblox_username else None,
        role=UserRole.USER.value,
        credibility_score=0,
        is_active=True,
        is_verified=False,
        middleman_requested=False,
    )
    db.add(user)
    await db.flush()

    logger.info("user_registered", user_id=user.id, username=user.username)
    return user


async def authenticate_user(db: AsyncSession, identifier: str, password: str) -> User:
    """
    Authenticate by username or email.

    Raises:
        AuthenticationError: unknown account or wrong password
        PermissionDeniedError: banned or deactivated account
    """
    identifier = identifier.strip()
    result = await db.execute(
        select(User).where(
            or_(
                func.lower(User.username) == identifier.lower(),
                User.email == normalize_email(identifier),
            )
        )
    )
    user = result.scalars().first()

    if not user:
        # Dummy hash keeps response time similar for unknown accounts
        pwd_context.hash("dummy_password_for_timing_attack_prevention")
        logger.info("login_failed", reason="unknown_user")
        raise AuthenticationError("Invalid credentials")

    if not verify_password(password, user.hashed_password):
        logger.info("login_failed", reason="bad_password", user_id=user.id)
        raise AuthenticationError("Invalid credentials")

    if user.is_banned:
        logger.info("login_refused", reason="banned", user_id=user.id)
        raise PermissionDeniedError(
            f"Account is banned: {user.ban_reason}" if user.ban_reason else "Account is banned"
        )

    if not user.is_active:
        logger.info("login_refused", reason="inactive", user_id=user.id)
        raise PermissionDeniedError(
            f"Account is deactivated: {user.deactivation_reason}"
            if user.deactivation_reason
            else "Account is deactivated"
        )

    user.last_login = utcnow()
    logger.info("user_authenticated", user_id=user.id)
    return user
