"""Authentication service: JWT access tokens and password hashing."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import bcrypt
from jose import JWTError, jwt
from sqlalchemy import select

from backend.models.user import User
from backend.services.datetime_service import format_iso, now_utc

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from backend.config import Settings
    from backend.models.organization import Organization

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
_DUMMY_PASSWORD_HASH = bcrypt.hashpw(b"orgportal-dummy-password", bcrypt.gensalt()).decode("utf-8")


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))


def create_access_token(data: dict[str, Any], secret_key: str, expires_minutes: int = 30) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(UTC) + timedelta(minutes=expires_minutes)
    to_encode.update({"exp": expire, "type": "access"})
    return str(jwt.encode(to_encode, secret_key, algorithm=ALGORITHM))


def decode_access_token(token: str, secret_key: str) -> dict[str, Any] | None:
    """Decode and validate a JWT access token."""
    try:
        payload: dict[str, Any] = jwt.decode(token, secret_key, algorithms=[ALGORITHM])
        if payload.get("type") != "access":
            return None
        return payload
    except JWTError:
        logger.debug("Failed to decode access token", exc_info=True)
        return None


async def authenticate_user(session: AsyncSession, login_name: str, password: str) -> User | None:
    """Authenticate a user by login name and password."""
    stmt = select(User).where(User.login_name == login_name)
    result = await session.execute(stmt)
    user = result.scalar_one_or_none()
    if user is None:
        # Run a dummy hash check to reduce login-name timing side channels.
        verify_password(password, _DUMMY_PASSWORD_HASH)
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


async def ensure_admin_user(
    session: AsyncSession, settings: Settings, organization: Organization
) -> None:
    """Create the admin user if it doesn't exist."""
    stmt = select(User).where(User.login_name == settings.admin_username)
    result = await session.execute(stmt)
    existing = result.scalar_one_or_none()

    if existing is None:
        now = format_iso(now_utc())
        admin = User(
            organization_id=organization.id,
            login_name=settings.admin_username,
            password_hash=hash_password(settings.admin_password),
            first_name="Admin",
            last_name="",
            email=f"{settings.admin_username}@localhost",
            is_admin=True,
            created_at=now,
            updated_at=now,
        )
        session.add(admin)
        await session.commit()
        logger.info("Created admin user %s", settings.admin_username)
