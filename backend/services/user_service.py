"""Member lookup for profile pages and contact-card export."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from backend.exceptions import InvalidParameterError, RecordNotFoundError
from backend.models.user import User

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


def parse_positive_id(name: str, raw: str | None) -> int:
    """Parse a required positive integer query parameter.

    Only ASCII digits are accepted; signs, whitespace and decimals are not.
    """
    if raw is None or not raw.isascii() or not raw.isdigit():
        raise InvalidParameterError(name, raw)
    value = int(raw)
    if value <= 0:
        raise InvalidParameterError(name, raw)
    return value


def parse_mode(raw: str | None, allowed: frozenset[int]) -> int:
    """Parse a numeric ``mode`` parameter restricted to ``allowed`` values."""
    if raw is None or not raw.isascii() or not raw.isdigit():
        raise InvalidParameterError("mode", raw)
    mode = int(raw)
    if mode not in allowed:
        raise InvalidParameterError("mode", raw)
    return mode


async def get_user(session: AsyncSession, user_id: int) -> User:
    """Return the user with ``user_id`` or raise ``RecordNotFoundError``."""
    user = await session.get(User, user_id)
    if user is None:
        raise RecordNotFoundError(f"User {user_id} not found")
    return user


async def list_members(session: AsyncSession, organization_id: int) -> list[User]:
    """Members of an organization ordered by last and first name."""
    stmt = (
        select(User)
        .where(User.organization_id == organization_id)
        .order_by(User.last_name, User.first_name)
    )
    result = await session.execute(stmt)
    return list(result.scalars())
