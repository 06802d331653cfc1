"""Organization preferences: defaults, bootstrap and read-only snapshots."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select

from backend.models.organization import Organization, Preference

if TYPE_CHECKING:
    from collections.abc import Mapping

    from sqlalchemy.ext.asyncio import AsyncSession

    from backend.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_PREFERENCES: dict[str, str] = {
    "system_browser_update_check": "0",
    "system_cookie_note": "1",
    "system_url_imprint": "",
    "system_url_data_protection": "",
    "registration_enable_module": "0",
}

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


class OrganizationSettings:
    """Immutable view of one organization's preferences.

    Loaded once per request so that page rendering never touches the database.
    """

    def __init__(self, values: Mapping[str, str]) -> None:
        self._values = dict(values)

    def has(self, name: str) -> bool:
        return name in self._values

    def get_string(self, name: str) -> str:
        """Return the raw value, or raise ``KeyError`` for unknown names."""
        return self._values[name]

    def get_bool(self, name: str) -> bool:
        return self.get_string(name).strip().lower() in _TRUE_VALUES

    def get_int(self, name: str) -> int:
        return int(self.get_string(name))

    def as_dict(self) -> dict[str, str]:
        return dict(self._values)


async def load_organization_settings(
    session: AsyncSession, organization_id: int
) -> OrganizationSettings:
    """Load all preferences of an organization into a snapshot."""
    stmt = select(Preference).where(Preference.organization_id == organization_id)
    result = await session.execute(stmt)
    return OrganizationSettings({pref.name: pref.value for pref in result.scalars()})


async def get_organization(session: AsyncSession, shortname: str) -> Organization | None:
    stmt = select(Organization).where(Organization.shortname == shortname)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def ensure_organization(session: AsyncSession, settings: Settings) -> Organization:
    """Create the configured organization and any missing default preferences."""
    organization = await get_organization(session, settings.organization_shortname)
    if organization is None:
        organization = Organization(
            shortname=settings.organization_shortname,
            longname=settings.organization_longname,
        )
        session.add(organization)
        await session.flush()
        logger.info("Created organization %s", settings.organization_shortname)

    existing = await load_organization_settings(session, organization.id)
    for name, value in DEFAULT_PREFERENCES.items():
        if not existing.has(name):
            session.add(Preference(organization_id=organization.id, name=name, value=value))
            logger.debug("Seeded preference %s=%r", name, value)

    await session.commit()
    return organization
