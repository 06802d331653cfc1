"""Per-request identity and configuration passed to page builders."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from backend.rendering.menu import MainMenu

if TYPE_CHECKING:
    from backend.config import Settings
    from backend.models.organization import Organization
    from backend.models.user import User
    from backend.services.settings_service import OrganizationSettings


@dataclass
class RequestContext:
    """Everything a page needs to know about the current request."""

    settings: Settings
    preferences: OrganizationSettings
    organization: Organization
    user: User | None = None
    menu: MainMenu = field(default_factory=MainMenu)

    @property
    def valid_login(self) -> bool:
        return self.user is not None

    @property
    def organization_name(self) -> str:
        return self.organization.longname
