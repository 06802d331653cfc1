"""SQLAlchemy ORM models for OrgPortal."""

from backend.models.base import Base
from backend.models.organization import Organization, Preference
from backend.models.user import User

__all__ = [
    "Base",
    "Organization",
    "Preference",
    "User",
]
