"""Organization and preference models."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.models.base import Base

if TYPE_CHECKING:
    from backend.models.user import User


class Organization(Base):
    """An organization whose members use the portal."""

    __tablename__ = "organizations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    shortname: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    longname: Mapped[str] = mapped_column(String, nullable=False)
    homepage: Mapped[str] = mapped_column(String, nullable=False, default="")

    preferences: Mapped[list[Preference]] = relationship(
        back_populates="organization", cascade="all, delete-orphan"
    )
    members: Mapped[list[User]] = relationship(back_populates="organization")


class Preference(Base):
    """A named organization setting stored as text."""

    __tablename__ = "preferences"
    __table_args__ = (UniqueConstraint("organization_id", "name"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    organization_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False, default="")

    organization: Mapped[Organization] = relationship(back_populates="preferences")
