"""Shared API dependencies: DB session, auth, request context and templates."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from backend.config import Settings
from backend.exceptions import InternalServerError
from backend.models.user import User
from backend.rendering.context import RequestContext
from backend.rendering.menu import MainMenu, MenuNode
from backend.rendering.templates import JinjaTemplateRenderer
from backend.services.auth_service import decode_access_token
from backend.services.settings_service import get_organization, load_organization_settings

security = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    """Get application settings from app state."""
    settings: Settings = request.app.state.settings
    return settings


async def get_session(request: Request) -> AsyncGenerator[AsyncSession]:
    """Get a database session."""
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        yield session


async def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)] = None,
    session: AsyncSession = Depends(get_session),
) -> User | None:
    """Get current authenticated user, or None if not authenticated."""
    token_value = (
        credentials.credentials if credentials is not None else request.cookies.get("access_token")
    )
    if token_value is None:
        return None

    settings: Settings = request.app.state.settings
    payload = decode_access_token(token_value, settings.secret_key)
    if payload is None:
        return None
    user_id = payload.get("sub")
    if user_id is None:
        return None
    if not isinstance(user_id, (str, int)) or (
        isinstance(user_id, str) and not user_id.isdigit()
    ):
        return None
    return await session.get(User, int(user_id))


async def require_auth(
    user: Annotated[User | None, Depends(get_current_user)],
) -> User:
    """Require authentication. Raises 401 if not authenticated."""
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def build_main_menu(user: User | None) -> MainMenu:
    """Create the site-wide navigation for the current visitor."""
    menu = MainMenu()
    modules = MenuNode("menu-modules", "Modules")
    modules.add_item("menu_item_overview", "Overview", "/", "fa-home")
    if user is not None:
        modules.add_item(
            "menu_item_my_profile",
            "My profile",
            f"/modules/profile/profile?user_id={user.id}",
            "fa-user",
        )
    menu.add_node(modules)
    return menu


async def get_request_context(
    settings: Annotated[Settings, Depends(get_settings)],
    session: Annotated[AsyncSession, Depends(get_session)],
    user: Annotated[User | None, Depends(get_current_user)],
) -> RequestContext:
    """Assemble organization, preferences and identity for page rendering."""
    organization = await get_organization(session, settings.organization_shortname)
    if organization is None:
        raise InternalServerError(
            f"Organization {settings.organization_shortname!r} is not initialized"
        )
    preferences = await load_organization_settings(session, organization.id)
    return RequestContext(
        settings=settings,
        preferences=preferences,
        organization=organization,
        user=user,
        menu=build_main_menu(user),
    )


def get_template_renderer(
    settings: Annotated[Settings, Depends(get_settings)],
) -> JinjaTemplateRenderer:
    """Fresh variable bag bound to the active theme's templates."""
    return JinjaTemplateRenderer(settings.templates_dir)
