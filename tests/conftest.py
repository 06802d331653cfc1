"""Shared test fixtures for OrgPortal."""

from __future__ import annotations

import shutil
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from backend.config import Settings
from backend.main import create_app, init_app_state
from backend.models import Base, Organization, User
from backend.rendering.context import RequestContext
from backend.services.auth_service import hash_password
from backend.services.datetime_service import format_iso, now_utc
from backend.services.settings_service import (
    DEFAULT_PREFERENCES,
    OrganizationSettings,
    get_organization,
)

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Callable

TEST_SECRET_KEY = "test-secret-key-with-at-least-32-characters"
TEST_ADMIN_PASSWORD = "admin123"
REPO_THEMES_DIR = Path(__file__).resolve().parents[1] / "themes"


class RecordingRenderer:
    """TemplateRenderer that records the variable bag instead of rendering."""

    def __init__(self) -> None:
        self.variables: dict[str, Any] = {}
        self.rendered: list[str] = []

    def set_variable(self, key: str, value: Any) -> None:
        self.variables[key] = value

    def render_template(self, template_id: str) -> str:
        self.rendered.append(template_id)
        return f"<html>{template_id}</html>"


@asynccontextmanager
async def create_test_client(settings: Settings) -> AsyncGenerator[AsyncClient]:
    """Create an HTTP test client with a fully initialized app.

    Runs the startup work of the lifespan because ASGITransport does not
    trigger it.
    """
    app = create_app(settings)
    settings.validate_runtime_security()
    await init_app_state(app, settings)

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    await app.state.engine.dispose()


async def login(client: AsyncClient, username: str = "admin") -> str:
    """Login and return the access token."""
    resp = await client.post(
        "/api/auth/login", json={"username": username, "password": TEST_ADMIN_PASSWORD}
    )
    assert resp.status_code == 200, resp.text
    return str(resp.json()["access_token"])


@pytest.fixture
def tmp_static_dir(tmp_path: Path) -> Path:
    """Static root with a few debug/minified asset pairs."""
    static = tmp_path / "static"
    (static / "css").mkdir(parents=True)
    (static / "js").mkdir()
    (static / "libs" / "browser-update").mkdir(parents=True)

    (static / "css" / "profile.css").write_text("th { text-align: left; }\n")
    (static / "css" / "profile.min.css").write_text("th{text-align:left}\n")
    (static / "js" / "both.js").write_text("var a = 1;\n")
    (static / "js" / "both.min.js").write_text("var a=1;\n")
    (static / "js" / "debug-only.js").write_text("var b = 2;\n")
    (static / "js" / "min-only.min.js").write_text("var c=3;\n")
    (static / "libs" / "browser-update" / "browser-update.js").write_text("// buo\n")
    return static


@pytest.fixture
def tmp_themes_dir(tmp_path: Path) -> Path:
    """Copy of the bundled themes."""
    themes = tmp_path / "themes"
    shutil.copytree(REPO_THEMES_DIR, themes)
    return themes


@pytest.fixture
def test_settings(tmp_path: Path, tmp_static_dir: Path, tmp_themes_dir: Path) -> Settings:
    """Create test settings with temporary paths."""
    db_path = tmp_path / "test.db"
    return Settings(
        secret_key=TEST_SECRET_KEY,
        debug=True,
        database_url=f"sqlite+aiosqlite:///{db_path}",
        static_dir=tmp_static_dir,
        themes_dir=tmp_themes_dir,
        organization_shortname="TC",
        organization_longname="Test Club",
        admin_username="admin",
        admin_password=TEST_ADMIN_PASSWORD,
        cookie_domain="example.org",
        cookie_prefix="tc",
        url_path="/portal",
    )


@pytest.fixture
def organization() -> Organization:
    return Organization(id=1, shortname="TC", longname="Test Club", homepage="")


@pytest.fixture
def make_context(
    test_settings: Settings, organization: Organization
) -> Callable[..., RequestContext]:
    """Factory for request contexts without a database."""

    def _make(
        preferences: dict[str, str] | None = None,
        user: User | None = None,
        settings: Settings | None = None,
    ) -> RequestContext:
        values = dict(DEFAULT_PREFERENCES)
        if preferences:
            values.update(preferences)
        return RequestContext(
            settings=settings or test_settings,
            preferences=OrganizationSettings(values),
            organization=organization,
            user=user,
        )

    return _make


@pytest.fixture
def renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture
async def db_engine(test_settings: Settings) -> AsyncGenerator[AsyncEngine]:
    """Create a test database engine with all tables."""
    engine = create_async_engine(
        test_settings.database_url,
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(
    db_engine: AsyncEngine,
) -> AsyncGenerator[AsyncSession]:
    """Create a test database session."""
    session_factory = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with session_factory() as session:
        yield session


async def add_member(settings: Settings, login_name: str, **fields: Any) -> int:
    """Insert a member of the configured organization and return its id.

    Opens a separate engine on the app's database file, so call it after the
    test client has bootstrapped the schema.
    """
    engine = create_async_engine(settings.database_url)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        async with session_factory() as session:
            organization = await get_organization(session, settings.organization_shortname)
            assert organization is not None
            now = format_iso(now_utc())
            user = User(
                organization_id=organization.id,
                login_name=login_name,
                password_hash=hash_password(TEST_ADMIN_PASSWORD),
                created_at=now,
                updated_at=now,
                **fields,
            )
            session.add(user)
            await session.commit()
            return user.id
    finally:
        await engine.dispose()
