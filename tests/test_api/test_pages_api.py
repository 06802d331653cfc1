"""Tests for the overview page and the site-wide page chrome."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from tests.conftest import add_member, create_test_client, login

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from httpx import AsyncClient

    from backend.config import Settings


@pytest.fixture
async def client(test_settings: Settings) -> AsyncGenerator[AsyncClient]:
    async with create_test_client(test_settings) as ac:
        yield ac


class TestOverviewPage:
    @pytest.mark.asyncio
    async def test_anonymous_visitor(self, client: AsyncClient) -> None:
        resp = await client.get("/")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/html")
        body = resp.text
        assert "Welcome to Test Club." in body
        assert '<nav class="navbar">' in body
        assert "Logged in" not in body
        assert 'class="member-list"' not in body
        assert "menu_item_my_profile" not in body

    @pytest.mark.asyncio
    async def test_member_list_for_logged_in_user(
        self, client: AsyncClient, test_settings: Settings
    ) -> None:
        await add_member(test_settings, "zed", first_name="Zed", last_name="<Adams>")
        await login(client)

        body = (await client.get("/")).text
        assert 'class="member-list"' in body
        assert "Zed &lt;Adams&gt;" in body
        assert "Logged in" in body
        assert "menu_item_my_profile" in body

    @pytest.mark.asyncio
    async def test_cookie_note_uses_configured_cookie_settings(self, client: AsyncClient) -> None:
        body = (await client.get("/")).text
        assert 'id="cookie-note"' in body
        assert 'data-cookie-domain="example.org"' in body
        assert 'data-cookie-path="/portal/"' in body
        assert 'data-cookie-name="tc_cookie_note"' in body

    @pytest.mark.asyncio
    async def test_security_headers(self, client: AsyncClient) -> None:
        resp = await client.get("/")
        assert resp.headers["x-content-type-options"] == "nosniff"
        assert resp.headers["x-frame-options"] == "DENY"
        assert "content-security-policy" in resp.headers

    @pytest.mark.asyncio
    async def test_unknown_route_is_404(self, client: AsyncClient) -> None:
        resp = await client.get("/modules/unknown")
        assert resp.status_code == 404
