"""Tests for login, logout and identity endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from tests.conftest import TEST_ADMIN_PASSWORD, create_test_client, login

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from httpx import AsyncClient

    from backend.config import Settings


@pytest.fixture
async def client(test_settings: Settings) -> AsyncGenerator[AsyncClient]:
    async with create_test_client(test_settings) as ac:
        yield ac


class TestLogin:
    @pytest.mark.asyncio
    async def test_login_sets_cookies(self, client: AsyncClient) -> None:
        resp = await client.post(
            "/api/auth/login", json={"username": "admin", "password": TEST_ADMIN_PASSWORD}
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["token_type"] == "bearer"
        assert data["access_token"]
        assert "access_token" in resp.cookies
        assert "csrf_token" in resp.cookies

    @pytest.mark.asyncio
    async def test_wrong_password(self, client: AsyncClient) -> None:
        resp = await client.post("/api/auth/login", json={"username": "admin", "password": "nope"})
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_empty_username_rejected(self, client: AsyncClient) -> None:
        resp = await client.post("/api/auth/login", json={"username": "", "password": "x"})
        assert resp.status_code == 422
        assert resp.json()["detail"][0]["field"] == "username"

    @pytest.mark.asyncio
    async def test_repeated_failures_are_rate_limited(
        self, client: AsyncClient, test_settings: Settings
    ) -> None:
        statuses = []
        for _ in range(test_settings.auth_login_max_failures):
            resp = await client.post(
                "/api/auth/login", json={"username": "admin", "password": "nope"}
            )
            statuses.append(resp.status_code)
        assert statuses[-1] == 429

        resp = await client.post(
            "/api/auth/login", json={"username": "admin", "password": TEST_ADMIN_PASSWORD}
        )
        assert resp.status_code == 429
        assert int(resp.headers["retry-after"]) >= 1


class TestIdentity:
    @pytest.mark.asyncio
    async def test_me_requires_auth(self, client: AsyncClient) -> None:
        resp = await client.get("/api/auth/me")
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_me_with_bearer_token(self, client: AsyncClient) -> None:
        token = await login(client)
        client.cookies.clear()
        resp = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200
        assert resp.json()["username"] == "admin"
        assert resp.json()["is_admin"] is True

    @pytest.mark.asyncio
    async def test_invalid_token_is_anonymous(self, client: AsyncClient) -> None:
        resp = await client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_logout_requires_csrf_with_cookie_auth(self, client: AsyncClient) -> None:
        await login(client)
        resp = await client.post("/api/auth/logout")
        assert resp.status_code == 403

        csrf = client.cookies["csrf_token"]
        resp = await client.post("/api/auth/logout", headers={"X-CSRF-Token": csrf})
        assert resp.status_code == 204
