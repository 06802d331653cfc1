"""Authentication API endpoints."""

from __future__ import annotations

import secrets
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from backend.api.deps import get_session, get_settings, require_auth
from backend.config import Settings
from backend.models.user import User
from backend.schemas.auth import LoginRequest, TokenResponse, UserResponse
from backend.services.auth_service import authenticate_user, create_access_token
from backend.services.rate_limit_service import InMemoryRateLimiter

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _set_auth_cookies(response: Response, settings: Settings, access_token: str) -> None:
    secure = not settings.debug
    max_age = settings.access_token_expire_minutes * 60
    response.set_cookie(
        key="access_token",
        value=access_token,
        httponly=True,
        secure=secure,
        samesite="strict",
        path="/",
        max_age=max_age,
    )
    response.set_cookie(
        key="csrf_token",
        value=secrets.token_urlsafe(32),
        httponly=False,
        secure=secure,
        samesite="strict",
        path="/",
        max_age=max_age,
    )


def _clear_auth_cookies(response: Response) -> None:
    response.delete_cookie("access_token", path="/")
    response.delete_cookie("csrf_token", path="/")


def _get_client_ip(request: Request) -> str:
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",", maxsplit=1)[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def _check_rate_limit(
    limiter: InMemoryRateLimiter,
    key: str,
    max_failures: int,
    window_seconds: int,
) -> None:
    """Raise 429 if the key is rate-limited."""
    limited, retry_after = limiter.is_limited(key, max_failures, window_seconds)
    if limited:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many failed login attempts",
            headers={"Retry-After": str(retry_after)},
        )


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    session: Annotated[AsyncSession, Depends(get_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> TokenResponse:
    """Login with login name and password."""
    limiter: InMemoryRateLimiter = request.app.state.rate_limiter
    client_key = f"login:{_get_client_ip(request)}:{body.username.lower()}"
    max_failures = settings.auth_login_max_failures
    window = settings.auth_rate_limit_window_seconds
    _check_rate_limit(limiter, client_key, max_failures, window)

    user = await authenticate_user(session, body.username, body.password)
    if user is None:
        limiter.add_failure(client_key, window)
        _check_rate_limit(limiter, client_key, max_failures, window)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
        )

    limiter.clear(client_key)
    access_token = create_access_token(
        {"sub": str(user.id)},
        settings.secret_key,
        expires_minutes=settings.access_token_expire_minutes,
    )
    _set_auth_cookies(response, settings, access_token)
    return TokenResponse(access_token=access_token)


@router.post("/logout", status_code=204)
async def logout(response: Response) -> None:
    """Clear authentication cookies."""
    _clear_auth_cookies(response)


@router.get("/me", response_model=UserResponse)
async def me(user: Annotated[User, Depends(require_auth)]) -> UserResponse:
    """Return the authenticated user."""
    return UserResponse(
        id=user.id,
        username=user.login_name,
        first_name=user.first_name,
        last_name=user.last_name,
        is_admin=user.is_admin,
    )
