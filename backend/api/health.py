"""Health check endpoint."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from backend.api.deps import get_session, get_settings
from backend.config import Settings
from backend.services.settings_service import get_organization

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

VERSION = "0.1.0"


class HealthResponse(BaseModel):
    status: str
    version: str
    database: str
    templates: str


@router.get("/api/health", response_model=HealthResponse)
async def health_check(
    session: Annotated[AsyncSession, Depends(get_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> HealthResponse:
    """Health check endpoint for monitoring and load balancers."""
    db_status = "ok"
    try:
        if await get_organization(session, settings.organization_shortname) is None:
            db_status = "uninitialized"
    except Exception:
        logger.warning("Health check database query failed", exc_info=True)
        db_status = "error"

    templates_status = "ok" if settings.templates_dir.is_dir() else "missing"

    healthy = db_status == "ok" and templates_status == "ok"
    return HealthResponse(
        status="ok" if healthy else "degraded",
        version=VERSION,
        database=db_status,
        templates=templates_status,
    )
