"""Overview page."""

from __future__ import annotations

import html
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession

from backend.api.deps import get_request_context, get_session, get_template_renderer
from backend.rendering.context import RequestContext
from backend.rendering.page import HtmlPage
from backend.rendering.templates import JinjaTemplateRenderer
from backend.services.user_service import list_members

router = APIRouter(tags=["pages"])


@router.get("/", response_class=HTMLResponse)
async def overview(
    context: Annotated[RequestContext, Depends(get_request_context)],
    renderer: Annotated[JinjaTemplateRenderer, Depends(get_template_renderer)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> HTMLResponse:
    """Landing page; logged-in visitors also see the member list."""
    page = HtmlPage(context, renderer, headline="Overview")
    page.mark_has_navbar()

    organization = context.organization
    page.add_html(f"<p>Welcome to {html.escape(organization.longname)}.</p>\n")
    if organization.homepage:
        escaped = html.escape(organization.homepage)
        page.add_html(f'<p><a href="{escaped}">{escaped}</a></p>\n')

    if context.user is not None:
        members = await list_members(session, organization.id)
        page.add_html('<ul class="member-list">\n')
        for member in members:
            page.add_html(
                f'<li><a href="/modules/profile/profile?user_id={member.id}">'
                f"{html.escape(member.full_name or member.login_name)}</a></li>\n"
            )
        page.add_html("</ul>\n")

    return page.show()
