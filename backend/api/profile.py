"""Member profile pages and contact-card export."""

from __future__ import annotations

import html
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession

from backend.api.deps import (
    get_request_context,
    get_session,
    get_template_renderer,
    require_auth,
)
from backend.exceptions import InvalidParameterError, RecordNotFoundError
from backend.models.organization import Organization
from backend.models.user import User
from backend.rendering.context import RequestContext
from backend.rendering.message import show_message
from backend.rendering.page import HtmlPage
from backend.rendering.templates import JinjaTemplateRenderer
from backend.services.user_service import get_user, parse_mode, parse_positive_id
from backend.services.vcard_service import (
    VCARD_MEDIA_TYPE,
    build_vcard,
    content_disposition,
    vcard_filename,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/modules/profile", tags=["profile"])

MODE_EXPORT_VCARD = 1
_PROFILE_FUNCTION_MODES = frozenset({MODE_EXPORT_VCARD})

_PROFILE_FIELDS: tuple[tuple[str, str], ...] = (
    ("login_name", "Username"),
    ("email", "Email"),
    ("phone", "Phone"),
    ("mobile", "Mobile"),
    ("street", "Street"),
    ("postcode", "Postal code"),
    ("city", "City"),
    ("country", "Country"),
    ("birthday", "Birthday"),
    ("website", "Website"),
)


async def _organization_of(
    session: AsyncSession, user: User, context: RequestContext
) -> Organization | None:
    if user.organization_id is None:
        return None
    if user.organization_id == context.organization.id:
        return context.organization
    return await session.get(Organization, user.organization_id)


def _profile_table(user: User) -> str:
    rows = []
    for attr, label in _PROFILE_FIELDS:
        value = getattr(user, attr) or ""
        if value:
            rows.append(
                f"<tr><th>{html.escape(label)}</th><td>{html.escape(str(value))}</td></tr>"
            )
    return '<table class="profile-fields">\n' + "\n".join(rows) + "\n</table>\n"


@router.get("/profile", response_class=HTMLResponse)
async def profile_page(
    _user: Annotated[User, Depends(require_auth)],
    context: Annotated[RequestContext, Depends(get_request_context)],
    renderer: Annotated[JinjaTemplateRenderer, Depends(get_template_renderer)],
    session: Annotated[AsyncSession, Depends(get_session)],
    user_id: str | None = None,
    print_view: Annotated[str | None, Query(alias="print")] = None,
) -> HTMLResponse:
    """Show the profile of a member with a link to the vCard export."""
    try:
        member = await get_user(session, parse_positive_id("user_id", user_id))
    except InvalidParameterError as exc:
        logger.info("Rejected profile request: %s", exc)
        return show_message(context, renderer, "invalid")
    except RecordNotFoundError as exc:
        logger.info("Profile request for missing record: %s", exc)
        return show_message(context, renderer, "not_found")

    page = HtmlPage(context, renderer, headline=f"Profile of {member.full_name}")
    page.add_css_file("css/profile.css")
    page.set_url_previous_page("/")
    if print_view == "1":
        page.set_print_mode()

    export_url = f"/modules/profile/profile_function?mode={MODE_EXPORT_VCARD}&user_id={member.id}"
    page.add_page_functions_menu_item(
        "menu_item_profile_vcard",
        "Export vCard",
        export_url,
        "fa-address-card",
    )
    page.add_page_functions_menu_item(
        "menu_item_profile_print",
        "Print view",
        f"/modules/profile/profile?user_id={member.id}&print=1",
        "fa-print",
    )
    page.add_html(f'<div class="profile" id="profile-{member.id}">\n')
    page.add_html(_profile_table(member))
    page.add_html("</div>\n")
    if not page.print_view:
        page.add_javascript(
            'document.getElementById("menu_item_profile_print").target = "_blank";',
            execute_after_page_load=True,
        )
    return page.show()


@router.get("/profile_function", response_model=None)
async def profile_function(
    _user: Annotated[User, Depends(require_auth)],
    context: Annotated[RequestContext, Depends(get_request_context)],
    renderer: Annotated[JinjaTemplateRenderer, Depends(get_template_renderer)],
    session: Annotated[AsyncSession, Depends(get_session)],
    user_id: str | None = None,
    mode: str | None = None,
) -> Response:
    """Per-profile functions; mode 1 exports the member as a vCard download."""
    try:
        member_id = parse_positive_id("user_id", user_id)
        parse_mode(mode, _PROFILE_FUNCTION_MODES)
    except InvalidParameterError as exc:
        logger.info("Rejected profile function request: %s", exc)
        return show_message(context, renderer, "invalid")

    try:
        member = await get_user(session, member_id)
    except RecordNotFoundError as exc:
        logger.info("vCard export for missing record: %s", exc)
        return show_message(context, renderer, "not_found")

    organization = await _organization_of(session, member, context)
    body = build_vcard(member, organization)
    logger.debug("Exporting vCard of user %d", member.id)
    return Response(
        content=body,
        media_type=VCARD_MEDIA_TYPE,
        headers={"Content-Disposition": content_disposition(vcard_filename(member))},
    )
