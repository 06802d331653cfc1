"""Generic message pages shown instead of a requested page."""

from __future__ import annotations

import html
import logging
from typing import TYPE_CHECKING

from backend.rendering.page import HtmlPage

if TYPE_CHECKING:
    from fastapi.responses import HTMLResponse

    from backend.rendering.context import RequestContext
    from backend.rendering.templates import TemplateRenderer

logger = logging.getLogger(__name__)

MESSAGES: dict[str, str] = {
    "invalid": "Invalid request. The page was called with missing or invalid parameters.",
    "not_found": "The requested record could not be found.",
    "no_rights": "You do not have the required rights to view this page.",
}

MESSAGE_STATUS: dict[str, int] = {
    "invalid": 400,
    "not_found": 404,
    "no_rights": 403,
}


def show_message(
    context: RequestContext,
    renderer: TemplateRenderer,
    message_id: str,
    headline: str = "Notice",
) -> HTMLResponse:
    """Render the message ``message_id`` as a reduced page without menu."""
    text = MESSAGES[message_id]
    status_code = MESSAGE_STATUS.get(message_id, 200)
    logger.info("Showing message %s (HTTP %d)", message_id, status_code)

    page = HtmlPage(context, renderer, headline=headline)
    page.hide_menu()
    page.add_html(
        f'<div class="message message-{html.escape(message_id)}" role="alert">'
        f"<p>{html.escape(text)}</p></div>"
    )
    return page.show(status_code=status_code)
