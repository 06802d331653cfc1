"""Server-rendered HTML page composition.

``HtmlPage`` collects everything one response needs (title, headline,
stylesheets, scripts, feeds, inline javascript, body markup and a page-local
functions menu) and hands it to a ``TemplateRenderer`` in a single ``show()``
call::

    page = HtmlPage(context, renderer, headline="Members")
    page.add_javascript_file("libs/jquery/jquery.js")
    page.add_html("<strong>Welcome!</strong>")
    return page.show()
"""

from __future__ import annotations

import html
import logging
from typing import TYPE_CHECKING

from fastapi.responses import HTMLResponse

from backend.rendering.assets import is_absolute_url, resolve_asset_path
from backend.rendering.menu import MainMenu, MenuNode

if TYPE_CHECKING:
    from backend.rendering.context import RequestContext
    from backend.rendering.templates import TemplateRenderer
    from backend.services.settings_service import OrganizationSettings

logger = logging.getLogger(__name__)

TEMPLATE_FULL = "index.html"
TEMPLATE_REDUCED = "index_reduced.html"

BROWSER_UPDATE_SCRIPT = "libs/browser-update/browser-update.js"


class HtmlPage:
    """Accumulates the presentation state of one outgoing page."""

    def __init__(
        self,
        context: RequestContext,
        renderer: TemplateRenderer,
        headline: str = "",
    ) -> None:
        self._context = context
        self._renderer = renderer

        self._title = ""
        self._headline = ""
        self._header = ""
        self._page_content = ""
        self._javascript_content = ""
        self._javascript_content_execute = ""
        self._css_files: list[str] = []
        self._js_files: list[str] = []
        self._rss_files: list[tuple[str, str]] = []
        self._url_previous_page = ""

        self._show_menu = True
        self._show_theme_html = True
        self._has_navbar = False
        self._print_view = False
        self._mode_inline = False
        self._shown = False

        self._menu_page_functions = MenuNode(MainMenu.FUNCTIONS_NODE_ID, headline)

        self.set_headline(headline)

        preferences = context.preferences
        if preferences.has("system_browser_update_check") and preferences.get_bool(
            "system_browser_update_check"
        ):
            self.add_javascript_file(BROWSER_UPDATE_SCRIPT)

    # -- title and headline ------------------------------------------------

    def set_title(self, title: str) -> None:
        """Set the ``<title>``, always prefixed with the organization name."""
        organization_name = self._context.organization_name
        if title == "":
            self._title = organization_name
        else:
            self._title = f"{organization_name} - {title}"

    def get_title(self) -> str:
        return self._title

    def set_headline(self, headline: str) -> None:
        """Set the ``<h1>`` headline; also the title if no title was set yet."""
        if self._title == "":
            self.set_title(headline)
        self._headline = headline

    def get_headline(self) -> str:
        return self._headline

    # -- head resources ----------------------------------------------------

    def _resolve(self, ref: str) -> str:
        if is_absolute_url(ref):
            return ref
        settings = self._context.settings
        return resolve_asset_path(ref, settings.static_dir, settings.static_url, settings.debug)

    def _add_unique(self, files: list[str], ref: str) -> None:
        if ref in files:
            return
        resolved = self._resolve(ref)
        if resolved not in files:
            files.append(resolved)

    def add_css_file(self, css_file: str) -> None:
        """Add a stylesheet by absolute URL or path relative to the static root."""
        self._add_unique(self._css_files, css_file)

    def add_javascript_file(self, js_file: str) -> None:
        """Add a script by absolute URL or path relative to the static root."""
        self._add_unique(self._js_files, js_file)

    def add_rss_file(self, rss_file: str, title: str = "") -> None:
        """Add a feed link. Titled feeds replace an earlier feed with the same title."""
        if title != "":
            for index, (existing_title, _) in enumerate(self._rss_files):
                if existing_title == title:
                    self._rss_files[index] = (title, rss_file)
                    return
            self._rss_files.append((title, rss_file))
        elif ("", rss_file) not in self._rss_files:
            self._rss_files.append(("", rss_file))

    def add_javascript(self, javascript_code: str, execute_after_page_load: bool = False) -> None:
        """Add inline javascript; blocks are emitted in call order."""
        if execute_after_page_load:
            self._javascript_content_execute += javascript_code + "\n"
        else:
            self._javascript_content += javascript_code + "\n"

    def add_header(self, header: str) -> None:
        """Append raw markup to ``<head>``. The caller must pass well-formed HTML."""
        self._header += header

    def get_css_files(self) -> list[str]:
        return list(self._css_files)

    def get_javascript_files(self) -> list[str]:
        return list(self._js_files)

    def get_rss_files(self) -> list[tuple[str, str]]:
        return list(self._rss_files)

    def get_html_css_files(self) -> str:
        return "".join(
            f'<link rel="stylesheet" type="text/css" href="{html.escape(css_file)}" />\n'
            for css_file in self._css_files
        )

    def get_html_js_files(self) -> str:
        return "".join(
            f'<script type="text/javascript" src="{html.escape(js_file)}"></script>\n'
            for js_file in self._js_files
        )

    def get_html_rss_files(self) -> str:
        lines: list[str] = []
        for title, rss_file in self._rss_files:
            title_attr = f' title="{html.escape(title)}"' if title else ""
            lines.append(
                f'<link rel="alternate" type="application/rss+xml"{title_attr}'
                f' href="{html.escape(rss_file)}" />\n'
            )
        return "".join(lines)

    def get_html_additional_header(self) -> str:
        """Raw header markup followed by stylesheet, script and feed tags."""
        return (
            self._header
            + self.get_html_css_files()
            + self.get_html_js_files()
            + self.get_html_rss_files()
        )

    # -- body ----------------------------------------------------------------

    def add_html(self, html_content: str) -> None:
        """Append raw markup to the page body; the first call ends up on top."""
        self._page_content += html_content

    def get_content(self) -> str:
        return self._page_content

    def add_page_functions_menu_item(
        self,
        item_id: str,
        name: str,
        url: str,
        icon: str = "",
        parent_menu_item_id: str = "",
        badge_count: int = 0,
        description: str = "",
    ) -> None:
        """Add an entry to the functions menu of this page.

        Raises ``MenuError`` when ``parent_menu_item_id`` is not a known item.
        """
        self._menu_page_functions.add_item(
            item_id, name, url, icon, parent_menu_item_id, badge_count, description
        )

    @property
    def menu_page_functions(self) -> MenuNode:
        return self._menu_page_functions

    def set_url_previous_page(self, url: str) -> None:
        # TODO: restrict to same-origin URLs once back-link validation is decided.
        self._url_previous_page = url

    def get_url_previous_page(self) -> str:
        return self._url_previous_page

    # -- layout flags ----------------------------------------------------------

    def hide_menu(self) -> None:
        self._show_menu = False

    def hide_theme_html(self) -> None:
        """Skip the theme's custom header and body decoration."""
        self._show_theme_html = False

    def mark_has_navbar(self) -> None:
        self._has_navbar = True

    def set_inline_mode(self) -> None:
        """Render without header menu and sidebar using the reduced template."""
        self._mode_inline = True

    def set_print_mode(self) -> None:
        """Reduced template plus print styles (black, grey and white only)."""
        self.set_inline_mode()
        self._print_view = True

    @property
    def show_menu(self) -> bool:
        return self._show_menu

    @property
    def show_theme_html(self) -> bool:
        return self._show_theme_html

    @property
    def has_navbar(self) -> bool:
        return self._has_navbar

    @property
    def inline_mode(self) -> bool:
        return self._mode_inline

    @property
    def print_view(self) -> bool:
        return self._print_view

    # -- output ------------------------------------------------------------

    def get_template_id(self) -> str:
        return TEMPLATE_REDUCED if self._mode_inline else TEMPLATE_FULL

    def _assign_variables(self) -> None:
        context = self._context
        settings = context.settings
        preferences = context.preferences
        assign = self._renderer.set_variable

        context.menu.add_functions_node(self._menu_page_functions)

        assign("additional_header_data", self.get_html_additional_header())
        assign("title", self._title)
        assign("headline", self._headline)
        assign("url_previous_page", self._url_previous_page)
        assign("organization_name", context.organization_name)
        assign("url_base", settings.base_url)
        assign("url_theme", settings.theme_url)
        assign("javascript_content", self._javascript_content)
        assign("javascript_content_execute_at_page_load", self._javascript_content_execute)

        assign("user_id", context.user.id if context.user is not None else 0)
        assign("valid_login", context.valid_login)
        assign("debug", settings.debug)
        assign("registration_enabled", _get_bool(preferences, "registration_enable_module"))

        assign("print_view", self._print_view)
        assign("show_menu", self._show_menu)
        assign("show_theme_html", self._show_theme_html)
        assign("has_navbar", self._has_navbar)
        assign("menu_sidebar", context.menu.get_html())
        assign("content", self._page_content)

        url_imprint = _get_non_empty(preferences, "system_url_imprint")
        url_data_protection = _get_non_empty(preferences, "system_url_data_protection")
        assign("url_imprint", url_imprint)
        assign("url_data_protection", url_data_protection)

        if _get_bool(preferences, "system_cookie_note"):
            assign("cookie_note", True)
            assign("cookie_domain", settings.cookie_domain)
            assign("cookie_prefix", settings.cookie_prefix)
            if settings.cookie_for_domain:
                assign("cookie_path", "/")
            else:
                assign("cookie_path", f"{settings.url_path}/")
            assign("cookie_data_protection_url", url_data_protection)

    def render(self) -> str:
        """Populate the renderer and return the rendered document."""
        if self._shown:
            raise RuntimeError("HtmlPage has already been rendered")
        self._shown = True
        self._assign_variables()
        template_id = self.get_template_id()
        logger.debug("Rendering %r with template %s", self._headline, template_id)
        return self._renderer.render_template(template_id)

    def show(self, status_code: int = 200) -> HTMLResponse:
        """Render the page and wrap it in an HTML response."""
        return HTMLResponse(content=self.render(), status_code=status_code)


def _get_bool(preferences: OrganizationSettings, name: str) -> bool:
    return preferences.has(name) and preferences.get_bool(name)


def _get_non_empty(preferences: OrganizationSettings, name: str) -> str:
    if preferences.has(name):
        return preferences.get_string(name)
    return ""
