"""Template rendering seam used by ``HtmlPage``."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import TYPE_CHECKING, Any, Protocol

from starlette.templating import Jinja2Templates

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


class TemplateRenderer(Protocol):
    """Collects template variables and renders a named template to text."""

    def set_variable(self, key: str, value: Any) -> None: ...

    def render_template(self, template_id: str) -> str: ...


@lru_cache(maxsize=8)
def _templates_for(directory: str) -> Jinja2Templates:
    logger.debug("Loading page templates from %s", directory)
    return Jinja2Templates(directory=directory)


class JinjaTemplateRenderer:
    """``TemplateRenderer`` backed by the theme's Jinja2 templates."""

    def __init__(self, templates_dir: Path) -> None:
        self._templates = _templates_for(str(templates_dir))
        self._variables: dict[str, Any] = {}

    @property
    def variables(self) -> dict[str, Any]:
        return dict(self._variables)

    def set_variable(self, key: str, value: Any) -> None:
        self._variables[key] = value

    def render_template(self, template_id: str) -> str:
        template = self._templates.get_template(template_id)
        return template.render(self._variables)
