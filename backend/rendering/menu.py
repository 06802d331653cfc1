"""Navigation menus: page-local function menus and the global sidebar menu."""

from __future__ import annotations

import html
from dataclasses import dataclass, field

from backend.exceptions import InternalServerError


class MenuError(InternalServerError):
    """Raised when a menu item references an unknown parent or reuses an id."""


@dataclass
class MenuItem:
    """A single navigation entry, optionally with nested entries."""

    id: str
    name: str
    url: str
    icon: str = ""
    badge_count: int = 0
    description: str = ""
    children: list[MenuItem] = field(default_factory=list)


class MenuNode:
    """A named group of menu items forming an ordered tree."""

    def __init__(self, node_id: str, name: str) -> None:
        self.id = node_id
        self.name = name
        self._items: list[MenuItem] = []
        self._index: dict[str, MenuItem] = {}

    def add_item(
        self,
        item_id: str,
        name: str,
        url: str,
        icon: str = "",
        parent_id: str = "",
        badge_count: int = 0,
        description: str = "",
    ) -> MenuItem:
        """Add an item at top level, or below ``parent_id`` when given.

        Raises ``MenuError`` if ``parent_id`` was never added to this node or
        if ``item_id`` is already in use.
        """
        if item_id in self._index:
            raise MenuError(f"Duplicate menu item id {item_id!r} in node {self.id!r}")

        item = MenuItem(
            id=item_id,
            name=name,
            url=url,
            icon=icon,
            badge_count=badge_count,
            description=description,
        )
        if parent_id:
            parent = self._index.get(parent_id)
            if parent is None:
                raise MenuError(f"Unknown parent menu item {parent_id!r} in node {self.id!r}")
            parent.children.append(item)
        else:
            self._items.append(item)
        self._index[item_id] = item
        return item

    def get_item(self, item_id: str) -> MenuItem | None:
        return self._index.get(item_id)

    def get_items(self) -> list[MenuItem]:
        """Return the top-level items in insertion order."""
        return list(self._items)

    def count(self) -> int:
        """Number of items at every level."""
        return len(self._index)

    def has_items(self) -> bool:
        return bool(self._items)


class MainMenu:
    """Site-wide navigation assembled per request."""

    FUNCTIONS_NODE_ID = "menu-page-functions"

    def __init__(self) -> None:
        self._nodes: list[MenuNode] = []
        self._functions_node: MenuNode | None = None

    def add_node(self, node: MenuNode) -> None:
        self._nodes.append(node)

    def add_functions_node(self, node: MenuNode) -> None:
        """Attach the functions menu of the current page; it is shown first."""
        self._functions_node = node

    def get_nodes(self) -> list[MenuNode]:
        nodes = list(self._nodes)
        if self._functions_node is not None:
            nodes.insert(0, self._functions_node)
        return nodes

    def get_html(self) -> str:
        """Render all non-empty nodes as nested lists."""
        parts: list[str] = []
        for node in self.get_nodes():
            if not node.has_items():
                continue
            parts.append(
                f'<div class="menu-node" id="{html.escape(node.id)}">\n'
                f'<h3 class="menu-header">{html.escape(node.name)}</h3>\n'
                f"{_render_items(node.get_items())}"
                "</div>\n"
            )
        return "".join(parts)


def _render_items(items: list[MenuItem]) -> str:
    lines = ['<ul class="menu-list">\n']
    for item in items:
        icon = f'<i class="icon {html.escape(item.icon)}"></i> ' if item.icon else ""
        badge = f' <span class="badge">{item.badge_count}</span>' if item.badge_count > 0 else ""
        title = f' title="{html.escape(item.description)}"' if item.description else ""
        lines.append(
            f'<li><a id="{html.escape(item.id)}" href="{html.escape(item.url)}"{title}>'
            f"{icon}{html.escape(item.name)}{badge}</a>"
        )
        if item.children:
            lines.append("\n" + _render_items(item.children))
        lines.append("</li>\n")
    lines.append("</ul>\n")
    return "".join(lines)
