"""Static asset URL resolution with debug/minified variants."""

from __future__ import annotations

import logging
import re
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

_ABSOLUTE_URL_RE = re.compile(r"^(?:[a-zA-Z][a-zA-Z0-9+.-]*:)?//")
_MIN_SUFFIX = ".min"


def is_absolute_url(ref: str) -> bool:
    """True for scheme-prefixed (``https://``) and protocol-relative (``//``) URLs."""
    return _ABSOLUTE_URL_RE.match(ref) is not None


def split_asset_path(asset: str) -> tuple[str, str, str]:
    """Split an asset path into (directory, base name without ``.min``, extension).

    The extension includes its leading dot and may be empty.
    """
    path = PurePosixPath(asset.lstrip("/"))
    directory = "" if str(path.parent) == "." else str(path.parent)
    base = path.stem if path.suffix else path.name
    base = base.removesuffix(_MIN_SUFFIX)
    return directory, base, path.suffix


def resolve_asset_path(asset: str, static_dir: Path, static_url: str, debug: bool) -> str:
    """Return the public URL of the debug or minified variant of an asset.

    The minified file wins unless debug mode is on, but only if it exists on
    disk. Otherwise the debug file is used when it exists. When neither exists
    the minified URL is still returned so the page renders with a broken link
    instead of failing.
    """
    directory, base, extension = split_asset_path(asset)
    prefix = f"{directory}/" if directory else ""
    debug_path = f"{prefix}{base}{extension}"
    min_path = f"{prefix}{base}{_MIN_SUFFIX}{extension}"

    min_exists = (static_dir / min_path).is_file()
    debug_exists = (static_dir / debug_path).is_file()

    if (not debug and min_exists) or not debug_exists:
        chosen = min_path
        if not min_exists:
            logger.warning("Asset %s not found under %s", asset, static_dir)
    else:
        chosen = debug_path

    return f"{static_url.rstrip('/')}/{chosen}"
