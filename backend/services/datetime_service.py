"""Datetime helpers: lax date input, strict output."""

from __future__ import annotations

from datetime import date, datetime, timezone

import pendulum


def parse_date(value: str | date | None) -> date | None:
    """Parse a lax date string into a ``date``.

    Accepts ``2026-02-02``, ``2026-02-02 22:21``, ISO 8601 with a ``T``
    separator and ``datetime`` objects. Empty input yields ``None``;
    unparseable input raises ``ValueError``.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    value_str = value.strip()
    if not value_str:
        return None
    try:
        parsed = pendulum.parse(value_str, strict=False)
    except ValueError as exc:
        raise ValueError(f"Invalid date: {value_str!r}") from exc
    if isinstance(parsed, pendulum.DateTime):
        return parsed.date()
    if isinstance(parsed, pendulum.Date):
        return date(parsed.year, parsed.month, parsed.day)
    raise ValueError(f"Invalid date: {value_str!r}")


def now_utc() -> datetime:
    """Return the current UTC datetime."""
    return datetime.now(timezone.utc)


def format_iso(dt: datetime) -> str:
    """Format datetime as ISO 8601 for storage and JSON serialization."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat()
