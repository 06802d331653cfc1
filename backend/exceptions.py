"""Application-level exception types.

Convention:
- ``InternalServerError``: for errors whose details must never reach clients
  (menu wiring mistakes, broken configuration, etc.).  The global handler
  logs the full message at ERROR and returns a generic
  "Internal server error" (500) to the client.
- ``ValueError``: for *business logic* validation errors that are safe to
  forward to clients (invalid dates, bad input formats, etc.).  The global
  ``ValueError`` handler returns ``str(exc)`` as the 422 detail.
- ``InvalidParameterError`` / ``RecordNotFoundError``: raised by HTML
  endpoints and rendered as generic message pages.
"""

from __future__ import annotations


class InternalServerError(Exception):
    """Raised for internal errors whose details must not be exposed to clients.

    The global exception handler in ``backend/main.py`` catches this, logs
    the full message server-side, and returns HTTP 500 with a generic
    ``"Internal server error"`` detail.
    """


class InvalidParameterError(Exception):
    """A request parameter is missing, malformed or outside its allowed values."""

    def __init__(self, name: str, value: object = None) -> None:
        super().__init__(f"Invalid value for parameter {name!r}: {value!r}")
        self.name = name
        self.value = value


class RecordNotFoundError(LookupError):
    """A requested database record does not exist."""
