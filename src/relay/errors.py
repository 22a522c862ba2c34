"""Domain-specific exceptions for relay operations.

These exceptions are safe to import from API layers without opening any sockets.
"""

from __future__ import annotations


class RelayError(Exception):
    status_code: int = 500
    default_detail: str = "Relay error"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.default_detail)
        self.detail = detail or self.default_detail


class MalformedEventError(RelayError):
    status_code = 400
    default_detail = "Malformed transport event."


class ConfigurationError(RelayError):
    status_code = 503
    default_detail = "Relay is not configured."
