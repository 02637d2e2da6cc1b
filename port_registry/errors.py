"""Exceptions raised while loading and querying the port registry."""

from __future__ import annotations


class PortRegistryError(Exception):
    """Base class for all registry errors."""


class SourceUnavailableError(PortRegistryError):
    """The registry bytes could not be obtained."""

    def __init__(self, message: str, url: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class MalformedTableError(PortRegistryError):
    """A registry row does not have the expected shape."""

    def __init__(self, message: str, row_index: int | None = None, field_count: int | None = None) -> None:
        super().__init__(message)
        self.row_index = row_index
        self.field_count = field_count


class ParseError(PortRegistryError, ValueError):
    """A port field is not a valid port number or port range."""

    def __init__(self, row_index: int, field: str, raw_value: str, reason: str = "invalid port number") -> None:
        super().__init__(f"Row {row_index}: {reason} in {field} field: {raw_value!r}")
        self.row_index = row_index
        self.field = field
        self.raw_value = raw_value
        self.reason = reason


class NotLoadedError(PortRegistryError, LookupError):
    """No catalog is loaded, or it has no unregistered ports."""
