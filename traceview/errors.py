"""TraceView exceptions."""

from __future__ import annotations


class TraceviewError(Exception):
    """Base class for all TraceView errors."""


class MalformedIdentifierEncoding(TraceviewError, ValueError):
    """An identifier string is not valid base64 (or hex)."""

    def __init__(self, value: str, reason: str, field: str | None = None):
        self.value = value
        self.reason = reason
        self.field = field
        where = f" in field {field!r}" if field else ""
        super().__init__(f"Malformed identifier {value!r}{where}: {reason}")


class InvalidTracePayload(TraceviewError):
    """A trace document does not contain a list of spans."""
