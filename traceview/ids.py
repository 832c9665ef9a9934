"""Identifier codec.

Trace ids are 16 bytes and span ids 8 bytes.  On the wire they travel as
standard base64 strings; everywhere else TraceView compares, looks up and
displays them as lowercase hex.

Usage::

    from traceview.ids import base64_to_hex, convert_identifier_fields

    base64_to_hex("HuszyL0jxYM=")          # "1eeb33c8bd23c583"

    errors = []
    trace = convert_identifier_fields(raw_trace, errors=errors)

``convert_identifier_fields`` assumes identifier fields hold base64.
Running it over a structure whose identifiers are already hex is not
supported: hex digits are valid base64 characters, so such values are
decoded a second time instead of being rejected.
"""

from __future__ import annotations

import base64
import binascii
import logging
import string
from collections.abc import Iterable
from typing import Any

from traceview.config import DEFAULT_IDENTIFIER_FIELDS, TraceviewConfig
from traceview.errors import MalformedIdentifierEncoding
from traceview.models import IdentifierDecodeError

logger = logging.getLogger("traceview")

TRACE_ID_BYTES = 16
SPAN_ID_BYTES = 8

ROOT_SENTINEL_HEX = "0" * (SPAN_ID_BYTES * 2)
"""All-zero parent span id; like the empty id it means "no parent"."""

_HEX_DIGITS = frozenset(string.hexdigits)


# ── Scalar conversions ─────────────────────────────────────────────────


def bytes_to_hex(data: bytes | bytearray | Iterable[int]) -> str:
    """Render bytes as lowercase hex, two characters per byte, no separators."""
    return bytes(data).hex()


def hex_to_bytes(value: str) -> bytes:
    """Inverse of :func:`bytes_to_hex`."""
    if any(c not in _HEX_DIGITS for c in value):
        raise MalformedIdentifierEncoding(value, "not a hex string")
    try:
        return bytes.fromhex(value)
    except ValueError as exc:
        raise MalformedIdentifierEncoding(value, str(exc)) from exc


def base64_to_hex(value: str) -> str:
    """Decode a standard base64 string and return its bytes as hex.

    Raises:
        MalformedIdentifierEncoding: ``value`` contains characters outside
            the base64 alphabet or is incorrectly padded.
    """
    try:
        raw = base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise MalformedIdentifierEncoding(value, str(exc)) from exc
    return bytes_to_hex(raw)


def hex_to_base64(value: str) -> str:
    """Encode a hex identifier the way it travels on the wire."""
    return base64.b64encode(hex_to_bytes(value)).decode("ascii")


def is_root_sentinel(value: str | bytes | None) -> bool:
    """True when a parent span id means "this span has no parent"."""
    if value is None:
        return True
    if isinstance(value, (bytes, bytearray)):
        return len(value) == 0 or value == bytes(SPAN_ID_BYTES)
    return value == "" or value == ROOT_SENTINEL_HEX


# ── Structural walker ──────────────────────────────────────────────────


class IdentifierCodec:
    """Rewrites identifier fields of nested records between base64 and hex.

    :meth:`convert` turns wire (base64) identifiers into hex and
    :meth:`encode` goes the other way.  A malformed identifier is left as
    it was and reported as an :class:`IdentifierDecodeError`; the rest of
    the structure is still converted.  With ``strict=True`` the first
    malformed identifier raises :class:`MalformedIdentifierEncoding`
    instead.
    """

    def __init__(
        self,
        field_names: Iterable[str] = DEFAULT_IDENTIFIER_FIELDS,
        *,
        strict: bool = False,
    ):
        self.field_names = frozenset(field_names)
        self.strict = strict

    @classmethod
    def from_config(cls, config: TraceviewConfig) -> IdentifierCodec:
        return cls(config.identifier_field_names, strict=config.strict_identifiers)

    def convert(self, value: Any) -> tuple[Any, list[IdentifierDecodeError]]:
        """Return a hex-converted copy of ``value`` and the fields that failed."""
        errors: list[IdentifierDecodeError] = []
        return self._walk(value, "$", errors, False), errors

    def encode(self, value: Any) -> tuple[Any, list[IdentifierDecodeError]]:
        """Return a copy of ``value`` with hex identifiers back in base64."""
        errors: list[IdentifierDecodeError] = []
        return self._walk(value, "$", errors, True), errors

    def _walk(
        self,
        value: Any,
        path: str,
        errors: list[IdentifierDecodeError],
        to_wire: bool,
    ) -> Any:
        if isinstance(value, dict):
            converted: dict[Any, Any] = {}
            for key, item in value.items():
                item_path = f"{path}.{key}"
                if key in self.field_names and isinstance(item, (str, bytes, bytearray)):
                    converted[key] = self._convert_field(key, item, item_path, errors, to_wire)
                else:
                    converted[key] = self._walk(item, item_path, errors, to_wire)
            return converted
        if isinstance(value, list):
            return [self._walk(item, f"{path}[{i}]", errors, to_wire) for i, item in enumerate(value)]
        if isinstance(value, tuple):
            return tuple(self._walk(item, f"{path}[{i}]", errors, to_wire) for i, item in enumerate(value))
        return value

    def _convert_field(
        self,
        key: str,
        value: str | bytes | bytearray,
        path: str,
        errors: list[IdentifierDecodeError],
        to_wire: bool,
    ) -> str:
        if isinstance(value, (bytes, bytearray)):
            return base64.b64encode(value).decode("ascii") if to_wire else bytes_to_hex(value)
        try:
            return hex_to_base64(value) if to_wire else base64_to_hex(value)
        except MalformedIdentifierEncoding as exc:
            if self.strict:
                raise MalformedIdentifierEncoding(value, exc.reason, field=path) from exc
            logger.warning("TraceView: leaving malformed identifier at %s unconverted: %s", path, exc.reason)
            errors.append(
                IdentifierDecodeError(path=path, field=key, value=value, reason=exc.reason)
            )
            return value


def convert_identifier_fields(
    value: Any,
    field_names: Iterable[str] = DEFAULT_IDENTIFIER_FIELDS,
    errors: list[IdentifierDecodeError] | None = None,
) -> Any:
    """Return a copy of ``value`` with identifier fields converted to hex.

    Dicts, lists and tuples are walked recursively.  A dict entry whose key
    is in ``field_names`` and whose value is a string is decoded from base64;
    a ``bytes`` value is hex encoded directly.  Everything else is copied
    through unchanged, and the input is never mutated.

    Malformed identifiers are left unconverted; when ``errors`` is given,
    one :class:`IdentifierDecodeError` is appended per failed field.
    """
    converted, found = IdentifierCodec(field_names).convert(value)
    if errors is not None:
        errors.extend(found)
    return converted
