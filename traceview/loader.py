"""Turn raw trace documents into :class:`Span` models."""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from traceview.errors import InvalidTracePayload
from traceview.ids import IdentifierCodec
from traceview.models import IdentifierDecodeError, Span


def extract_span_records(document: Any) -> list[dict[str, Any]]:
    """Find the span list in a trace document.

    Accepts a bare list of spans, ``{"spans": [...]}`` or a GetTrace style
    response ``{"trace": {"spans": [...]}}``.
    """
    records = document
    if isinstance(records, dict) and "trace" in records:
        records = records["trace"]
    if isinstance(records, dict):
        records = records.get("spans")
    if not isinstance(records, list):
        raise InvalidTracePayload("Trace document does not contain a list of spans")
    for i, record in enumerate(records):
        if not isinstance(record, dict):
            raise InvalidTracePayload(f"Span #{i} is not an object")
    return records


def load_spans(
    records: list[dict[str, Any]],
    codec: IdentifierCodec | None = None,
) -> tuple[list[Span], list[IdentifierDecodeError]]:
    """Convert identifiers of raw span records to hex and validate them."""
    codec = codec or IdentifierCodec()
    converted, errors = codec.convert(records)
    spans: list[Span] = []
    for i, record in enumerate(converted):
        try:
            spans.append(Span.model_validate(record))
        except ValidationError as exc:
            raise InvalidTracePayload(f"Span #{i} is invalid: {exc}") from exc
    return spans, errors
