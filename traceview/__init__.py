"""
TraceView — canonical trace identifiers and ancestor-preserving span filtering.

Usage::

    from traceview import convert_identifier_fields, filter_to_matched_and_ancestors
    from traceview.models import Span

    records = convert_identifier_fields(raw_trace["spans"])
    spans = [Span.model_validate(r) for r in records]

    # Keep the matched spans plus every ancestor up to the root
    visible = filter_to_matched_and_ancestors(spans, {"1eeb33c8bd23c583"})
"""

__version__ = "0.1.0"

from traceview.config import TraceviewConfig
from traceview.errors import InvalidTracePayload, MalformedIdentifierEncoding, TraceviewError
from traceview.ids import (
    IdentifierCodec,
    base64_to_hex,
    bytes_to_hex,
    convert_identifier_fields,
    hex_to_base64,
    hex_to_bytes,
    is_root_sentinel,
)
from traceview.models import Span, SpanTreeNode
from traceview.span_filter import collect_ancestor_ids, filter_to_matched_and_ancestors
from traceview.tree import build_span_tree, calculate_timeline, summarize_trace

__all__ = [
    "IdentifierCodec",
    "InvalidTracePayload",
    "MalformedIdentifierEncoding",
    "Span",
    "SpanTreeNode",
    "TraceviewConfig",
    "TraceviewError",
    "base64_to_hex",
    "build_span_tree",
    "bytes_to_hex",
    "calculate_timeline",
    "collect_ancestor_ids",
    "convert_identifier_fields",
    "filter_to_matched_and_ancestors",
    "hex_to_base64",
    "hex_to_bytes",
    "is_root_sentinel",
    "summarize_trace",
]
