"""Pydantic models for TraceView."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# OTLP/JSON encodes the status code either by enum name or by number.
_ERROR_STATUS_CODES = {"STATUS_CODE_ERROR", 2, "2"}


# ── Span Models ────────────────────────────────────────────────────────────


class Span(BaseModel):
    """One span of a trace, with identifiers already in hex form.

    Field names follow the wire schema through aliases (``traceId``,
    ``spanId``, ``parentSpanId``...).  Fields this library does not use
    are kept as extras so they survive a round trip.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="allow")

    trace_id: str = Field("", alias="traceId")
    span_id: str = Field(alias="spanId")
    parent_span_id: str | None = Field("", alias="parentSpanId")
    name: str = ""
    start_time_unix_nano: int = Field(0, alias="startTimeUnixNano")
    end_time_unix_nano: int = Field(0, alias="endTimeUnixNano")
    attributes: Any = None
    status: dict[str, Any] | None = None

    @property
    def duration_ms(self) -> float | None:
        if not self.end_time_unix_nano:
            return None
        return (self.end_time_unix_nano - self.start_time_unix_nano) / 1_000_000

    @property
    def is_error(self) -> bool:
        if not self.status:
            return False
        return self.status.get("code") in _ERROR_STATUS_CODES


class SpanTreeNode(BaseModel):
    span: Span
    depth: int = 0
    duration_ms: float | None = None
    children: list[SpanTreeNode] = Field(default_factory=list)

    @property
    def span_id(self) -> str:
        return self.span.span_id


class Timeline(BaseModel):
    min_time: int = 0
    max_time: int = 0
    duration_ms: float = 0.0


class TraceSummary(BaseModel):
    trace_id: str = ""
    span_count: int = 0
    error_count: int = 0
    root_span_name: str = ""
    start_time_unix_nano: int = 0
    duration_ms: float = 0.0
    incomplete: bool = False


# ── Identifier decoding ────────────────────────────────────────────────────


class IdentifierDecodeError(BaseModel):
    """An identifier field that was left unconverted."""

    path: str
    field: str
    value: str
    reason: str


# ── API Models ─────────────────────────────────────────────────────────────


class DecodeRequest(BaseModel):
    payload: Any = None


class DecodeResponse(BaseModel):
    payload: Any = None
    errors: list[IdentifierDecodeError] = Field(default_factory=list)


class FilterRequest(BaseModel):
    spans: list[dict[str, Any]]
    matched_ids: list[str] = Field(default_factory=list)


class FilterResponse(BaseModel):
    spans: list[Span]
    total: int
    matched: int
    errors: list[IdentifierDecodeError] = Field(default_factory=list)


class TraceViewResponse(BaseModel):
    spans: list[Span]
    tree: list[SpanTreeNode]
    timeline: Timeline
    summary: TraceSummary
    errors: list[IdentifierDecodeError] = Field(default_factory=list)
