"""Trace filtering routes."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from traceview.errors import InvalidTracePayload, MalformedIdentifierEncoding
from traceview.loader import load_spans
from traceview.models import (
    FilterRequest,
    FilterResponse,
    TraceViewResponse,
)
from traceview.span_filter import filter_to_matched_and_ancestors
from traceview.tree import build_span_tree, calculate_timeline, summarize_trace

router = APIRouter(tags=["traces"])


def _load(request: Request, body: FilterRequest):
    try:
        return load_spans(body.spans, request.app.state.codec)
    except MalformedIdentifierEncoding as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except InvalidTracePayload as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _matched_ids(body: FilterRequest) -> set[str]:
    return {m.lower() for m in body.matched_ids}


@router.post("/traces/filter", response_model=FilterResponse)
async def filter_trace(request: Request, body: FilterRequest):
    """Keep matched spans and their ancestors; everything if nothing matched.

    ``matched`` counts the distinct ids requested, including ids that have
    no span in the trace.
    """
    spans, errors = _load(request, body)
    matched = _matched_ids(body)
    filtered = filter_to_matched_and_ancestors(spans, matched)
    return FilterResponse(
        spans=filtered,
        total=len(spans),
        matched=len(matched),
        errors=errors,
    )


@router.post("/traces/tree", response_model=TraceViewResponse)
async def trace_tree(request: Request, body: FilterRequest):
    """Filter a trace and return it as a span tree ready for rendering."""
    spans, errors = _load(request, body)
    filtered = filter_to_matched_and_ancestors(spans, _matched_ids(body))
    tree = build_span_tree(filtered)
    return TraceViewResponse(
        spans=filtered,
        tree=tree,
        timeline=calculate_timeline(tree),
        summary=summarize_trace(spans),
        errors=errors,
    )
