"""Span tree, timeline and summary helpers for rendering a trace."""

from __future__ import annotations

from collections.abc import Iterator, Sequence

from traceview.ids import is_root_sentinel
from traceview.models import Span, SpanTreeNode, Timeline, TraceSummary


def is_root_span(span: Span) -> bool:
    return is_root_sentinel(span.parent_span_id)


def build_span_tree(spans: Sequence[Span]) -> list[SpanTreeNode]:
    """Nest spans under their parents.

    Spans without a parent, and spans whose parent is not in ``spans``
    (for example after filtering, or while a trace is still arriving),
    become roots.  Parent links that loop back on themselves are cut at
    the earliest-starting span of the loop, which becomes a root too, so
    every span appears in the tree exactly once.  Siblings are ordered by
    start time.
    """
    nodes: dict[str, SpanTreeNode] = {}
    for s in spans:
        nodes[s.span_id] = SpanTreeNode(span=s, duration_ms=s.duration_ms, children=[])

    roots: list[SpanTreeNode] = []
    for span_id, node in nodes.items():
        parent_id = node.span.parent_span_id
        if (
            not is_root_sentinel(parent_id)
            and parent_id != span_id
            and parent_id in nodes
        ):
            nodes[parent_id].children.append(node)
        else:
            roots.append(node)

    reached = _finish(roots)

    # Whatever no root reaches hangs off a cycle.
    for node in sorted(nodes.values(), key=_start_time):
        if node.span_id in reached:
            continue
        head = min(_find_cycle(node, nodes), key=_start_time)
        parent = nodes[head.span.parent_span_id]
        parent.children = [c for c in parent.children if c is not head]
        roots.append(head)
        reached |= _finish([head])

    roots.sort(key=_start_time)
    return roots


def _start_time(node: SpanTreeNode) -> int:
    return node.span.start_time_unix_nano


def _finish(roots: Sequence[SpanTreeNode]) -> set[str]:
    """Assign depths and sort children below ``roots``; return the ids seen."""
    seen: set[str] = set()
    stack = [(root, 0) for root in roots]
    while stack:
        node, depth = stack.pop()
        seen.add(node.span_id)
        node.depth = depth
        node.children.sort(key=_start_time)
        stack.extend((child, depth + 1) for child in node.children)
    return seen


def _find_cycle(node: SpanTreeNode, nodes: dict[str, SpanTreeNode]) -> list[SpanTreeNode]:
    # Only called for unreached nodes: every one has a parent in ``nodes``,
    # so following parents must end up going round a loop.
    path: list[SpanTreeNode] = []
    index: dict[str, int] = {}
    current = node
    while current.span_id not in index:
        index[current.span_id] = len(path)
        path.append(current)
        current = nodes[current.span.parent_span_id]
    return path[index[current.span_id]:]


def iter_tree(roots: Sequence[SpanTreeNode]) -> Iterator[SpanTreeNode]:
    """Yield every node depth-first, parents before children."""
    stack = list(reversed(roots))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def calculate_timeline(roots: Sequence[SpanTreeNode]) -> Timeline:
    """Compute the time window covered by a span tree."""
    spans = [node.span for node in iter_tree(roots)]
    return _timeline(spans)


def _timeline(spans: Sequence[Span]) -> Timeline:
    if not spans:
        return Timeline()
    min_time = min(s.start_time_unix_nano for s in spans)
    max_time = max(max(s.start_time_unix_nano, s.end_time_unix_nano) for s in spans)
    return Timeline(
        min_time=min_time,
        max_time=max_time,
        duration_ms=(max_time - min_time) / 1_000_000,
    )


def summarize_trace(spans: Sequence[Span]) -> TraceSummary:
    """Summarize a trace's spans.

    A trace is ``incomplete`` while none of its spans is a root span,
    which includes a trace with no spans at all.
    """
    roots = sorted((s for s in spans if is_root_span(s)), key=lambda s: s.start_time_unix_nano)
    timeline = _timeline(spans)
    return TraceSummary(
        trace_id=spans[0].trace_id if spans else "",
        span_count=len(spans),
        error_count=sum(1 for s in spans if s.is_error),
        root_span_name=roots[0].name if roots else "",
        start_time_unix_nano=timeline.min_time,
        duration_ms=timeline.duration_ms,
        incomplete=not roots,
    )
