"""Tests for span tree building, timelines and summaries."""

from conftest import TRACE_ID, make_span, sid

from traceview.span_filter import filter_to_matched_and_ancestors
from traceview.tree import (
    build_span_tree,
    calculate_timeline,
    is_root_span,
    iter_tree,
    summarize_trace,
)


def test_build_span_tree(forked):
    roots = build_span_tree(forked)

    assert len(roots) == 1
    root = roots[0]
    assert root.span_id == sid(1)
    assert root.depth == 0
    assert [c.span_id for c in root.children] == [sid(2), sid(3)]
    assert root.children[0].children[0].span_id == sid(4)
    assert root.children[0].children[0].depth == 2


def test_children_sorted_by_start_time():
    spans = [
        make_span(1),
        make_span(2, parent=1, startTimeUnixNano=5_000),
        make_span(3, parent=1, startTimeUnixNano=1_000),
    ]
    roots = build_span_tree(spans)
    assert [c.span_id for c in roots[0].children] == [sid(3), sid(2)]


def test_orphans_become_roots():
    spans = [make_span(2, parent=1), make_span(3, parent=2), make_span(5, parent=4)]
    roots = build_span_tree(spans)
    assert {r.span_id for r in roots} == {sid(2), sid(5)}


def test_self_parent_is_a_root():
    roots = build_span_tree([make_span(7, parent=7)])
    assert [r.span_id for r in roots] == [sid(7)]


def test_tree_of_filtered_spans_stays_connected(forked):
    filtered = filter_to_matched_and_ancestors(forked, {sid(4)})
    roots = build_span_tree(filtered)

    assert len(roots) == 1
    assert [n.span_id for n in iter_tree(roots)] == [sid(1), sid(2), sid(4)]


def test_iter_tree_is_depth_first(forked):
    order = [n.span_id for n in iter_tree(build_span_tree(forked))]
    assert order == [sid(1), sid(2), sid(4), sid(3)]


def test_duration_on_nodes(chain):
    roots = build_span_tree(chain)
    assert roots[0].duration_ms == 0.5


def test_calculate_timeline(forked):
    timeline = calculate_timeline(build_span_tree(forked))
    assert timeline.min_time == 1_001_000_000
    assert timeline.max_time == 1_004_500_000
    assert timeline.duration_ms == 3.5


def test_calculate_timeline_empty():
    timeline = calculate_timeline([])
    assert timeline.min_time == 0
    assert timeline.max_time == 0
    assert timeline.duration_ms == 0.0


def test_summarize_trace(forked):
    spans = forked + [make_span(5, parent=1, status={"code": "STATUS_CODE_ERROR"})]
    summary = summarize_trace(spans)

    assert summary.trace_id == TRACE_ID
    assert summary.span_count == 5
    assert summary.error_count == 1
    assert summary.root_span_name == "span-1"
    assert summary.incomplete is False


def test_summarize_trace_without_root_is_incomplete():
    summary = summarize_trace([make_span(2, parent=1)])
    assert summary.incomplete is True
    assert summary.root_span_name == ""


def test_is_root_span():
    assert is_root_span(make_span(1))
    assert is_root_span(make_span(1, parent=0))
    assert not is_root_span(make_span(2, parent=1))


def test_cycle_is_cut_so_every_filtered_span_is_shown():
    spans = [make_span(1, parent=2), make_span(2, parent=1), make_span(3, parent=2)]
    filtered = filter_to_matched_and_ancestors(spans, {sid(3)})
    roots = build_span_tree(filtered)

    nodes = list(iter_tree(roots))
    assert len(nodes) == len(filtered) == 3
    # Span 1 starts first, so the loop is broken above it
    assert [r.span_id for r in roots] == [sid(1)]
    assert [n.span_id for n in nodes] == [sid(1), sid(2), sid(3)]
    assert [n.depth for n in nodes] == [0, 1, 2]


def test_cycle_next_to_regular_tree():
    spans = [
        make_span(1),
        make_span(2, parent=1),
        make_span(5, parent=6),
        make_span(6, parent=7),
        make_span(7, parent=5),
        make_span(8, parent=6),
    ]
    roots = build_span_tree(spans)

    assert [r.span_id for r in roots] == [sid(1), sid(5)]
    assert len(list(iter_tree(roots))) == len(spans)


def test_deep_chain():
    depth = 1500
    spans = [make_span(1)] + [make_span(n, parent=n - 1) for n in range(2, depth + 1)]
    filtered = filter_to_matched_and_ancestors(spans, {sid(depth)})
    roots = build_span_tree(filtered)

    nodes = list(iter_tree(roots))
    assert len(nodes) == depth
    assert nodes[-1].span_id == sid(depth)
    assert nodes[-1].depth == depth - 1
    assert calculate_timeline(roots).min_time == 1_001_000_000
