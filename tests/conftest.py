"""Shared fixtures for TraceView tests."""

import pytest

from traceview.models import Span

TRACE_ID = "0af7651916cd43dd8448eb211c80319c"


def sid(n: int) -> str:
    """Hex span id for a small integer."""
    return f"{n:016x}"


def make_span(n: int, parent: int | None = None, **kwargs) -> Span:
    fields = {
        "traceId": TRACE_ID,
        "spanId": sid(n),
        "parentSpanId": sid(parent) if parent is not None else "",
        "name": f"span-{n}",
        "startTimeUnixNano": 1_000_000_000 + n * 1_000_000,
        "endTimeUnixNano": 1_000_000_000 + n * 1_000_000 + 500_000,
    }
    fields.update(kwargs)
    return Span.model_validate(fields)


@pytest.fixture
def chain():
    """root(1) -> child(2) -> grandchild(3)."""
    return [make_span(1), make_span(2, parent=1), make_span(3, parent=2)]


@pytest.fixture
def forked():
    """root(1) -> {child1(2), child2(3)}, child1(2) -> grandchild1(4)."""
    return [
        make_span(1),
        make_span(2, parent=1),
        make_span(3, parent=1),
        make_span(4, parent=2),
    ]
