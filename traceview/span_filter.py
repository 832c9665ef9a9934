"""Ancestor-preserving span filter.

When a search or status filter selects some spans of a trace, showing only
those spans would detach them from the tree.  ``filter_to_matched_and_ancestors``
keeps each matched span together with every ancestor on its way to the
root, and drops everything else (including unmatched sibling subtrees).

All ids must already be canonical hex (see :mod:`traceview.ids`).  The
spans must belong to a single trace; mixing traces is not detected and
the result is unspecified.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Sequence

from traceview.ids import is_root_sentinel
from traceview.models import Span

logger = logging.getLogger("traceview")


def _index(spans: Sequence[Span]) -> tuple[dict[str, Span], dict[str, str]]:
    by_id: dict[str, Span] = {}
    parents: dict[str, str] = {}
    for span in spans:
        by_id[span.span_id] = span
        if not is_root_sentinel(span.parent_span_id):
            parents[span.span_id] = span.parent_span_id
    return by_id, parents


def _walk_ancestors(matched_ids: Collection[str], parents: dict[str, str]) -> set[str]:
    keep: set[str] = set()
    for span_id in matched_ids:
        current: str | None = span_id
        # Stops at a root, at a missing parent, or where an earlier walk
        # already passed (which also ends any cycle).
        while current is not None and current not in keep:
            keep.add(current)
            current = parents.get(current)
    return keep


def collect_ancestor_ids(spans: Sequence[Span], matched_ids: Collection[str]) -> set[str]:
    """Return the matched ids plus the ids of all their ancestors.

    Ids that are referenced (as matched ids or parents) but have no span
    in ``spans`` may appear in the result.
    """
    _, parents = _index(spans)
    return _walk_ancestors(matched_ids, parents)


def filter_to_matched_and_ancestors(
    spans: Sequence[Span],
    matched_ids: Collection[str],
) -> list[Span]:
    """Reduce ``spans`` to the matched spans and their ancestor chains.

    An empty ``matched_ids`` means no filter is active, and every span is
    returned.  Matched ids or parent ids without a corresponding span are
    skipped silently.  The result holds the input span objects, each once;
    callers that need a particular order should sort it.
    """
    if not matched_ids:
        return list(spans)

    by_id, parents = _index(spans)
    keep = _walk_ancestors(matched_ids, parents)
    result = [span for span_id, span in by_id.items() if span_id in keep]

    logger.debug(
        "TraceView: kept %d of %d spans for %d matched ids",
        len(result), len(spans), len(matched_ids),
    )
    return result
