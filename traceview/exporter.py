"""TraceView exporters.

Writes a (possibly filtered) span list to JSON or CSV, either to a file
or as an in-memory dict/string.
"""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Sequence
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from traceview.models import Span


class SpanExporter:
    """Export spans of one trace.

    Usage::

        exporter = SpanExporter(spans)

        # In memory
        data = exporter.export_json()

        # To files
        exporter.export_json("trace.json")
        exporter.export_csv("trace.csv")
    """

    CSV_COLUMNS = [
        "trace_id",
        "span_id",
        "parent_span_id",
        "name",
        "start_time_unix_nano",
        "end_time_unix_nano",
        "duration_ms",
        "status",
    ]

    def __init__(self, spans: Sequence[Span]):
        self.spans = list(spans)

    # ── JSON Export ────────────────────────────────────────────────────

    def export_json(
        self,
        output_path: str | None = None,
        *,
        pretty: bool = True,
    ) -> dict[str, Any]:
        """Export spans as JSON, using the wire field names.

        Args:
            output_path: If provided, write JSON to this file path.
            pretty: Whether to pretty-print the JSON file.

        Returns:
            The exported data as a dictionary.
        """
        data = {
            "version": "1.0",
            "exported_at": datetime.now(timezone.utc).isoformat(),
            "span_count": len(self.spans),
            "spans": [s.model_dump(mode="json", by_alias=True) for s in self.spans],
        }

        if output_path:
            path = Path(output_path)
            path.parent.mkdir(parents=True, exist_ok=True)
            indent = 2 if pretty else None
            path.write_text(
                json.dumps(data, indent=indent, ensure_ascii=False, default=str),
                encoding="utf-8",
            )

        return data

    # ── CSV Export ─────────────────────────────────────────────────────

    def export_csv(self, output_path: str | None = None) -> str:
        """Export spans as CSV, one row per span.

        Returns:
            The CSV content as a string.
        """
        buf = io.StringIO()
        writer = csv.writer(buf)
        writer.writerow(self.CSV_COLUMNS)

        for s in self.spans:
            duration = s.duration_ms
            status = (s.status or {}).get("code", "")
            writer.writerow([
                s.trace_id,
                s.span_id,
                s.parent_span_id or "",
                s.name,
                s.start_time_unix_nano,
                s.end_time_unix_nano or "",
                round(duration, 3) if duration is not None else "",
                status,
            ])

        content = buf.getvalue()
        if output_path:
            path = Path(output_path)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8", newline="")
        return content
