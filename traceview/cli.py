"""TraceView CLI — command-line interface.

Usage:
    traceview decode trace.json                 Convert base64 ids to hex
    traceview encode trace.json                 Convert hex ids back to base64
    traceview filter trace.json -m 1eeb33c8...  Keep matched spans + ancestors
    traceview filter trace.json -f csv -o out.csv
    traceview serve --port 9000                 Start the HTTP API
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import click

from traceview import __version__
from traceview.config import TraceviewConfig
from traceview.errors import InvalidTracePayload, MalformedIdentifierEncoding
from traceview.exporter import SpanExporter
from traceview.ids import IdentifierCodec
from traceview.loader import extract_span_records, load_spans
from traceview.span_filter import filter_to_matched_and_ancestors
from traceview.tree import build_span_tree, calculate_timeline, iter_tree, summarize_trace


def _read_json(path: str) -> Any:
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        click.echo(f"Invalid JSON in {path}: {exc}", err=True)
        sys.exit(1)


def _report(errors) -> None:
    for err in errors:
        click.echo(f"warning: {err.path}: {err.reason}", err=True)


@click.group()
@click.version_option(version=__version__, prog_name="traceview")
@click.option("--strict", is_flag=True, help="Fail on the first malformed identifier")
@click.pass_context
def main(ctx: click.Context, strict: bool):
    """TraceView — decode trace identifiers and filter span trees."""
    ctx.obj = TraceviewConfig(strict_identifiers=strict)


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--pretty", is_flag=True, help="Pretty-print JSON output")
@click.pass_obj
def decode(config: TraceviewConfig, path: str, pretty: bool):
    """Convert identifier fields of a JSON document from base64 to hex."""
    codec = IdentifierCodec.from_config(config)
    try:
        converted, errors = codec.convert(_read_json(path))
    except MalformedIdentifierEncoding as exc:
        click.echo(str(exc), err=True)
        sys.exit(1)
    _report(errors)
    indent = 2 if pretty else None
    click.echo(json.dumps(converted, indent=indent, ensure_ascii=False))


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--pretty", is_flag=True, help="Pretty-print JSON output")
@click.pass_obj
def encode(config: TraceviewConfig, path: str, pretty: bool):
    """Convert identifier fields of a JSON document from hex back to base64."""
    codec = IdentifierCodec.from_config(config)
    try:
        converted, errors = codec.encode(_read_json(path))
    except MalformedIdentifierEncoding as exc:
        click.echo(str(exc), err=True)
        sys.exit(1)
    _report(errors)
    indent = 2 if pretty else None
    click.echo(json.dumps(converted, indent=indent, ensure_ascii=False))


@main.command(name="filter")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--match", "-m", "matched", multiple=True, help="Hex span id to keep (repeatable)")
@click.option("--output", "-o", default=None, help="Output file path (default: stdout)")
@click.option("--format", "-f", "fmt", type=click.Choice(["json", "csv"]), default="json", help="Export format (default: json)")
@click.option("--pretty", is_flag=True, help="Pretty-print JSON output")
@click.option("--tree", "show_tree", is_flag=True, help="Print the filtered spans as an indented tree")
@click.pass_obj
def filter_cmd(
    config: TraceviewConfig,
    path: str,
    matched: tuple[str, ...],
    output: str | None,
    fmt: str,
    pretty: bool,
    show_tree: bool,
):
    """Keep matched spans and every ancestor connecting them to the root."""
    codec = IdentifierCodec.from_config(config)
    try:
        records = extract_span_records(_read_json(path))
        spans, errors = load_spans(records, codec)
    except (InvalidTracePayload, MalformedIdentifierEncoding) as exc:
        click.echo(str(exc), err=True)
        sys.exit(1)
    _report(errors)

    filtered = filter_to_matched_and_ancestors(spans, {m.lower() for m in matched})

    if show_tree:
        roots = build_span_tree(filtered)
        summary = summarize_trace(spans)
        timeline = calculate_timeline(roots)
        click.echo(
            f"trace {summary.trace_id}  {len(filtered)}/{summary.span_count} spans"
            f"  {timeline.duration_ms:.1f}ms"
        )
        _echo_tree(roots)
        return

    exporter = SpanExporter(filtered)
    if fmt == "csv":
        content = exporter.export_csv(output)
        if output:
            click.echo(f"Exported {len(filtered)} spans to {output}")
        else:
            click.echo(content, nl=False)
    else:
        data = exporter.export_json(output, pretty=pretty or (output is not None))
        if output:
            click.echo(f"Exported {data['span_count']} spans to {output}")
        else:
            indent = 2 if pretty else None
            click.echo(json.dumps(data, indent=indent, ensure_ascii=False, default=str))


def _echo_tree(roots) -> None:
    for node in iter_tree(roots):
        duration = f"{node.duration_ms:.1f}ms" if node.duration_ms is not None else "-"
        marker = " !" if node.span.is_error else ""
        click.echo(f"{'  ' * node.depth}{node.span.name or '<unnamed>'} [{node.span_id}] {duration}{marker}")


@main.command()
@click.option("--port", "-p", default=8746, help="Port to serve on (default: 8746)")
@click.option("--host", "-h", default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)")
@click.pass_obj
def serve(config: TraceviewConfig, port: int, host: str):
    """Start the TraceView HTTP API."""
    import uvicorn
    from traceview.server.app import create_app

    config.server_host = host
    config.server_port = port
    app = create_app(config)

    click.echo(f"")
    click.echo(f"  TraceView v{__version__}")
    click.echo(f"  API: http://{host}:{port}/api")
    click.echo(f"")

    uvicorn.run(app, host=host, port=port, log_level="warning")


if __name__ == "__main__":
    main()
