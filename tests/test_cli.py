"""Tests for the traceview CLI."""

import json

import pytest
from click.testing import CliRunner

from traceview.cli import main
from traceview.ids import hex_to_base64


def wire_span(n: int, parent: int | None = None) -> dict:
    return {
        "traceId": hex_to_base64("ab" * 16),
        "spanId": hex_to_base64(f"{n:016x}"),
        "parentSpanId": hex_to_base64(f"{parent:016x}") if parent is not None else "",
        "name": f"span-{n}",
        "startTimeUnixNano": 1_000_000_000 + n * 1_000_000,
        "endTimeUnixNano": 1_000_000_000 + n * 1_000_000 + 500_000,
    }


@pytest.fixture
def trace_file(tmp_path):
    path = tmp_path / "trace.json"
    document = {
        "trace": {
            "traceId": "abab",
            "spans": [wire_span(1), wire_span(2, 1), wire_span(3, 1), wire_span(4, 2)],
        }
    }
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


@pytest.fixture
def runner():
    return CliRunner()


def test_decode(runner, tmp_path):
    path = tmp_path / "doc.json"
    path.write_text(json.dumps({"spanId": "HuszyL0jxYM=", "other": 1}), encoding="utf-8")

    result = runner.invoke(main, ["decode", str(path)])

    assert result.exit_code == 0
    assert json.loads(result.output) == {"spanId": "1eeb33c8bd23c583", "other": 1}


def test_decode_strict_fails(runner, tmp_path):
    path = tmp_path / "doc.json"
    path.write_text(json.dumps({"spanId": "%%%"}), encoding="utf-8")

    result = runner.invoke(main, ["--strict", "decode", str(path)])

    assert result.exit_code == 1


def test_filter_json(runner, trace_file):
    result = runner.invoke(main, ["filter", str(trace_file), "-m", f"{4:016x}"])

    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["span_count"] == 3
    assert {s["spanId"] for s in data["spans"]} == {f"{n:016x}" for n in (1, 2, 4)}


def test_filter_without_match_keeps_everything(runner, trace_file):
    result = runner.invoke(main, ["filter", str(trace_file)])

    assert result.exit_code == 0
    assert json.loads(result.output)["span_count"] == 4


def test_filter_csv_to_file(runner, trace_file, tmp_path):
    output = tmp_path / "out.csv"
    result = runner.invoke(
        main, ["filter", str(trace_file), "-m", f"{3:016x}", "-f", "csv", "-o", str(output)]
    )

    assert result.exit_code == 0
    assert "Exported 2 spans" in result.output
    lines = output.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 3


def test_filter_tree(runner, trace_file):
    result = runner.invoke(main, ["filter", str(trace_file), "-m", f"{4:016x}", "--tree"])

    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert lines[0].startswith("trace " + "ab" * 16)
    assert lines[1].startswith("span-1")
    assert lines[2].startswith("  span-2")
    assert lines[3].startswith("    span-4")
    assert "span-3" not in result.output


def test_filter_rejects_document_without_spans(runner, tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"trace": {"traceId": "x"}}), encoding="utf-8")

    result = runner.invoke(main, ["filter", str(path)])

    assert result.exit_code == 1


def test_encode(runner, tmp_path):
    path = tmp_path / "doc.json"
    path.write_text(json.dumps({"spans": [{"spanId": "1eeb33c8bd23c583", "parentSpanId": ""}]}), encoding="utf-8")

    result = runner.invoke(main, ["encode", str(path)])

    assert result.exit_code == 0
    assert json.loads(result.output) == {"spans": [{"spanId": "HuszyL0jxYM=", "parentSpanId": ""}]}


def test_encode_strict_fails(runner, tmp_path):
    path = tmp_path / "doc.json"
    path.write_text(json.dumps({"spanId": "not hex"}), encoding="utf-8")

    result = runner.invoke(main, ["--strict", "encode", str(path)])

    assert result.exit_code == 1


def test_decode_rejects_non_utf8_file(runner, tmp_path):
    path = tmp_path / "doc.json"
    path.write_bytes(b'{"spanId": "\xff\xfe"}')

    result = runner.invoke(main, ["decode", str(path)])

    assert result.exit_code == 1
    assert not isinstance(result.exception, UnicodeDecodeError)
