from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from htsresolver.cli.main import cli


def _write_schedule(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "schedule.txt"
    path.write_text(text, encoding="utf-8")
    return path


def test_cli_help() -> None:
    result = CliRunner().invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "lookup" in result.stdout


def test_lookup_static_code() -> None:
    result = CliRunner().invoke(cli, ["lookup", "0406.40.44"], catch_exceptions=False)
    assert result.exit_code == 0
    assert "12.8%" in result.stdout
    assert "source=verified_table" in result.stdout


def test_lookup_json() -> None:
    result = CliRunner().invoke(cli, ["lookup", "040640440", "--json"], catch_exceptions=False)
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["hs_code"] == "0406.40.44"
    assert payload["percentage"] == 0.128


def test_lookup_unknown_code_exits_nonzero() -> None:
    result = CliRunner().invoke(cli, ["lookup", "3004.90.92"])
    assert result.exit_code == 1
    assert "No duty rate available for 3004.90.92" in result.stdout


def test_lookup_with_reference_document(tmp_path: Path, schedule_text: str) -> None:
    document = _write_schedule(tmp_path, schedule_text)
    result = CliRunner().invoke(cli, ["lookup", "3926.90.99", "--document", str(document)])
    assert result.exit_code == 0
    assert "$1.00" in result.stdout
    assert "approximate" in result.stdout


def test_extract_reads_document_only(tmp_path: Path, schedule_text: str) -> None:
    document = _write_schedule(tmp_path, schedule_text)
    result = CliRunner().invoke(cli, ["extract", "6208.19.90", "--document", str(document), "--json"])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["general_rate"] == "8.7%"
    assert payload["source"] == "document_extractor"
    assert payload["confidence"] == "medium"


def test_extract_missing_code(tmp_path: Path, schedule_text: str) -> None:
    document = _write_schedule(tmp_path, schedule_text)
    result = CliRunner().invoke(cli, ["extract", "6104.63.20", "--document", str(document)])
    assert result.exit_code == 1
    assert "in schedule.txt" in result.stdout


def test_stats() -> None:
    result = CliRunner().invoke(cli, ["stats"], catch_exceptions=False)
    assert result.exit_code == 0
    assert "verified: 9 codes" in result.stdout
    assert "total: 132 codes" in result.stdout


def test_stats_json() -> None:
    result = CliRunner().invoke(cli, ["stats", "--json"], catch_exceptions=False)
    payload = json.loads(result.stdout)
    assert payload["total_table_codes"] == 132
    assert payload["document_extraction"] is False
