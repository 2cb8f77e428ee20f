from __future__ import annotations

import json
from pathlib import Path

from campaign_import.cli import main as cli_main

"""Validation report (JSON Lines) contract.

Each line: {"row": int, "column": str, "field_key": str, "value": str, "message": str}
"""

REQUIRED_KEYS = {"row", "column", "field_key", "value", "message"}


def test_error_report_lines_follow_schema(write_config, make_csv, temp_workdir: Path, capsys):
    p = make_csv("constituencies.csv", [
        ["code", "name", "number", "reserved_for", "center_lat"],
        ["AC-012", "Anna Nagar", "12", "sc", "13.08"],
        ["AC-013", "", "x", "obc", "13.07"],
    ])
    code = cli_main(["constituencies", str(p), "--error-report"])
    out = capsys.readouterr().out
    assert code == 2
    reports = list((temp_workdir / "logs").glob("validation-*.log"))
    assert len(reports) == 1
    assert f"validation report written to {Path('logs') / reports[0].name}" in out

    lines = [json.loads(line) for line in reports[0].read_text(encoding="utf-8").splitlines()]
    assert [entry["field_key"] for entry in lines] == ["name", "number", "reserved_for"]
    for entry in lines:
        assert set(entry) == REQUIRED_KEYS
        assert isinstance(entry["row"], int)
        assert entry["row"] == 3
        assert isinstance(entry["value"], str)
    assert lines[0]["value"] == "Empty"


def test_no_report_without_flag(write_config, make_csv, temp_workdir: Path, capsys):
    p = make_csv("wards.csv", [["ward_code"], ["W001"]])
    assert cli_main(["wards", str(p)]) == 2
    assert list((temp_workdir / "logs").glob("validation-*.log")) == []
