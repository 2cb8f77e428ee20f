from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

from campaign_import.cli import main as cli_main
from campaign_import.db.writers import DryRunWriter


def test_keep_na_strings_from_config(write_config: Path, make_csv, capsys):
    # "NA" という名前の区 (ward) をそのまま取り込めること
    with write_config.open("a", encoding="utf-8") as f:
        f.write("keep_na_strings: [NA]\n")
    p = make_csv("wards.csv", [
        ["ward_code", "ward_name", "constituency_code", "constituency_name"],
        ["W001", "NA", "TN-AC-012", "Anna Nagar"],
    ])
    captured = []
    original = DryRunWriter.insert_many

    def spy(self, table, records, on_batch=None):
        captured.extend(records)
        return original(self, table, records, on_batch=on_batch)

    with patch.object(DryRunWriter, "insert_many", spy):
        code = cli_main(["wards", str(p)])
    assert code == 0
    assert captured == [
        {"ward_code": "W001", "ward_name": "NA", "constituency_code": "TN-AC-012", "constituency_name": "Anna Nagar"}
    ]
    assert "status=success" in capsys.readouterr().out


def test_na_is_missing_by_default(write_config: Path, make_csv, capsys):
    p = make_csv("wards.csv", [
        ["ward_code", "ward_name", "constituency_code", "constituency_name"],
        ["W001", "NA", "TN-AC-012", "Anna Nagar"],
    ])
    assert cli_main(["wards", str(p)]) == 2
    assert "Row 2: Ward Name - Ward Name is required (value: Empty)" in capsys.readouterr().out
