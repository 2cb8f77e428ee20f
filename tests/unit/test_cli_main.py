from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

from campaign_import.cli import main as cli_main
from campaign_import.db.connection import BackendConnectionError


def _run(args: list[str], capsys) -> tuple[int, str]:
    code = cli_main(args)
    return code, capsys.readouterr().out


def test_cli_missing_config(temp_workdir: Path, make_csv, ward_rows, capsys):
    p = make_csv("wards.csv", ward_rows)
    code, out = _run(["wards", str(p)], capsys)
    assert code == 1
    assert "ERROR config: config file not found" in out


def test_cli_unsupported_file(write_config, temp_workdir: Path, capsys):
    bad = temp_workdir / "data" / "wards.pdf"
    bad.write_text("x", encoding="utf-8")
    code, out = _run(["wards", str(bad)], capsys)
    assert code == 1
    assert "ERROR Please upload a CSV or Excel file" in out


def test_cli_map_override(write_config, make_csv, capsys):
    p = make_csv("wards.csv", [
        ["code", "Ward Name", "Constituency Code", "Constituency Name"],
        ["W001", "Anna Nagar", "TN-AC-012", "Anna Nagar"],
    ])
    code, out = _run(["wards", str(p), "--map", "ward_code=code"], capsys)
    assert code == 0
    assert "* Ward Code (ward_code) <- code" in out
    assert "status=success" in out


def test_cli_bad_map_syntax(write_config, make_csv, ward_rows, capsys):
    p = make_csv("wards.csv", ward_rows)
    code, out = _run(["wards", str(p), "--map", "ward_code"], capsys)
    assert code == 1
    assert "ERROR mapping: invalid --map value" in out


def test_cli_map_unknown_header(write_config, make_csv, ward_rows, capsys):
    p = make_csv("wards.csv", ward_rows)
    code, out = _run(["wards", str(p), "--map", "district=Region"], capsys)
    assert code == 1
    assert "ERROR mapping: header not found in file: 'Region'" in out


def test_cli_unmap_required_fails_validation(write_config, make_csv, ward_rows, capsys):
    p = make_csv("wards.csv", ward_rows)
    code, out = _run(["wards", str(p), "--unmap", "ward_name"], capsys)
    assert code == 2
    assert "Row 2: Ward Name - Ward Name is required (value: Empty)" in out
    assert "status=invalid" in out


def test_cli_inspect_data(write_config, make_csv, booth_rows, capsys):
    p = make_csv("booths.csv", booth_rows)
    code, out = _run(["booths", str(p), "--inspect-data"], capsys)
    assert code == 0
    assert "FILE: booths.csv format=delimited rows=2" in out
    assert "* Booth Code (booth_code) <- booth_code" in out
    assert "SUMMARY" not in out


def test_cli_debug_flag(write_config, make_csv, ward_rows, capsys):
    p = make_csv("wards.csv", ward_rows)
    code, out = _run(["wards", str(p), "--debug"], capsys)
    assert code == 0
    assert "DEBUG debug mode enabled" in out
    assert "DEBUG pipeline: idle -> file_selected" in out


def test_cli_env_file_loaded(write_config, temp_workdir: Path, make_csv, ward_rows, capsys, monkeypatch):
    # backend=supabase + .env の資格情報でクライアント生成まで進む
    text = write_config.read_text(encoding="utf-8").replace("backend: dry-run", "backend: supabase")
    write_config.write_text(text, encoding="utf-8")
    (temp_workdir / ".env").write_text(
        "SUPABASE_URL=https://env.supabase.co\nSUPABASE_SERVICE_ROLE_KEY=env-key\n", encoding="utf-8"
    )
    # .env は既存の環境変数を上書きする
    monkeypatch.setenv("SUPABASE_URL", "https://stale.supabase.co")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "stale-key")
    p = make_csv("wards.csv", ward_rows)
    client = MagicMock()
    client.table.return_value.insert.return_value.execute.return_value = MagicMock(data=[{}, {}, {}])
    with patch("supabase.create_client", return_value=client) as mock_create:
        code, out = _run(["wards", str(p)], capsys)
    assert code == 0
    mock_create.assert_called_once_with("https://env.supabase.co", "env-key")
    client.table.assert_called_once_with("wards")
    assert "inserted=3 status=success" in out


def test_cli_connection_failure_is_fatal(write_config, make_csv, ward_rows, capsys):
    text = write_config.read_text(encoding="utf-8").replace("backend: dry-run", "backend: postgres")
    write_config.write_text(text, encoding="utf-8")
    p = make_csv("wards.csv", ward_rows)
    with patch(
        "campaign_import.cli.__main__.pg_cursor",
        side_effect=BackendConnectionError("failed to connect to PostgreSQL: refused"),
    ):
        code, out = _run(["wards", str(p)], capsys)
    assert code == 1
    assert "ERROR connection: failed to connect to PostgreSQL: refused" in out


def test_cli_dry_run_flag_overrides_backend(write_config, make_csv, ward_rows, capsys):
    text = write_config.read_text(encoding="utf-8").replace("backend: dry-run", "backend: postgres")
    write_config.write_text(text, encoding="utf-8")
    p = make_csv("wards.csv", ward_rows)
    with patch("campaign_import.cli.__main__.pg_cursor") as mock_cursor:
        code, out = _run(["wards", str(p), "--dry-run"], capsys)
    mock_cursor.assert_not_called()
    assert code == 0
    assert "dry-run: would insert 3 rows into wards" in out
