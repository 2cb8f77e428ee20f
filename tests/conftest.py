# Shared pytest fixtures
from __future__ import annotations
import tempfile
from collections.abc import Callable
from pathlib import Path

import pandas as pd
import pytest

from campaign_import.logging.init import reset_logging


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        # keep connection settings of the developer machine out of the tests
        for var in ("DATABASE_URL", "PGDSN", "SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY", "SUPABASE_KEY"):
            monkeypatch.delenv(var, raising=False)
        yield p


@pytest.fixture(autouse=True)
def clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def sample_config_yaml() -> str:
    return """backend: dry-run
tables:
  wards: wards
  booths: polling_booths
  constituencies: constituencies
preview_rows: 10
error_display_limit: 50
success_reset_seconds: 0
max_file_size_mb: 5
page_size: 2
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def make_csv(temp_workdir: Path) -> Callable[..., Path]:
    """Write rows (header first) as CSV under data/."""
    def _make(name: str, rows: list[list[object]]) -> Path:
        p = temp_workdir / "data" / name
        lines = [",".join("" if c is None else str(c) for c in r) for r in rows]
        p.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return p
    return _make


@pytest.fixture()
def make_excel(temp_workdir: Path) -> Callable[..., Path]:
    """Write sheets of rows (header first) as an .xlsx workbook under data/."""
    def _make(name: str, sheets: dict[str, list[list[object]]]) -> Path:
        p = temp_workdir / "data" / name
        with pd.ExcelWriter(p, engine="openpyxl") as writer:
            for sheet, rows in sheets.items():
                pd.DataFrame(rows).to_excel(writer, sheet_name=sheet, header=False, index=False)
        return p
    return _make


WARD_HEADERS = ["Ward Code", "Ward Name", "Constituency Code", "Constituency Name"]

BOOTH_HEADERS = [
    "booth_code", "booth_name", "ward_code", "constituency_code", "address",
    "latitude", "longitude", "total_voters", "male_voters", "female_voters",
    "transgender_voters", "accessibility",
]


@pytest.fixture()
def ward_rows() -> list[list[object]]:
    return [
        WARD_HEADERS,
        ["W001", "Anna Nagar", "TN-AC-012", "Anna Nagar"],
        ["W002", "Kilpauk", "TN-AC-012", "Anna Nagar"],
        ["W003", "Egmore", "TN-AC-013", "Egmore"],
    ]


@pytest.fixture()
def booth_rows() -> list[list[object]]:
    return [
        BOOTH_HEADERS,
        ["B001", "Primary School ABC", "W001", "TN-AC-012", "123 Main Street",
         13.0827, 80.2707, 1250, 625, 620, 5, "yes"],
        ["B002", "Community Hall XYZ", "W001", "TN-AC-012", "456 Second Street",
         13.0878, 80.2785, 980, 490, 488, 2, "no"],
    ]
