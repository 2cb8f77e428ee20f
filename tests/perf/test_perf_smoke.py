from __future__ import annotations

import importlib.util
import time
from pathlib import Path

import numpy as np
import pytest

from campaign_import.db.writers import DryRunWriter
from campaign_import.models.target_field import ImportKind
from campaign_import.services.pipeline import ImportPipeline

"""Performance smoke test: parse + validate + dry-run submit of a large booth file.

Budgets are deliberately lenient so CI stays stable; the point is catching
accidental quadratic behaviour in the validator or reader.
"""

ROWS = 20_000
SCRIPT = Path(__file__).resolve().parents[2] / "scripts" / "gen_sample_upload.py"


@pytest.fixture(scope="module")
def generator():
    spec = importlib.util.spec_from_file_location("gen_sample_upload", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_booth_pipeline_throughput(generator, temp_workdir: Path):
    path = temp_workdir / "data" / "booths.csv"
    generator.write_upload(generator.generate_booths(ROWS, np.random.default_rng(7)), path)

    writer = DryRunWriter()
    pipeline = ImportPipeline(ImportKind.BOOTHS, writer, on_alert=lambda m: None, reset_delay=0)
    start = time.perf_counter()
    assert pipeline.select_file(path)
    outcome = pipeline.submit()
    elapsed = time.perf_counter() - start

    assert outcome is not None and outcome.success
    assert writer.calls == [("polling_booths", ROWS)]
    throughput = ROWS / elapsed
    assert elapsed < 30, f"pipeline too slow: {elapsed:.2f}s"
    assert throughput > 1_000


def test_invalid_rows_are_all_reported(generator, temp_workdir: Path):
    rng = np.random.default_rng(11)
    df = generator.inject_invalid(generator.generate_booths(2_000, rng), 0.05, rng)
    path = temp_workdir / "data" / "booths_invalid.csv"
    generator.write_upload(df, path)

    pipeline = ImportPipeline(ImportKind.BOOTHS, DryRunWriter(), on_alert=lambda m: None, reset_delay=0)
    pipeline.select_file(path)
    errors = pipeline.validate()
    broken_rows = {e.row for e in errors}
    assert len(broken_rows) > 0
    assert {e.message for e in errors} <= {"Booth Name is required", "Latitude must be between -90 and 90"}
