#!/usr/bin/env python3
"""Sample upload generator for manual and performance testing.

Generates synthetic ward / polling booth / constituency files in the layout
the import CLI expects:
- Row 1: Header row (target field keys)
- Row 2+: Data rows

`--invalid-rate` blanks required cells and pushes coordinates / counts out of
range in a fraction of the rows, so validation reporting can be exercised too.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

import numpy as np
import pandas as pd

DISTRICTS = ["Chennai", "Coimbatore", "Madurai", "Salem", "Tiruchirappalli", "Vellore"]


def _codes(prefix: str, n: int) -> list[str]:
    return [f"{prefix}{i:05d}" for i in range(1, n + 1)]


def generate_wards(rows: int, rng: np.random.Generator) -> pd.DataFrame:
    constituencies = rng.integers(1, 60, rows)
    return pd.DataFrame({
        "ward_code": _codes("W", rows),
        "ward_name": [f"Ward {i}" for i in range(1, rows + 1)],
        "constituency_code": [f"TN-AC-{c:03d}" for c in constituencies],
        "constituency_name": [f"Constituency {c}" for c in constituencies],
        "district": rng.choice(DISTRICTS, rows).tolist(),
        "population": rng.integers(5_000, 80_000, rows).tolist(),
        "area_sqkm": np.round(rng.uniform(0.5, 25.0, rows), 2).tolist(),
    })


def generate_booths(rows: int, rng: np.random.Generator) -> pd.DataFrame:
    male = rng.integers(200, 900, rows)
    female = rng.integers(200, 900, rows)
    transgender = rng.integers(0, 10, rows)
    return pd.DataFrame({
        "booth_code": _codes("B", rows),
        "booth_name": [f"Polling Station {i}" for i in range(1, rows + 1)],
        "ward_code": [f"W{w:05d}" for w in rng.integers(1, 200, rows)],
        "constituency_code": [f"TN-AC-{c:03d}" for c in rng.integers(1, 60, rows)],
        "address": [f"{n} Main Road" for n in rng.integers(1, 999, rows)],
        "latitude": np.round(rng.uniform(8.0, 13.5, rows), 6).tolist(),
        "longitude": np.round(rng.uniform(76.2, 80.3, rows), 6).tolist(),
        "total_voters": (male + female + transgender).tolist(),
        "male_voters": male.tolist(),
        "female_voters": female.tolist(),
        "transgender_voters": transgender.tolist(),
        "accessibility": rng.choice(["ramp", "ground floor", ""], rows).tolist(),
    })


def generate_constituencies(rows: int, rng: np.random.Generator) -> pd.DataFrame:
    return pd.DataFrame({
        "code": [f"TN-AC-{i:03d}" for i in range(1, rows + 1)],
        "name": [f"Constituency {i}" for i in range(1, rows + 1)],
        "number": list(range(1, rows + 1)),
        "district": rng.choice(DISTRICTS, rows).tolist(),
        "constituency_type": rng.choice(["assembly", "parliamentary"], rows, p=[0.85, 0.15]).tolist(),
        "reserved_for": rng.choice(["general", "sc", "st"], rows, p=[0.8, 0.15, 0.05]).tolist(),
        "total_voters": rng.integers(150_000, 350_000, rows).tolist(),
        "center_lat": np.round(rng.uniform(8.0, 13.5, rows), 6).tolist(),
        "center_lng": np.round(rng.uniform(76.2, 80.3, rows), 6).tolist(),
    })


GENERATORS = {
    "wards": generate_wards,
    "booths": generate_booths,
    "constituencies": generate_constituencies,
}

# 不正値の注入先 (先頭の必須列は空にする)
_BREAKERS = {
    "latitude": 95.0,
    "center_lat": -91.0,
    "population": -5,
    "total_voters": "many",
    "reserved_for": "obc",
}


def inject_invalid(df: pd.DataFrame, rate: float, rng: np.random.Generator) -> pd.DataFrame:
    """Break roughly `rate` of the rows; returns a copy."""
    if rate <= 0:
        return df
    out = df.astype(object).copy()
    picks = np.flatnonzero(rng.random(len(out)) < rate)
    for n, idx in enumerate(picks):
        if n % 2 == 0:
            out.iat[idx, 1] = ""
            continue
        for col, bad in _BREAKERS.items():
            if col in out.columns:
                out.at[out.index[idx], col] = bad
                break
    return out


def write_upload(df: pd.DataFrame, output: Path) -> None:
    output.parent.mkdir(parents=True, exist_ok=True)
    suffix = output.suffix.lower()
    if suffix == ".xlsx":
        df.to_excel(output, index=False, engine="openpyxl")
    elif suffix in (".csv", ".tsv"):
        df.to_csv(output, index=False, sep="\t" if suffix == ".tsv" else ",")
    else:
        raise ValueError(f"unsupported output format: {output.suffix}")


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Generate synthetic upload files for the import CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s booths data/booths.xlsx --rows 20000
  %(prog)s wards data/wards.csv --rows 500 --invalid-rate 0.02
        """,
    )
    parser.add_argument("kind", choices=sorted(GENERATORS), help="Entity type to generate")
    parser.add_argument("output", type=Path, help="Output file (.csv / .tsv / .xlsx)")
    parser.add_argument("--rows", type=int, default=1_000, help="Number of data rows (default: 1,000)")
    parser.add_argument("--invalid-rate", type=float, default=0.0, help="Fraction of rows to break (default: 0)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    args = parser.parse_args()

    if args.rows <= 0:
        print("Error: --rows must be positive", file=sys.stderr)
        return 1
    if not 0.0 <= args.invalid_rate <= 1.0:
        print("Error: --invalid-rate must be between 0 and 1", file=sys.stderr)
        return 1

    rng = np.random.default_rng(args.seed)
    df = inject_invalid(GENERATORS[args.kind](args.rows, rng), args.invalid_rate, rng)
    try:
        write_upload(df, args.output)
    except (OSError, ValueError) as e:
        print(f"Error generating file: {e}", file=sys.stderr)
        return 1

    size_mb = args.output.stat().st_size / (1024 * 1024)
    print(f"Created {args.kind} file: {args.output}")
    print(f"  Rows: {args.rows:,}")
    print(f"  Size: {size_mb:.2f} MB")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
