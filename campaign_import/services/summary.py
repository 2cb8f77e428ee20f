from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from ..models.column_mapping import ColumnMapping
from ..models.raw_row import RawRow, is_empty
from ..models.submit_outcome import SubmitOutcome
from ..models.target_field import ImportKind, TargetField
from ..models.validation_error import ValidationError

"""Text rendering for the CLI adapter.

- render_preview: first rows of the parsed file
- render_mapping: one line per target field
- render_errors: capped error list with a "+N more" line
- render_summary_line: SUMMARY line

SUMMARY format:
    SUMMARY kind={kind} file={name} rows={rows} errors={errors} inserted={inserted}
    status={success|failed|invalid} elapsed_sec={elapsed}
"""

_MAX_CELL_WIDTH = 24


def _cell_text(value: Any) -> str:
    if is_empty(value):
        return ""
    text = str(value)
    if len(text) > _MAX_CELL_WIDTH:
        return text[: _MAX_CELL_WIDTH - 3] + "..."
    return text


def render_preview(headers: Sequence[str], rows: Sequence[RawRow], limit: int = 10) -> str:
    """Render the first `limit` rows as a plain text table."""
    shown = list(rows[:limit])
    table = [["Row", *headers]]
    for row in shown:
        table.append([str(row.line_number), *(_cell_text(row.values.get(h)) for h in headers)])
    widths = [max(len(r[i]) for r in table) for i in range(len(table[0]))]
    lines = ["  ".join(c.ljust(w) for c, w in zip(r, widths, strict=True)).rstrip() for r in table]
    lines.insert(1, "  ".join("-" * w for w in widths))
    if len(rows) > limit:
        lines.append(f"Showing first {limit} of {len(rows)} rows")
    return "\n".join(lines)


def render_mapping(mapping: ColumnMapping, fields: Sequence[TargetField]) -> str:
    lines = []
    for f in fields:
        marker = "*" if f.required else " "
        source = mapping.source_for(f.key)
        lines.append(f"{marker} {f.label} ({f.key}) <- {source if source is not None else '(not mapped)'}")
    return "\n".join(lines)


def render_errors(errors: Sequence[ValidationError], limit: int = 50) -> str:
    """Render at most `limit` errors followed by a "+N more" summary."""
    lines = [f"Row {e.row}: {e.column} - {e.message} (value: {e.value})" for e in errors[:limit]]
    if len(errors) > limit:
        lines.append(f"... +{len(errors) - limit} more errors")
    return "\n".join(lines)


def _format_seconds(seconds: float) -> str:
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        # 指数表記を避ける
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return f"{seconds:.3f}".rstrip("0").rstrip(".")


def render_summary_line(
    kind: ImportKind,
    file_name: str,
    rows: int,
    errors: int,
    outcome: SubmitOutcome | None,
) -> str:
    """Render the SUMMARY line for one upload session.

    status is `invalid` when validation blocked the submit (no outcome).

    Examples:
        >>> render_summary_line(ImportKind.WARDS, "w.csv", 3, 1, None)
        'SUMMARY kind=wards file=w.csv rows=3 errors=1 inserted=0 status=invalid elapsed_sec=0'
    """
    if outcome is None:
        status, inserted, elapsed = "invalid", 0, 0.0
    else:
        status = "success" if outcome.success else "failed"
        inserted, elapsed = outcome.inserted_rows, outcome.elapsed_seconds
    return (
        f"SUMMARY kind={kind.value} "
        f"file={file_name} "
        f"rows={rows} "
        f"errors={errors} "
        f"inserted={inserted} "
        f"status={status} "
        f"elapsed_sec={_format_seconds(elapsed)}"
    )
