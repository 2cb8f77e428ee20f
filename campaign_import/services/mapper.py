from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from ..models.column_mapping import ColumnMapping
from ..models.target_field import TargetField

"""Column auto-mapping service.

For each TargetField the first header whose normalized form equals the
normalized field key is selected. Exact match only (no fuzzy matching).
"""

__all__ = [
    "normalize_header",
    "auto_map",
]

_STRIP_RE = re.compile(r"[_\s]")


def normalize_header(text: str) -> str:
    """Lowercase and remove underscores / whitespace ("Ward Code" -> "wardcode")."""
    return _STRIP_RE.sub("", str(text).lower())


def auto_map(headers: Sequence[str], fields: Iterable[TargetField]) -> ColumnMapping:
    """Build the initial ColumnMapping for a parsed header row."""
    normalized = [(normalize_header(h), h) for h in headers]
    entries: dict[str, str | None] = {}
    for f in fields:
        target = normalize_header(f.key)
        entries[f.key] = next((h for norm, h in normalized if norm == target), None)
    return ColumnMapping(headers, entries)
