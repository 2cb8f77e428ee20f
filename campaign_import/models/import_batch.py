from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .target_field import ImportKind

"""ImportRecord / ImportBatch models.

ImportRecord is the target-shaped record derived from one RawRow via the
ColumnMapping. It is tagged with its ImportKind and keeps source columns that
are not mapped to any target field in an explicit `extras` bucket; extras are
never submitted.

ImportBatch is the full set of records submitted as one request.
"""

__all__ = [
    "ImportRecord",
    "ImportBatch",
]


@dataclass(frozen=True)
class ImportRecord:
    kind: ImportKind
    line_number: int  # Spreadsheet line the record was built from
    values: dict[str, Any]  # Mapped target key -> raw value (unmapped keys absent)
    extras: dict[str, Any] = field(default_factory=dict)  # Unmapped source columns


@dataclass(frozen=True)
class ImportBatch:
    """Processing unit for one submit call."""
    kind: ImportKind
    table: str  # Destination table name
    records: list[ImportRecord]

    def __len__(self) -> int:
        return len(self.records)

    @property
    def columns(self) -> list[str]:
        """Insert columns in target field declaration order (same for every record)."""
        if not self.records:
            return []
        return list(self.records[0].values.keys())

    def to_rows(self) -> list[dict[str, Any]]:
        """Plain dict payload handed to the persistence collaborator."""
        return [dict(r.values) for r in self.records]
