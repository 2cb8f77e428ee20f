from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

"""RawRow model for the spreadsheet import pipeline.

RawRow represents one parsed, unvalidated data row of the uploaded file.
The line_number refers to the spreadsheet line the user sees
(line 1 = header row, line 2 = first data row).
"""

__all__ = [
    "RawRow",
    "is_empty",
]


def is_empty(value: Any) -> bool:
    """Return True for cells treated as empty (None, NaN, blank string)."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and value.strip() == "":
        return True
    return False


@dataclass(frozen=True)
class RawRow:
    """Logical representation of a single data row after parsing."""
    line_number: int  # Spreadsheet line number (header = 1)
    values: dict[str, Any] = field(default_factory=dict)  # Header -> raw cell value

    def get(self, header: str | None) -> Any:
        """Resolve a cell by header; unmapped (None) or missing headers yield None."""
        if header is None:
            return None
        return self.values.get(header)
