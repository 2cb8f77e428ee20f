from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import Any

"""ValidationError model for row-level validation results.

The ValidationError is a plain value object: two validation runs over identical
input produce equal lists, so no timestamps or counters are stored here.

The JSON Lines representation uses a fixed key set
(row, column, field_key, value, message) and is used by the optional
validation report written from the CLI.
"""

__all__ = [
    "ValidationError",
    "EMPTY_VALUE",
]

EMPTY_VALUE = "Empty"


@dataclass(frozen=True)
class ValidationError:
    """Structured validation error for one cell.

    Attributes:
        row: Spreadsheet line number (header = 1, first data row = 2)
        column: Label of the target field (e.g. "Ward Name")
        field_key: Key of the target field (e.g. "ward_name")
        value: Raw cell value as text, "Empty" when missing
        message: Human readable message
    """
    row: int
    column: str
    field_key: str
    value: str
    message: str

    @staticmethod
    def create(row: int, column: str, field_key: str, value: Any, message: str) -> ValidationError:
        """Create a ValidationError, rendering the raw value as text."""
        text = EMPTY_VALUE if value is None else str(value)
        if text.strip() == "":
            text = EMPTY_VALUE
        return ValidationError(row=row, column=column, field_key=field_key, value=text, message=message)

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
