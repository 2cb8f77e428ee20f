from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from typing import Any

from ..models.column_mapping import ColumnMapping
from ..models.raw_row import RawRow, is_empty
from ..models.target_field import FieldRule, TargetField
from ..models.validation_error import ValidationError

"""Row validation service.

validate_rows() is a pure function of (rows, mapping, fields):
- every row and every field is checked (no short-circuit per row)
- errors come out row-major, then in field declaration order
- the inputs are never mutated, so repeated runs return equal lists

Per-field rules only run on present values; an empty required value yields
exactly one "<label> is required" error and nothing else for that cell.
"""

__all__ = [
    "validate_rows",
    "check_value",
]

_COORD_BOUNDS: dict[FieldRule, tuple[float, float]] = {
    FieldRule.LATITUDE: (-90.0, 90.0),
    FieldRule.LONGITUDE: (-180.0, 180.0),
}


def _to_float(value: Any) -> float | None:
    """Parse a finite float; None when not numeric (bool is never numeric)."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value).strip())
        except ValueError:
            return None
    if not math.isfinite(number):
        return None
    return number


def _check_coordinate(field: TargetField, value: Any) -> str | None:
    number = _to_float(value)
    if number is None:
        return f"{field.label} must be a valid number"
    low, high = _COORD_BOUNDS[field.rule]
    if number < low or number > high:
        return f"{field.label} must be between {low:g} and {high:g}"
    return None


def _check_count(field: TargetField, value: Any) -> str | None:
    number = _to_float(value)
    if number is None or number < 0 or not number.is_integer():
        return f"{field.label} must be a non-negative whole number"
    return None


def _check_measure(field: TargetField, value: Any) -> str | None:
    number = _to_float(value)
    if number is None or number < 0:
        return f"{field.label} must be a non-negative number"
    return None


def _check_choice(field: TargetField, value: Any) -> str | None:
    choices = field.choices or ()
    if str(value).strip().lower() not in {c.lower() for c in choices}:
        return f"{field.label} must be one of: {', '.join(choices)}"
    return None


_RULE_CHECKS: dict[FieldRule, Callable[[TargetField, Any], str | None]] = {
    FieldRule.LATITUDE: _check_coordinate,
    FieldRule.LONGITUDE: _check_coordinate,
    FieldRule.COUNT: _check_count,
    FieldRule.MEASURE: _check_measure,
    FieldRule.CHOICE: _check_choice,
}


def check_value(field: TargetField, value: Any) -> str | None:
    """Return the error message for one resolved cell value, or None if valid."""
    if is_empty(value):
        return f"{field.label} is required" if field.required else None
    check = _RULE_CHECKS.get(field.rule)
    if check is None:
        return None
    return check(field, value)


def validate_rows(
    rows: Sequence[RawRow],
    mapping: ColumnMapping,
    fields: Sequence[TargetField],
) -> list[ValidationError]:
    """Validate every row against every target field using the current mapping."""
    # 行ループ毎の lookup を避けるため先に解決
    sources = [(f, mapping.source_for(f.key)) for f in fields]
    errors: list[ValidationError] = []
    for row in rows:
        for f, header in sources:
            value = row.get(header)
            message = check_value(f, value)
            if message is None:
                continue
            errors.append(
                ValidationError.create(
                    row=row.line_number,
                    column=f.label,
                    field_key=f.key,
                    value=None if is_empty(value) else value,
                    message=message,
                )
            )
    return errors
