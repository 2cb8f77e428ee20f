from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from ..models.validation_error import ValidationError

"""Validation report buffering (JSON Lines).

Written only when the user asks for a report (`--error-report`):
- one ValidationError per line, fixed key set
- file `logs/validation-YYYYMMDD-HHMMSS.log` (UTC), created on first flush
"""

__all__ = [
    "ErrorReportBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorReportBuffer:
    """In-memory buffer of ValidationErrors; flush() appends them as JSON Lines."""

    def __init__(self, logs_dir: Path = LOGS_DIR) -> None:
        self._records: list[ValidationError] = []
        self._logs_dir = logs_dir
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"validation-{stamp}.log"
        return self._file_path

    def append(self, record: ValidationError) -> None:
        self._records.append(record)

    def extend(self, records: Iterable[ValidationError]) -> None:
        self._records.extend(records)

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path:
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
