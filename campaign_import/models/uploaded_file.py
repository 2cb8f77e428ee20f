from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

"""UploadedFile domain model and FileFormat enum.

The UploadedFile is the immutable handle on a user-selected file. It is created
on file selection and discarded once the file has been parsed.
"""


class FileFormat(Enum):
    """Detected container format of an uploaded file.

    - DELIMITED: comma / tab separated text (.csv, .tsv, .txt)
    - WORKBOOK: spreadsheet workbook (.xlsx, .xls)
    """
    DELIMITED = "delimited"
    WORKBOOK = "workbook"


@dataclass(frozen=True)
class UploadedFile:
    """User-selected file awaiting parse."""
    path: Path  # Full path to the file
    name: str  # File name shown to the user
    format: FileFormat
    size_bytes: int = 0

    @property
    def extension(self) -> str:
        return self.path.suffix.lower().lstrip(".")
