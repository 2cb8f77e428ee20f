from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.raw_row import RawRow, is_empty
from ..models.uploaded_file import FileFormat, UploadedFile

"""Spreadsheet reader for uploaded files.

Decoding rule: first sheet only, header = row 1, values = rows 2..N.

- Delimited text (.csv / .tsv / .txt) is read with every cell as text.
- Workbooks (.xlsx / .xls) keep the cell types pandas reports (str, int, float, ...).
- Missing trailing cells become None (sparse rows are allowed).
- Fully blank lines are skipped without shifting the line numbers of later rows.
"""

logger = logging.getLogger(__name__)

# extension -> separator (None = sniff with the python engine)
DELIMITED_EXTENSIONS: dict[str, str | None] = {"csv": ",", "tsv": "\t", "txt": None}
WORKBOOK_EXTENSIONS = frozenset({"xlsx", "xls"})


class FileFormatError(Exception):
    """Base class for input format errors (the pipeline does not advance)."""

class UnsupportedFileError(FileFormatError):
    """Raised when the file extension is not a supported spreadsheet format."""

class FileTooLargeError(FileFormatError):
    """Raised when the file exceeds the configured size limit."""

class EmptyFileError(FileFormatError):
    """Raised when the file has no rows at all."""

class MalformedFileError(FileFormatError):
    """Raised when the content cannot be decoded."""


@dataclass
class ParsedSheet:
    headers: list[str]
    rows: list[RawRow]


def detect_format(path: Path) -> FileFormat:
    ext = path.suffix.lower().lstrip(".")
    if ext in DELIMITED_EXTENSIONS:
        return FileFormat.DELIMITED
    if ext in WORKBOOK_EXTENSIONS:
        return FileFormat.WORKBOOK
    raise UnsupportedFileError("Please upload a CSV or Excel file")


def open_upload(path: Path, max_bytes: int | None = None) -> UploadedFile:
    """Create the UploadedFile handle for a user-selected path."""
    fmt = detect_format(path)
    if not path.is_file():
        raise MalformedFileError(f"file not found: {path}")
    size = path.stat().st_size
    if max_bytes is not None and size > max_bytes:
        limit_mb = max_bytes / (1024 * 1024)
        raise FileTooLargeError(f"File size must be less than {limit_mb:.0f}MB")
    return UploadedFile(path=path, name=path.name, format=fmt, size_bytes=size)


def _na_options(keep_na_strings: list[str] | None) -> dict[str, Any]:
    """pandas NA handling: drop keep_na_strings from the default NA string set."""
    if not keep_na_strings:
        return {"keep_default_na": True, "na_values": None}
    import pandas._libs.parsers as parsers

    custom_na = parsers.STR_NA_VALUES.copy() - set(keep_na_strings)
    return {"keep_default_na": False, "na_values": list(custom_na)}


def read_grid(upload: UploadedFile, keep_na_strings: list[str] | None = None) -> pd.DataFrame:
    """Read the raw cell grid (no header applied) of the first sheet."""
    na_opts = _na_options(keep_na_strings)
    try:
        if upload.format is FileFormat.DELIMITED:
            sep = DELIMITED_EXTENSIONS[upload.extension]
            return pd.read_csv(
                upload.path,
                header=None,
                sep=sep,
                dtype=str,
                skip_blank_lines=False,
                encoding="utf-8-sig",
                engine="c" if sep is not None else "python",
                **na_opts,
            )
        with pd.ExcelFile(upload.path) as xls:
            if not xls.sheet_names:
                raise EmptyFileError("File is empty")
            # 先頭シートのみ
            return xls.parse(xls.sheet_names[0], header=None, **na_opts)
    except FileFormatError:
        raise
    except pd.errors.EmptyDataError as e:
        raise EmptyFileError("File is empty") from e
    except Exception as e:
        raise MalformedFileError(f"Error reading file. Please check the file format. ({e})") from e


def _header_text(value: Any, column_label: Any) -> str:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return f"Column {int(column_label) + 1}"
    text = str(value).strip()
    return text if text else f"Column {int(column_label) + 1}"


def _cell(value: Any) -> Any:
    if value is None:
        return None
    if not isinstance(value, str) and pd.isna(value):
        return None
    return value


def normalize_grid(df: pd.DataFrame) -> ParsedSheet:
    """Split a raw grid into HeaderRow and RawRows.

    Steps:
    1. Drop columns that are entirely empty (header included)
    2. Row 1 becomes the header (cells coerced to str, blank -> "Column <n>")
    3. Remaining non-blank rows become RawRows with their spreadsheet line number
    """
    df = df.dropna(axis=1, how="all")
    if df.shape[0] == 0 or df.shape[1] == 0:
        raise EmptyFileError("File is empty")

    header_cells = df.iloc[0].tolist()
    headers = [_header_text(v, label) for v, label in zip(header_cells, df.columns, strict=True)]

    seen: set[str] = set()
    for h in headers:
        if h in seen:
            logger.warning(f"duplicate header {h!r}: the right-most column is used")
        seen.add(h)

    rows: list[RawRow] = []
    # header=None なので index は 0 始まりの物理行位置 (line_number = index + 1)
    for position, raw in df.iloc[1:].iterrows():
        cells = [_cell(v) for v in raw.tolist()]
        if all(is_empty(v) for v in cells):
            continue
        values: dict[str, Any] = {}
        for header, value in zip(headers, cells, strict=True):
            values[header] = value
        rows.append(RawRow(line_number=int(position) + 1, values=values))

    return ParsedSheet(headers=headers, rows=rows)


def parse_upload(upload: UploadedFile, keep_na_strings: list[str] | None = None) -> ParsedSheet:
    """Decode an UploadedFile into (HeaderRow, RawRow[])."""
    df = read_grid(upload, keep_na_strings=keep_na_strings)
    sheet = normalize_grid(df)
    logger.debug(f"parsed {upload.name}: columns={len(sheet.headers)} rows={len(sheet.rows)}")
    return sheet
