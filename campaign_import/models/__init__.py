"""Domain models for the spreadsheet import pipeline.

This package contains the value objects passed between the parser, mapper,
validator and submitter.
"""

from .column_mapping import ColumnMapping, MappingError
from .import_batch import ImportBatch, ImportRecord
from .raw_row import RawRow, is_empty
from .submit_outcome import BatchStatsAccumulator, SubmitOutcome
from .target_field import (
    BOOTH_FIELDS,
    CONSTITUENCY_FIELDS,
    WARD_FIELDS,
    FieldRule,
    ImportKind,
    TargetField,
    default_table_for,
    fields_for,
)
from .uploaded_file import FileFormat, UploadedFile
from .validation_error import ValidationError

__all__ = [
    # Field catalogue
    "FieldRule",
    "ImportKind",
    "TargetField",
    "WARD_FIELDS",
    "BOOTH_FIELDS",
    "CONSTITUENCY_FIELDS",
    "fields_for",
    "default_table_for",
    # Parsing / mapping
    "FileFormat",
    "UploadedFile",
    "RawRow",
    "is_empty",
    "ColumnMapping",
    "MappingError",
    # Validation / submission
    "ValidationError",
    "ImportRecord",
    "ImportBatch",
    "SubmitOutcome",
    "BatchStatsAccumulator",
]
