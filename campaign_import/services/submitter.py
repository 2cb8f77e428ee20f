from __future__ import annotations

import logging
import time
from collections.abc import Sequence

from ..db.batch_insert import BatchMetrics
from ..db.writers import BulkWriter, PersistenceError
from ..models.column_mapping import ColumnMapping
from ..models.import_batch import ImportBatch, ImportRecord
from ..models.raw_row import RawRow
from ..models.submit_outcome import BatchStatsAccumulator, SubmitOutcome
from ..models.target_field import ImportKind, TargetField
from .progress import BATCH_BUILT_PERCENT, SubmitProgress

"""Import Submitter: RawRows + ColumnMapping -> ImportBatch -> one bulk insert.

Guarantees:
- exactly one persistence call per submit
- all-or-nothing: on failure the outcome reports zero inserted rows
- required target fields must be mapped before a batch is built
"""

logger = logging.getLogger(__name__)


class SubmissionError(Exception):
    """Base exception for submit preconditions."""

class MissingMappingError(SubmissionError):
    """Raised when a required target field is not mapped to any source column."""

class EmptyBatchError(SubmissionError):
    """Raised when there are no data rows to submit."""


def build_batch(
    rows: Sequence[RawRow],
    mapping: ColumnMapping,
    kind: ImportKind,
    table: str,
) -> ImportBatch:
    """Transform RawRows into target-shaped records.

    Mapped target keys receive the raw cell value; unmapped target keys are
    absent. Source columns no target field points at land in `extras`.
    """
    pairs = [(key, mapping.source_for(key)) for key in mapping.mapped_keys()]
    used = mapping.mapped_sources()
    records: list[ImportRecord] = []
    for row in rows:
        values = {key: row.get(header) for key, header in pairs}
        extras = {h: v for h, v in row.values.items() if h not in used}
        records.append(ImportRecord(kind=kind, line_number=row.line_number, values=values, extras=extras))
    return ImportBatch(kind=kind, table=table, records=records)


class ImportSubmitter:
    def __init__(
        self,
        writer: BulkWriter,
        kind: ImportKind,
        table: str,
        *,
        enforce_required_mapping: bool = True,
    ) -> None:
        self.writer = writer
        self.kind = kind
        self.table = table
        self.enforce_required_mapping = enforce_required_mapping

    def submit(
        self,
        rows: Sequence[RawRow],
        mapping: ColumnMapping,
        fields: Sequence[TargetField],
        progress: SubmitProgress | None = None,
    ) -> SubmitOutcome:
        """Build the batch and hand it to the writer in a single call.

        Raises:
            MissingMappingError: a required field has no source column
            EmptyBatchError: there are no rows to import

        Persistence failures are not raised; they are returned as an outcome
        with success=False so the caller can keep its preview for a retry.
        """
        if self.enforce_required_mapping:
            missing = mapping.unmapped_required(fields)
            if missing:
                labels = ", ".join(f.label for f in missing)
                raise MissingMappingError(f"required fields are not mapped: {labels}")
        if not rows:
            raise EmptyBatchError("No data rows to import")

        batch = build_batch(rows, mapping, self.kind, self.table)
        if progress is not None:
            progress.advance_to(BATCH_BUILT_PERCENT)

        stats = BatchStatsAccumulator()
        written = 0

        def on_batch(metrics: BatchMetrics) -> None:
            nonlocal written
            written += metrics.batch_size
            stats.add_batch_time(metrics.elapsed_seconds)
            if progress is not None:
                progress.advance_pages(written, len(batch))

        logger.info(f"submitting {len(batch)} {self.kind.value} rows to {self.table}")
        start = time.perf_counter()
        try:
            inserted = self.writer.insert_many(self.table, batch.to_rows(), on_batch=on_batch)
        except PersistenceError as e:
            elapsed = time.perf_counter() - start
            logger.error(f"submit failed: {e}")
            total_batches, avg = stats.get_stats()
            return SubmitOutcome(
                success=False,
                attempted_rows=len(batch),
                inserted_rows=0,
                message=str(e),
                elapsed_seconds=elapsed,
                total_batches=total_batches,
                avg_batch_seconds=avg,
            )
        elapsed = time.perf_counter() - start
        total_batches, avg = stats.get_stats()
        if progress is not None:
            progress.complete()
        return SubmitOutcome(
            success=True,
            attempted_rows=len(batch),
            inserted_rows=inserted,
            message=f"Successfully imported {inserted} {self.kind.value}",
            elapsed_seconds=elapsed,
            total_batches=total_batches,
            avg_batch_seconds=avg,
        )
