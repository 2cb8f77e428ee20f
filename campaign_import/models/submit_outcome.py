from __future__ import annotations

import statistics
from dataclasses import dataclass

"""Submit outcome models for the import pipeline.

A submit is one batch / one outcome: either every record was written or none
was. SubmitOutcome carries the counts and timing the CLI prints in its
SUMMARY line; BatchStatsAccumulator collects per-page timings reported by the
PostgreSQL writer.
"""


@dataclass(frozen=True)
class SubmitOutcome:
    """Result of a single Import Submitter call."""
    success: bool
    attempted_rows: int  # Records in the batch
    inserted_rows: int  # Committed rows (0 on failure)
    message: str  # Confirmation or failure reason
    elapsed_seconds: float = 0.0
    total_batches: int = 0  # 書き込みページ数
    avg_batch_seconds: float = 0.0


class BatchStatsAccumulator:
    """Collects page timing measurements for a submit."""

    def __init__(self) -> None:
        self.batch_times: list[float] = []

    def add_batch_time(self, elapsed_seconds: float) -> None:
        self.batch_times.append(elapsed_seconds)

    def get_stats(self) -> tuple[int, float]:
        """Return (total_batches, avg_batch_seconds)."""
        if not self.batch_times:
            return (0, 0.0)
        return (len(self.batch_times), statistics.mean(self.batch_times))
