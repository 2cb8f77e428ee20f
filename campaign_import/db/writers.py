from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping, Sequence
from datetime import date, datetime
from typing import Any, Protocol

from .batch_insert import BatchInsertError, BatchMetrics, batch_insert, timed_page

"""Persistence collaborators for the Import Submitter.

Each writer performs one logical "bulk insert" of target-shaped records and
either writes every record or none of them:

- PostgresBulkWriter: one explicit transaction, rows paged through execute_values
- SupabaseBulkWriter: one PostgREST insert request through supabase-py
- DryRunWriter: mock mode, nothing is written

Row-level authorization is enforced server-side (RLS); writers pass the caller's
credentials through and do not re-check anything.
"""

logger = logging.getLogger(__name__)

BatchCallback = Callable[[BatchMetrics], None]


class PersistenceError(Exception):
    """Backend / network failure during a bulk insert. Nothing was committed."""


class BulkWriter(Protocol):
    def insert_many(
        self,
        table: str,
        records: Sequence[Mapping[str, Any]],
        on_batch: BatchCallback | None = None,
    ) -> int:
        ...


class PostgresBulkWriter:
    """Bulk insert over a psycopg2 cursor inside one transaction."""

    def __init__(self, cursor: Any, page_size: int = 1000) -> None:
        self.cursor = cursor
        self.page_size = page_size

    def insert_many(
        self,
        table: str,
        records: Sequence[Mapping[str, Any]],
        on_batch: BatchCallback | None = None,
    ) -> int:
        if not records:
            return 0
        columns = list(records[0].keys())
        rows = [[r.get(c) for c in columns] for r in records]

        try:
            self.cursor.execute("BEGIN")
        except Exception as e:
            raise PersistenceError(f"failed to begin transaction: {e}") from e

        inserted = 0
        try:
            for start in range(0, len(rows), self.page_size):
                page = rows[start:start + self.page_size]
                result = batch_insert(
                    self.cursor,
                    table,
                    columns,
                    page,
                    page_size=self.page_size,
                    metrics_callback=on_batch,
                )
                inserted += result.inserted_rows
            self.cursor.execute("COMMIT")
        except Exception as e:
            try:
                self.cursor.execute("ROLLBACK")
            except Exception as rb:  # pragma: no cover - connection already broken
                logger.debug(f"rollback failed: {rb}")
            if isinstance(e, BatchInsertError):
                raise PersistenceError(f"insert into {table} failed: {e}") from e
            raise PersistenceError(f"transaction on {table} failed: {e}") from e
        return inserted


def _jsonable(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


class SupabaseBulkWriter:
    """Bulk insert through a supabase-py client (one request per submit)."""

    def __init__(self, client: Any) -> None:
        self.client = client

    def insert_many(
        self,
        table: str,
        records: Sequence[Mapping[str, Any]],
        on_batch: BatchCallback | None = None,
    ) -> int:
        if not records:
            return 0
        payload = [{k: _jsonable(v) for k, v in r.items()} for r in records]

        try:
            with timed_page(len(payload), on_batch):
                response = self.client.table(table).insert(payload).execute()
        except Exception as e:
            raise PersistenceError(f"insert into {table} failed: {e}") from e

        data = getattr(response, "data", None)
        if isinstance(data, list) and data:
            return len(data)
        logger.debug(f"insert into {table} returned no representation; assuming {len(payload)} rows")
        return len(payload)


class DryRunWriter:
    """Mock mode writer: logs and counts, writes nothing."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, int]] = []

    def insert_many(
        self,
        table: str,
        records: Sequence[Mapping[str, Any]],
        on_batch: BatchCallback | None = None,
    ) -> int:
        self.calls.append((table, len(records)))
        logger.info(f"dry-run: would insert {len(records)} rows into {table}")
        if on_batch is not None and records:
            now = time.time()
            on_batch(BatchMetrics(batch_size=len(records), elapsed_seconds=0.0, start_time=now, end_time=now))
        return len(records)
