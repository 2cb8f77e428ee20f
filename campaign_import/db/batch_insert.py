from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

"""Paged INSERT through psycopg2.extras.execute_values.

Transaction boundaries belong to the caller (PostgresBulkWriter); one call here
issues the INSERT for a single page and reports how long it took.
"""

try:  # pragma: no cover - psycopg2 is only needed for the postgres backend
    from psycopg2.extras import execute_values
except ImportError:  # pragma: no cover
    execute_values = None  # type: ignore


class BatchInsertError(Exception):
    """Raised when the driver rejects a page (constraint, type, connection)."""


@dataclass(frozen=True)
class BatchMetrics:
    """Timing of one page write."""
    batch_size: int  # rows in the page
    elapsed_seconds: float
    start_time: float  # time.time()
    end_time: float


@dataclass(frozen=True)
class InsertResult:
    inserted_rows: int


MetricsCallback = Callable[[BatchMetrics], None]


@contextmanager
def timed_page(size: int, callback: MetricsCallback | None) -> Iterator[None]:
    """Report BatchMetrics for the wrapped write, whether it succeeds or not."""
    start = time.time()
    try:
        yield
    finally:
        end = time.time()
        if callback is not None:
            callback(BatchMetrics(batch_size=size, elapsed_seconds=end - start, start_time=start, end_time=end))


def quote_ident(name: str) -> str:
    """Double-quote an identifier; table names may be schema qualified (public.wards)."""
    return ".".join('"' + part.replace('"', '""') + '"' for part in name.split("."))


def insert_sql(table: str, columns: Sequence[str]) -> str:
    cols = ",".join(quote_ident(c) for c in columns)
    return f"INSERT INTO {quote_ident(table)} ({cols}) VALUES %s"


def batch_insert(
    cursor: Any,
    table: str,
    columns: Sequence[str],
    rows: Iterable[Sequence[Any]],
    page_size: int = 1000,
    metrics_callback: MetricsCallback | None = None,
) -> InsertResult:
    """INSERT `rows` (values in `columns` order) into `table`.

    metrics_callback receives one BatchMetrics per call, also when the driver
    fails; it is not called for an empty `rows`.
    """
    if execute_values is None:
        raise BatchInsertError("psycopg2 not available")

    page = list(rows)
    if not page:
        return InsertResult(inserted_rows=0)

    with timed_page(len(page), metrics_callback):
        try:
            execute_values(cursor, insert_sql(table, columns), page, page_size=page_size)
        except Exception as e:
            raise BatchInsertError(str(e)) from e
    return InsertResult(inserted_rows=len(page))
