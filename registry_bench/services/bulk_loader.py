"""Chunked fill. PostgreSQL generates rows server-side; Trino gets literal
VALUES chunks capped at TRINO_CHUNK_MAX."""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection

from registry_bench.services.columns import column_list_sql
from registry_bench.services.pg_expressions import insert_select_sql
from registry_bench.services.row_generator import generate_row
from registry_bench.services.sql_literals import insert_values_sql

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FillResult:
    rows_inserted: int
    elapsed_ms: float

    @property
    def rows_per_sec(self) -> float:
        if self.elapsed_ms <= 0:
            return 0.0
        return self.rows_inserted / (self.elapsed_ms / 1000.0)


def _run_chunks(
    table_name: str,
    count: int,
    batch_size: int,
    insert_chunk: Callable[[int], None],
    log: logging.Logger,
) -> FillResult:
    if batch_size <= 0:
        raise ValueError("batch_size must be > 0")
    inserted = 0
    started = time.perf_counter()
    while inserted < count:
        chunk = min(batch_size, count - inserted)
        batch_started = time.perf_counter()
        insert_chunk(chunk)
        now = time.perf_counter()
        inserted += chunk
        log.info(
            "variant=%s batchSize=%d batchMs=%d cumulativeMs=%d cumulativeRows=%d",
            table_name,
            chunk,
            round((now - batch_started) * 1000),
            round((now - started) * 1000),
            inserted,
        )
    result = FillResult(inserted, (time.perf_counter() - started) * 1000.0)
    log.info(
        "totalRows=%d totalMs=%d rowsPerSec=%.0f",
        result.rows_inserted,
        round(result.elapsed_ms),
        result.rows_per_sec,
    )
    return result


def fill_postgres(
    conn: Connection,
    table_ref: str,
    table_name: str,
    count: int,
    batch_size: int,
    log: logging.Logger,
) -> FillResult:
    """Insert ``count`` rows in chunks of at most ``batch_size``.

    Each chunk is one INSERT ... SELECT committed on its own; an error aborts
    the fill and propagates (earlier chunks stay committed).
    """
    stmt = text(insert_select_sql(table_ref))

    def _insert(n: int) -> None:
        conn.execute(stmt, {"n": n})
        conn.commit()

    return _run_chunks(table_name, count, batch_size, _insert, log)


def fill_trino(
    executor,
    table_name: str,
    count: int,
    batch_size: int,
    chunk_max: int,
    log: logging.Logger,
    rng: Optional[random.Random] = None,
) -> FillResult:
    """Insert via literal VALUES batches of at most ``min(batch_size, chunk_max)``."""
    rng = rng or random.Random()
    columns = column_list_sql()

    def _insert(n: int) -> None:
        rows = [generate_row(rng).values() for _ in range(n)]
        executor.execute(insert_values_sql(executor.table_ref, columns, rows))

    return _run_chunks(table_name, count, min(batch_size, chunk_max), _insert, log)
