from __future__ import annotations

import io
import logging
import random

import pytest

from registry_bench.services.bulk_loader import fill_postgres, fill_trino


def _capture_logger(name: str):
    stream = io.StringIO()
    logger = logging.getLogger(name)
    logger.handlers = []
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    return logger, stream


class _FakeConnection:
    def __init__(self, fail_on_call: int | None = None):
        self.calls: list[dict] = []
        self.commits = 0
        self.fail_on_call = fail_on_call

    def execute(self, stmt, params):
        self.calls.append(dict(params))
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            raise RuntimeError("insert failed")

    def commit(self):
        self.commits += 1


class _FakeExecutor:
    table_ref = '"postgres"."bench"."bonus_registry_plain"'

    def __init__(self):
        self.statements: list[str] = []

    def execute(self, sql, params=None):
        self.statements.append(sql)
        return 0


def test_fill_postgres_chunks_without_overshoot():
    log, stream = _capture_logger("test.fill.pg")
    conn = _FakeConnection()
    result = fill_postgres(conn, "t", "bonus_registry_plain", 2500, 1000, log)

    assert [c["n"] for c in conn.calls] == [1000, 1000, 500]
    assert conn.commits == 3
    assert result.rows_inserted == 2500

    lines = stream.getvalue().strip().splitlines()
    assert len(lines) == 4
    assert lines[0].startswith("variant=bonus_registry_plain batchSize=1000 batchMs=")
    assert lines[2].endswith("cumulativeRows=2500")
    assert lines[3].startswith("totalRows=2500 totalMs=")
    assert "rowsPerSec=" in lines[3]


def test_fill_postgres_propagates_insert_errors():
    log, _ = _capture_logger("test.fill.pg.err")
    conn = _FakeConnection(fail_on_call=2)
    with pytest.raises(RuntimeError):
        fill_postgres(conn, "t", "bonus_registry_plain", 3000, 1000, log)
    assert conn.commits == 1


def test_fill_postgres_rejects_non_positive_batch():
    log, _ = _capture_logger("test.fill.pg.batch")
    with pytest.raises(ValueError):
        fill_postgres(_FakeConnection(), "t", "bonus_registry_plain", 10, 0, log)


def test_fill_trino_caps_chunk_size():
    log, _ = _capture_logger("test.fill.trino")
    executor = _FakeExecutor()
    result = fill_trino(
        executor, "bonus_registry_plain", 25, 5000, 10, log, rng=random.Random(1)
    )
    assert result.rows_inserted == 25
    assert len(executor.statements) == 3
    assert executor.statements[0].startswith(
        'INSERT INTO "postgres"."bench"."bonus_registry_plain" ("id", '
    )
    assert executor.statements[2].count("), (") == 4
