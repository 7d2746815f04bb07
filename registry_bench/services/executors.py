"""fetch_all/execute/commit over PostgreSQL or Trino (``:name`` placeholders)."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection
from trino.exceptions import TrinoQueryError

from registry_bench.services.sql_literals import render_sql

logger = logging.getLogger(__name__)


class PostgresExecutor:
    engine_name = "postgres"
    supports_repair = True

    def __init__(self, conn: Connection, table_ref: str):
        self.conn = conn
        self.table_ref = table_ref

    def fetch_all(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> list[tuple]:
        result = self.conn.execute(text(sql), dict(params or {}))
        return [tuple(row) for row in result.fetchall()]

    def execute(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> int:
        result = self.conn.execute(text(sql), dict(params or {}))
        return int(result.rowcount or 0)

    def commit(self) -> None:
        self.conn.commit()


class TrinoExecutor:
    engine_name = "trino"
    supports_repair = False

    def __init__(self, cursor, table_ref: str):
        self.cursor = cursor
        self.table_ref = table_ref

    def _run(self, sql: str) -> list[tuple]:
        try:
            self.cursor.execute(sql)
            rows = self.cursor.fetchall()
        except TrinoQueryError as exc:
            raise RuntimeError(f"Trino: {exc.message}") from exc
        return [tuple(row) for row in rows or []]

    def fetch_all(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> list[tuple]:
        return self._run(render_sql(sql, params))

    def execute(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> int:
        rows = self._run(render_sql(sql, params))
        # Trino reports DML row counts as a single-row result.
        if rows and rows[0] and isinstance(rows[0][0], int):
            return rows[0][0]
        return 0

    def commit(self) -> None:
        return None
