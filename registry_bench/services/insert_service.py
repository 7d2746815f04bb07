"""Single-row insertion used by the HTTP endpoint."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import text

from config import AppConfig
from registry_bench.services.columns import COLUMN_NAMES, column_list_sql
from registry_bench.services.executors import TrinoExecutor
from registry_bench.services.row_generator import (
    BonusRow,
    generate_row,
    missing_required,
    overlay_row,
)
from registry_bench.services.sql_literals import insert_values_sql
from registry_bench.services.transaction import transaction
from registry_bench.services.trino_engine import TrinoEngine
from registry_bench.services.variants import TableVariant, qualified_name

logger = logging.getLogger(__name__)


def insert_one_sql(table_ref: str) -> str:
    placeholders = ", ".join(f":{name}" for name in COLUMN_NAMES)
    return f"INSERT INTO {table_ref} ({column_list_sql()}) VALUES ({placeholders})"


def build_row(partial: Mapping[str, Any] | None = None) -> BonusRow:
    """Generated row with ``partial`` overlaid; raises ValueError on bad input."""
    row, ignored = overlay_row(generate_row(), partial or {})
    if ignored:
        logger.debug("Ignoring unknown fields: %s", ", ".join(ignored))
    missing = missing_required(row)
    if missing:
        raise ValueError("required fields cannot be null: " + ", ".join(missing))
    return row


def insert_row(cfg: AppConfig, variant: TableVariant, row: BonusRow) -> None:
    if cfg.bench.mode == "trino":
        trino = TrinoEngine(cfg.trino, cfg.postgres.schema)
        with trino.cursor() as cursor:
            executor = TrinoExecutor(cursor, trino.table_ref(variant))
            executor.execute(
                insert_values_sql(executor.table_ref, column_list_sql(), [row.values()])
            )
        return

    stmt = text(insert_one_sql(qualified_name(cfg.postgres.schema, variant)))
    with transaction() as session:
        session.execute(stmt, row.to_params())


__all__ = ["build_row", "insert_one_sql", "insert_row"]
