"""Schema manager for the four bonus_registry table variants.

Every statement is idempotent (``IF NOT EXISTS`` / ``IF EXISTS``) so the
create and drop helpers can be called repeatedly. Failures propagate to
the caller.
"""

from __future__ import annotations

import logging
import time

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from registry_bench.services.columns import columns_ddl
from registry_bench.services.variants import (
    PARTITION_COLUMN,
    PARTITION_COUNT,
    TABLE_VARIANTS,
    TableVariant,
    qualified_name,
    quote_ident,
)

logger = logging.getLogger(__name__)

UNDEFINED_TABLE_SQLSTATE = "42P01"


class TableMissingError(RuntimeError):
    """The benchmark table does not exist (SQLSTATE 42P01)."""

    def __init__(self, variant: TableVariant, message: str = ""):
        self.variant = variant
        super().__init__(message or f"Table {variant.table_name} does not exist")


def is_undefined_table_error(exc: Exception) -> bool:
    orig = getattr(exc, "orig", None)
    for candidate in (exc, orig):
        if candidate is None:
            continue
        if getattr(candidate, "sqlstate", None) == UNDEFINED_TABLE_SQLSTATE:
            return True
        if getattr(candidate, "pgcode", None) == UNDEFINED_TABLE_SQLSTATE:
            return True
    msg = str(orig if orig is not None else exc).lower()
    return "does not exist" in msg and "relation" in msg


def _primary_key(variant: TableVariant) -> str:
    # A partitioned table's unique constraint must include the partition key.
    if variant.partitioned:
        return f"PRIMARY KEY (id, {PARTITION_COLUMN})"
    return "PRIMARY KEY (id)"


def create_table_sql(schema: str, variant: TableVariant) -> list[str]:
    """Return the DDL statements that create ``variant`` in ``schema``."""
    table = qualified_name(schema, variant)
    statements = [f"CREATE SCHEMA IF NOT EXISTS {quote_ident(schema)}"]
    create = (
        f"CREATE TABLE IF NOT EXISTS {table} (\n  {columns_ddl()},\n  "
        f"{_primary_key(variant)}\n)"
    )
    if variant.partitioned:
        create += f" PARTITION BY HASH ({PARTITION_COLUMN})"
    statements.append(create)
    if variant.partitioned:
        for remainder in range(PARTITION_COUNT):
            part = f"{quote_ident(schema)}.{quote_ident(variant.partition_name(remainder))}"
            statements.append(
                f"CREATE TABLE IF NOT EXISTS {part} PARTITION OF {table} "
                f"FOR VALUES WITH (MODULUS {PARTITION_COUNT}, REMAINDER {remainder})"
            )
    if variant.indexed:
        statements.append(create_index_sql(schema, variant))
    return statements


def create_index_sql(schema: str, variant: TableVariant) -> str:
    return (
        f"CREATE INDEX IF NOT EXISTS {quote_ident(variant.index_name)} "
        f"ON {qualified_name(schema, variant)} ({PARTITION_COLUMN})"
    )


def drop_index_sql(schema: str, variant: TableVariant) -> str:
    return f"DROP INDEX IF EXISTS {quote_ident(schema)}.{quote_ident(variant.index_name)}"


def create_variant(engine: Engine, schema: str, variant: TableVariant) -> None:
    with engine.begin() as conn:
        for stmt in create_table_sql(schema, variant):
            conn.execute(text(stmt))
    logger.info("Created table %s.%s", schema, variant.table_name)


def drop_variant(engine: Engine, schema: str, variant: TableVariant) -> None:
    """Drop the table; CASCADE removes its partitions and indexes."""
    with engine.begin() as conn:
        conn.execute(text(f"DROP TABLE IF EXISTS {qualified_name(schema, variant)} CASCADE"))
    logger.info("Dropped table %s.%s", schema, variant.table_name)


def create_all(engine: Engine, schema: str) -> None:
    for variant in TABLE_VARIANTS:
        create_variant(engine, schema, variant)


def drop_all(engine: Engine, schema: str) -> None:
    for variant in TABLE_VARIANTS:
        drop_variant(engine, schema, variant)


def drop_index(engine: Engine, schema: str, variant: TableVariant) -> None:
    if not variant.indexed:
        return
    with engine.begin() as conn:
        conn.execute(text(drop_index_sql(schema, variant)))


def rebuild_index(engine: Engine, schema: str, variant: TableVariant) -> float:
    """Create the secondary index if missing; returns elapsed milliseconds."""
    if not variant.indexed:
        return 0.0
    started = time.perf_counter()
    with engine.begin() as conn:
        conn.execute(text(create_index_sql(schema, variant)))
    return (time.perf_counter() - started) * 1000.0


def set_logged(engine: Engine, schema: str, variant: TableVariant, logged: bool) -> bool:
    """Toggle WAL logging. Partitioned tables are left untouched; returns
    whether a statement was issued."""
    if variant.partitioned:
        return False
    mode = "LOGGED" if logged else "UNLOGGED"
    with engine.begin() as conn:
        conn.execute(text(f"ALTER TABLE {qualified_name(schema, variant)} SET {mode}"))
    return True


def analyze(engine: Engine, schema: str, variant: TableVariant) -> None:
    with engine.begin() as conn:
        conn.execute(text(f"ANALYZE {qualified_name(schema, variant)}"))


def count_rows(conn: Connection, schema: str, variant: TableVariant) -> int:
    try:
        value = conn.execute(
            text(f"SELECT count(*) FROM {qualified_name(schema, variant)}")
        ).scalar()
    except SQLAlchemyError as exc:
        if is_undefined_table_error(exc):
            raise TableMissingError(variant) from exc
        raise
    return int(value or 0)


def table_exists(conn: Connection, schema: str, variant: TableVariant) -> bool:
    return bool(
        conn.execute(
            text("SELECT to_regclass(:name) IS NOT NULL"),
            {"name": f"{quote_ident(schema)}.{quote_ident(variant.table_name)}"},
        ).scalar()
    )


def list_partitions(conn: Connection, schema: str, variant: TableVariant) -> list[str]:
    """Names of child tables attached to ``variant`` (catalog lookup)."""
    rows = conn.execute(
        text(
            """
            SELECT child.relname
            FROM pg_inherits i
            JOIN pg_class parent ON parent.oid = i.inhparent
            JOIN pg_class child ON child.oid = i.inhrelid
            JOIN pg_namespace ns ON ns.oid = parent.relnamespace
            WHERE ns.nspname = :schema AND parent.relname = :table
            ORDER BY child.relname
            """
        ),
        {"schema": schema, "table": variant.table_name},
    ).fetchall()
    return [str(row[0]) for row in rows]


def list_child_tables_by_prefix(conn: Connection, schema: str, variant: TableVariant) -> list[str]:
    """Tables named ``<table>_<n>`` left in the schema, attached or not."""
    rows = conn.execute(
        text(
            """
            SELECT c.relname
            FROM pg_class c
            JOIN pg_namespace ns ON ns.oid = c.relnamespace
            WHERE ns.nspname = :schema
              AND c.relkind IN ('r', 'p')
              AND c.relname ~ :pattern
            ORDER BY c.relname
            """
        ),
        {"schema": schema, "pattern": f"^{variant.table_name}_[0-9]+$"},
    ).fetchall()
    return [str(row[0]) for row in rows]
