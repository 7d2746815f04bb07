"""Engine backends used by the orchestrator and the standalone scripts.

DDL, row counts and WAL/index toggles always go through PostgreSQL. In
Trino mode the fill, read and query steps run through the Trino client
against the same tables exposed by the catalog.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from config import AppConfig
from registry_bench.services import schema as schema_ops
from registry_bench.services.bulk_loader import FillResult, fill_postgres, fill_trino
from registry_bench.services.executors import PostgresExecutor, TrinoExecutor
from registry_bench.services.query_bench import QueryBenchResult, run_queries
from registry_bench.services.read_bench import run_read
from registry_bench.services.schema import TableMissingError, is_undefined_table_error
from registry_bench.services.stats import LatencyStats
from registry_bench.services.trino_engine import TrinoEngine
from registry_bench.services.variants import TableVariant, qualified_name

logger = logging.getLogger(__name__)


def create_bench_engine(cfg: AppConfig, **kwargs) -> Engine:
    """SQLAlchemy engine for the benchmark database."""
    return create_engine(cfg.postgres.db_uri, pool_pre_ping=True, future=True, **kwargs)


@contextmanager
def missing_table_guard(variant: TableVariant):
    """Translate "relation does not exist" into ``TableMissingError``."""
    try:
        yield
    except SQLAlchemyError as exc:
        if is_undefined_table_error(exc):
            raise TableMissingError(variant) from exc
        raise


class PostgresBackend:
    mode = "postgres"

    def __init__(self, engine: Engine, cfg: AppConfig):
        self.engine = engine
        self.cfg = cfg
        self.schema = cfg.postgres.schema

    def table_ref(self, variant: TableVariant) -> str:
        return qualified_name(self.schema, variant)

    # -- schema ---------------------------------------------------------

    def create_table(self, variant: TableVariant) -> None:
        schema_ops.create_variant(self.engine, self.schema, variant)

    def drop_table(self, variant: TableVariant) -> None:
        schema_ops.drop_variant(self.engine, self.schema, variant)

    def count_rows(self, variant: TableVariant) -> int:
        with self.engine.connect() as conn:
            return schema_ops.count_rows(conn, self.schema, variant)

    def prepare_fill(self, variant: TableVariant) -> None:
        """Drop the secondary index and switch off WAL before a bulk fill."""
        with missing_table_guard(variant):
            schema_ops.drop_index(self.engine, self.schema, variant)
            schema_ops.set_logged(self.engine, self.schema, variant, logged=False)

    def restore_layout(self, variant: TableVariant) -> float:
        """Re-enable WAL, rebuild the index and refresh statistics.

        Returns the index build time in milliseconds (0 for unindexed tables).
        """
        with missing_table_guard(variant):
            schema_ops.set_logged(self.engine, self.schema, variant, logged=True)
            index_ms = schema_ops.rebuild_index(self.engine, self.schema, variant)
            schema_ops.analyze(self.engine, self.schema, variant)
        return index_ms

    # -- benchmark steps -----------------------------------------------

    def fill(
        self,
        variant: TableVariant,
        count: int,
        log: logging.Logger,
        batch_size: Optional[int] = None,
    ) -> FillResult:
        with missing_table_guard(variant), self.engine.connect() as conn:
            return fill_postgres(
                conn,
                self.table_ref(variant),
                variant.table_name,
                count,
                batch_size or self.cfg.bench.fill_batch,
                log,
            )

    def read(self, variant: TableVariant, samples: int, log: logging.Logger) -> LatencyStats:
        with missing_table_guard(variant), self.engine.connect() as conn:
            return run_read(PostgresExecutor(conn, self.table_ref(variant)), samples, log)

    def queries(
        self,
        variant: TableVariant,
        runs: int,
        log: logging.Logger,
        repair_fixtures: Optional[bool] = None,
    ) -> QueryBenchResult:
        if repair_fixtures is None:
            repair_fixtures = self.cfg.bench.repair_fixtures
        with missing_table_guard(variant), self.engine.connect() as conn:
            return run_queries(
                PostgresExecutor(conn, self.table_ref(variant)),
                runs,
                discovery_limit=self.cfg.bench.discovery_limit,
                repair_fixtures=repair_fixtures,
                log=log,
            )


class TrinoBackend(PostgresBackend):
    mode = "trino"

    def __init__(self, engine: Engine, cfg: AppConfig, trino: Optional[TrinoEngine] = None):
        super().__init__(engine, cfg)
        self.trino = trino or TrinoEngine(cfg.trino, self.schema)

    def fill(
        self,
        variant: TableVariant,
        count: int,
        log: logging.Logger,
        batch_size: Optional[int] = None,
    ) -> FillResult:
        with self.trino.cursor() as cursor:
            return fill_trino(
                TrinoExecutor(cursor, self.trino.table_ref(variant)),
                variant.table_name,
                count,
                batch_size or self.cfg.bench.fill_batch,
                self.cfg.bench.trino_chunk_max,
                log,
            )

    def read(self, variant: TableVariant, samples: int, log: logging.Logger) -> LatencyStats:
        with self.trino.cursor() as cursor:
            return run_read(TrinoExecutor(cursor, self.trino.table_ref(variant)), samples, log)

    def queries(
        self,
        variant: TableVariant,
        runs: int,
        log: logging.Logger,
        repair_fixtures: Optional[bool] = None,
    ) -> QueryBenchResult:
        if repair_fixtures is None:
            repair_fixtures = self.cfg.bench.repair_fixtures
        with self.trino.cursor() as cursor:
            return run_queries(
                TrinoExecutor(cursor, self.trino.table_ref(variant)),
                runs,
                discovery_limit=self.cfg.bench.discovery_limit,
                repair_fixtures=repair_fixtures,
                log=log,
            )


def build_backend(cfg: AppConfig, engine: Optional[Engine] = None) -> PostgresBackend:
    """Backend for ``cfg.bench.mode``."""
    engine = engine or create_bench_engine(cfg)
    if cfg.bench.mode == "trino":
        return TrinoBackend(engine, cfg)
    return PostgresBackend(engine, cfg)


__all__ = [
    "PostgresBackend",
    "TrinoBackend",
    "build_backend",
    "create_bench_engine",
    "missing_table_guard",
]
