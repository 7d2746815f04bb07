from __future__ import annotations

from contextlib import contextmanager

from trino.dbapi import connect as trino_connect

from config import TrinoConfig
from registry_bench.services.variants import TableVariant, qualified_name


class TrinoEngine:
    """Connection factory for the Trino coordinator."""

    def __init__(self, cfg: TrinoConfig, schema: str):
        self.cfg = cfg
        # Tables live in the PostgreSQL schema, exposed through the catalog.
        self.schema = schema

    def table_ref(self, variant: TableVariant) -> str:
        return qualified_name(self.schema, variant, catalog=self.cfg.catalog)

    def connect(self):
        return trino_connect(
            host=self.cfg.host,
            port=self.cfg.port,
            user=self.cfg.user,
            catalog=self.cfg.catalog,
            schema=self.cfg.schema,
            http_scheme="http",
        )

    @contextmanager
    def cursor(self):
        conn = self.connect()
        try:
            yield conn.cursor()
        finally:
            conn.close()
