"""
Drop the bonus_registry benchmark tables (partitions and indexes included).

Tables or ``<table>_<n>`` children still present afterwards are reported
and the script exits with status 1.

Usage:
  python scripts/drop_tables.py --table part
  python scripts/drop_tables.py --all
"""
from __future__ import annotations

import argparse
import logging
import sys

from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.append(str(ROOT_DIR))

from config import load_config
from registry_bench.cli import add_table_argument, configure_logging, resolve_variant
from registry_bench.services import schema as schema_ops
from registry_bench.services.backend import create_bench_engine
from registry_bench.services.variants import TABLE_VARIANTS

logger = logging.getLogger("drop_tables")


def leftover_tables(engine, schema: str, variants) -> list[str]:
    leftovers: list[str] = []
    with engine.connect() as conn:
        for variant in variants:
            if schema_ops.table_exists(conn, schema, variant):
                leftovers.append(variant.table_name)
            leftovers.extend(schema_ops.list_child_tables_by_prefix(conn, schema, variant))
    return leftovers


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Drop benchmark table(s).")
    add_table_argument(parser, allow_all=True)
    args = parser.parse_args(argv)

    configure_logging()
    cfg = load_config()
    schema = cfg.postgres.schema
    variants = TABLE_VARIANTS if args.all else (resolve_variant(args, cfg.bench.table_variant),)
    engine = create_bench_engine(cfg)
    try:
        if args.all:
            schema_ops.drop_all(engine, schema)
        else:
            schema_ops.drop_variant(engine, schema, variants[0])
        leftovers = leftover_tables(engine, schema, variants)
    except Exception as exc:
        logger.error("Table drop failed: %s", exc)
        return 1
    finally:
        engine.dispose()
    if leftovers:
        logger.error("Still present after drop: %s", ", ".join(leftovers))
        return 1
    print("Tables dropped.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
