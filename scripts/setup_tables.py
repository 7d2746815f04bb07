"""
Create the bonus_registry benchmark tables.

Partitioned variants are checked against the catalog afterwards; a missing
hash partition fails the run.

Usage:
  python scripts/setup_tables.py --table part
  python scripts/setup_tables.py --all
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
from registry_bench.services.variants import PARTITION_COUNT, TABLE_VARIANTS

logger = logging.getLogger("setup_tables")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create benchmark table(s).")
    add_table_argument(parser, allow_all=True)
    args = parser.parse_args(argv)

    configure_logging()
    cfg = load_config()
    schema = cfg.postgres.schema
    variants = TABLE_VARIANTS if args.all else (resolve_variant(args, cfg.bench.table_variant),)
    engine = create_bench_engine(cfg)
    incomplete: list[str] = []
    try:
        if args.all:
            schema_ops.create_all(engine, schema)
        else:
            schema_ops.create_variant(engine, schema, variants[0])
        with engine.connect() as conn:
            for variant in variants:
                if not variant.partitioned:
                    continue
                attached = len(schema_ops.list_partitions(conn, schema, variant))
                logger.info("%s: %d partitions attached", variant.table_name, attached)
                if attached != PARTITION_COUNT:
                    incomplete.append(variant.table_name)
    except Exception as exc:
        logger.error("Table setup failed: %s", exc)
        return 1
    finally:
        engine.dispose()
    if incomplete:
        logger.error("Expected %d partitions on: %s", PARTITION_COUNT, ", ".join(incomplete))
        return 1
    print("Tables ready.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
