"""
Queries benchmark: the ten production query shapes against one variant.

Writes results/queries-benchmark-<variant>-<ts>.txt.

Usage:
  python scripts/bench_queries.py --table idx_part --runs 10 [--repair-fixtures]
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
from registry_bench.cli import add_table_argument, positive_int, resolve_variant
from registry_bench.services.backend import build_backend
from registry_bench.services.reports import format_queries_report, write_report
from registry_bench.services.run_log import stdout_log

logger = logging.getLogger("bench_queries")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the queries benchmark.")
    add_table_argument(parser)
    parser.add_argument(
        "--runs",
        type=positive_int,
        help="Executions per query (default: 5).",
    )
    parser.add_argument(
        "--repair-fixtures",
        action="store_true",
        default=None,
        help="Update existing rows when a query shape has no matching row.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    cfg = load_config()
    variant = resolve_variant(args, cfg.bench.table_variant)
    runs = args.runs or cfg.bench.runs

    out = stdout_log()
    backend = build_backend(cfg)
    try:
        bench = backend.queries(variant, runs, out, repair_fixtures=args.repair_fixtures)
    except Exception as exc:
        logger.error("Queries benchmark failed: %s", exc)
        return 1
    finally:
        backend.engine.dispose()

    body = format_queries_report(variant, cfg.bench.mode, runs, bench)
    path = write_report(cfg.bench.results_dir, "queries", variant, body)
    out.info(body)
    out.info("Saved %s", path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
