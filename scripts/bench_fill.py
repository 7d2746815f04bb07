"""
Bulk-load synthetic rows into one bonus_registry variant.

Progress and the summary line go to stdout and to logs/write-<variant>-<ts>.log.

Usage:
  python scripts/bench_fill.py --table idx --count 1000000 --batch 100000
"""
from __future__ import annotations

import argparse
import sys

from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.append(str(ROOT_DIR))

from config import load_config
from registry_bench.cli import add_table_argument, positive_int, resolve_variant
from registry_bench.services.backend import build_backend
from registry_bench.services.run_log import open_run_log


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Bulk-load synthetic rows.")
    add_table_argument(parser)
    parser.add_argument(
        "--count",
        type=positive_int,
        help="Rows to insert (default: BATCH_SIZE).",
    )
    parser.add_argument(
        "--batch",
        type=positive_int,
        help="Rows per INSERT statement (default: fill batch from config).",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    cfg = load_config()
    variant = resolve_variant(args, cfg.bench.table_variant)
    count = args.count or cfg.bench.batch_size
    batch = args.batch or cfg.bench.fill_batch

    backend = build_backend(cfg)
    run_log = open_run_log(cfg.bench.log_dir, "write", variant.value)
    try:
        run_log.line(
            f"# bench-fill table={variant.value} count={count} chunk={batch} "
            f"mode={cfg.bench.mode}"
        )
        backend.fill(variant, count, run_log.logger, batch_size=batch)
        run_log.line(f"Log: {run_log.path}")
    except Exception as exc:
        run_log.error(exc)
        return 1
    finally:
        run_log.close()
        backend.engine.dispose()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
