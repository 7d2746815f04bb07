"""
Read benchmark: point lookups by accounted_for_bs_profile_id.

Writes results/read-benchmark-<variant>-<ts>.txt.

Usage:
  python scripts/bench_read.py --table part --samples 200
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
from registry_bench.services.reports import format_read_report, write_report
from registry_bench.services.run_log import stdout_log

logger = logging.getLogger("bench_read")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the read benchmark.")
    add_table_argument(parser)
    parser.add_argument(
        "--samples",
        type=positive_int,
        help="Number of sampled key values to look up (default: 100).",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    cfg = load_config()
    variant = resolve_variant(args, cfg.bench.table_variant)
    samples = args.samples or cfg.bench.samples

    out = stdout_log()
    backend = build_backend(cfg)
    try:
        stats = backend.read(variant, samples, out)
    except Exception as exc:
        logger.error("Read benchmark failed: %s", exc)
        return 1
    finally:
        backend.engine.dispose()

    body = format_read_report(variant, cfg.bench.mode, samples, stats)
    path = write_report(cfg.bench.results_dir, "read", variant, body)
    out.info(body)
    out.info("Saved %s", path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
