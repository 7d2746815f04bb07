"""
Full resumable benchmark: create, then rounds of fill / layout / read /
queries until RECORD_MAX rows are loaded.

Everything is written to logs/bench-full-<variant>-<ts>.log. Progress is
kept in logs/bench-full-state.json so a rerun with the same parameters
continues after the last completed step.

Usage:
  python scripts/bench_full.py --table idx --batch 1000000

Rows per round come from BATCH_SIZE; --batch only sets the fill chunk.
"""
from __future__ import annotations

import argparse
import dataclasses
import sys

from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.append(str(ROOT_DIR))

from config import load_config
from registry_bench.cli import add_table_argument, positive_int, resolve_variant
from registry_bench.services.backend import build_backend
from registry_bench.services.orchestrator import BenchmarkOrchestrator
from registry_bench.services.run_log import open_run_log


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the full resumable benchmark.")
    add_table_argument(parser)
    parser.add_argument("--batch", type=positive_int, help="Rows per fill chunk (default: FILL_BATCH).")
    parser.add_argument("--samples", type=positive_int, help="Read benchmark samples.")
    parser.add_argument("--runs", type=positive_int, help="Executions per query.")
    parser.add_argument(
        "--repair-fixtures",
        action="store_true",
        default=None,
        help="Allow the queries step to update rows for unsatisfiable query shapes.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    cfg = load_config()
    variant = resolve_variant(args, cfg.bench.table_variant)
    overrides = {
        key: value
        for key, value in (
            ("fill_batch", args.batch),
            ("samples", args.samples),
            ("runs", args.runs),
            ("repair_fixtures", args.repair_fixtures),
        )
        if value is not None
    }
    settings = dataclasses.replace(cfg.bench, table_variant=variant.value, **overrides)

    backend = build_backend(cfg)
    run_log = open_run_log(settings.log_dir, "bench-full", variant.value)
    try:
        BenchmarkOrchestrator(backend, variant, settings, run_log).run()
    except Exception:
        # Already written to the run log with its traceback.
        return 1
    finally:
        run_log.line(f"Log: {run_log.path}")
        run_log.close()
        backend.engine.dispose()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
