"""Text reports for benchmark results and their files under results/."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from registry_bench.services.query_bench import QueryBenchResult
from registry_bench.services.stats import LatencyStats
from registry_bench.services.variants import PARTITION_COLUMN, TableVariant


def file_timestamp(now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace(":", "-").replace(".", "-").replace("+", "_")


def format_read_report(variant: TableVariant, mode: str, samples: int, stats: LatencyStats) -> str:
    lines = [
        f"# Read benchmark (by {PARTITION_COLUMN})",
        f"table={variant.table_name} mode={mode} samples={samples}",
        "",
        "Min (ms)\tMax (ms)\tAvg (ms)\tMedian (ms)\tN",
        f"{stats.min:.2f}\t{stats.max:.2f}\t{stats.avg:.2f}\t{stats.median:.2f}\t{stats.n}",
    ]
    return "\n".join(lines)


def format_queries_report(variant: TableVariant, mode: str, runs: int, bench: QueryBenchResult) -> str:
    lines = [
        "# Queries benchmark",
        f"table={variant.table_name} mode={mode} runs={runs}",
        "",
        f"{'Query':>5} | {'Name':<32} | {'Min':>8} {'Max':>8} {'Avg':>8} {'Median':>8} | N",
        "-" * 82,
    ]
    for item in bench.results:
        s = item.stats
        lines.append(
            f"{item.id:>5} | {item.name:<32} | {s.min:>8.2f} {s.max:>8.2f} "
            f"{s.avg:>8.2f} {s.median:>8.2f} | {s.n}"
        )
    for query_id, reason in sorted(bench.skipped.items()):
        lines.append(f"{query_id:>5} | skipped: {reason}")
    if bench.repaired:
        lines.append("")
        lines.append("Fixture repair applied for queries: " + ", ".join(str(q) for q in bench.repaired))
    return "\n".join(lines)


def write_report(results_dir: Path, kind: str, variant: TableVariant, body: str) -> Path:
    results_dir.mkdir(parents=True, exist_ok=True)
    path = results_dir / f"{kind}-benchmark-{variant.value}-{file_timestamp()}.txt"
    path.write_text(body + "\n", encoding="utf-8")
    return path
