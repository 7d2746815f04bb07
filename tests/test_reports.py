from __future__ import annotations

import io
from datetime import datetime, timezone

import pytest

from registry_bench.services.query_bench import QueryBenchResult
from registry_bench.services.reports import (
    file_timestamp,
    format_queries_report,
    format_read_report,
    write_report,
)
from registry_bench.services.run_log import open_run_log
from registry_bench.services.stats import LatencyStats, QueryStats, summarize
from registry_bench.services.variants import TableVariant


def test_summarize_median_of_even_count():
    stats = summarize([4.0, 1.0, 3.0, 2.0])
    assert (stats.min, stats.max, stats.avg, stats.median, stats.n) == (1.0, 4.0, 2.5, 2.5, 4)
    with pytest.raises(ValueError):
        summarize([])


def test_file_timestamp_has_no_colons_or_dots():
    ts = file_timestamp(datetime(2026, 3, 4, 5, 6, 7, 890000, tzinfo=timezone.utc))
    assert ts == "2026-03-04T05-06-07-890_00-00"


def test_read_report_layout():
    body = format_read_report(
        TableVariant.PART, "postgres", 100, LatencyStats(0.5, 2.25, 1.0, 0.75, 100)
    )
    lines = body.splitlines()
    assert lines[0] == "# Read benchmark (by accounted_for_bs_profile_id)"
    assert lines[1] == "table=bonus_registry_part mode=postgres samples=100"
    assert lines[-1] == "0.50\t2.25\t1.00\t0.75\t100"


def test_queries_report_lists_results_and_skips(tmp_path):
    bench = QueryBenchResult(
        results=[QueryStats(2, "Pagination by profile", LatencyStats(1, 2, 1.5, 1.5, 5))],
        skipped={1: "no matching rows (fixture repair disabled)"},
    )
    body = format_queries_report(TableVariant.IDX, "trino", 5, bench)
    assert "Pagination by profile" in body
    assert "skipped: no matching rows (fixture repair disabled)" in body

    path = write_report(tmp_path / "results", "queries", TableVariant.IDX, body)
    assert path.name.startswith("queries-benchmark-idx-")
    assert path.read_text(encoding="utf-8") == body + "\n"


def test_run_log_writes_file_and_stream(tmp_path):
    stream = io.StringIO()
    run_log = open_run_log(tmp_path, "write", "plain", stream=stream)
    run_log.line("hello")
    try:
        raise RuntimeError("kaput")
    except RuntimeError as exc:
        run_log.error(exc)
    run_log.close()

    text = run_log.path.read_text(encoding="utf-8")
    assert run_log.path.name.startswith("write-plain-")
    assert text == stream.getvalue()
    assert text.startswith("hello\n[ERROR] kaput\nTraceback")
