from __future__ import annotations

import io

import pytest

from config import BenchSettings
from registry_bench.services.orchestrator import BenchmarkOrchestrator
from registry_bench.services.query_bench import QueryBenchResult
from registry_bench.services.run_log import open_run_log
from registry_bench.services.run_state import BenchmarkRunState, StateStore
from registry_bench.services.schema import TableMissingError
from registry_bench.services.stats import LatencyStats, QueryStats
from registry_bench.services.variants import TableVariant

_STATS = LatencyStats(min=1.0, max=3.0, avg=2.0, median=2.0, n=3)


class _FakeBackend:
    mode = "postgres"

    def __init__(self, rows: int = 0, exists: bool = False, fail_on: str | None = None):
        self.rows = rows
        self.exists = exists
        self.fail_on = fail_on
        self.calls: list = []
        self.chunk_sizes: list = []

    def _maybe_fail(self, step: str) -> None:
        if self.fail_on == step:
            self.fail_on = None
            raise RuntimeError(f"{step} exploded")

    def create_table(self, variant):
        self.calls.append("create")
        self.exists = True

    def count_rows(self, variant):
        if not self.exists:
            raise TableMissingError(variant)
        return self.rows

    def prepare_fill(self, variant):
        self.calls.append("prepare_fill")

    def fill(self, variant, count, log, batch_size=None):
        self._maybe_fail("fill")
        self.calls.append(("fill", count))
        self.chunk_sizes.append(batch_size)
        self.rows += count
        log.info("variant=%s batchSize=%d", variant.table_name, count)

    def restore_layout(self, variant):
        self.calls.append("layout")
        return 12.4

    def read(self, variant, samples, log):
        self._maybe_fail("read")
        self.calls.append("read")
        return _STATS

    def queries(self, variant, runs, log, repair_fixtures=None):
        self._maybe_fail("queries")
        self.calls.append(("queries", repair_fixtures))
        return QueryBenchResult(results=[QueryStats(1, "Charges by document", _STATS)])


def _settings(tmp_path, **overrides) -> BenchSettings:
    values = dict(
        batch_size=1000,
        record_max=2000,
        fill_batch=500,
        log_dir=tmp_path / "logs",
        results_dir=tmp_path / "results",
    )
    values.update(overrides)
    return BenchSettings(**values)


def _run(backend, settings, variant=TableVariant.IDX):
    stream = io.StringIO()
    run_log = open_run_log(settings.log_dir, "bench-full", variant.value, stream=stream)
    try:
        state = BenchmarkOrchestrator(backend, variant, settings, run_log).run()
    finally:
        run_log.close()
    return state, stream.getvalue(), run_log.path


def test_two_rounds_reach_exact_target(tmp_path):
    backend = _FakeBackend()
    settings = _settings(tmp_path)
    state, output, log_path = _run(backend, settings)

    assert state.current_round == 2
    assert state.total_rows == 2000
    assert backend.rows == 2000
    assert [c for c in backend.calls if isinstance(c, tuple) and c[0] == "fill"] == [
        ("fill", 1000),
        ("fill", 1000),
    ]
    assert backend.calls.count("create") == 1
    assert backend.calls.count("layout") == 2
    assert backend.calls.count("read") == 2
    assert "Index rebuilt in 12 ms" in output
    assert log_path.read_text(encoding="utf-8") == output
    assert list((tmp_path / "results").glob("read-benchmark-idx-*.txt"))
    assert list((tmp_path / "results").glob("queries-benchmark-idx-*.txt"))

    saved = StateStore(settings.state_file).load()
    assert saved.total_rows == 2000
    assert saved.completed.queries is True


def test_prepare_fill_runs_before_each_fill(tmp_path):
    backend = _FakeBackend()
    _run(backend, _settings(tmp_path, record_max=1000))
    fill_index = backend.calls.index(("fill", 1000))
    assert backend.calls[fill_index - 1] == "prepare_fill"
    assert backend.calls[fill_index + 1] == "layout"


def test_failed_read_resumes_at_read(tmp_path):
    backend = _FakeBackend(fail_on="read")
    settings = _settings(tmp_path, record_max=1000)

    with pytest.raises(RuntimeError, match="read exploded"):
        _run(backend, settings)

    saved = StateStore(settings.state_file).load()
    assert saved.completed.create is True
    assert saved.completed.fill is True
    assert saved.completed.layout is True
    assert saved.completed.read is False
    log_text = next((tmp_path / "logs").glob("bench-full-idx-*.log")).read_text(encoding="utf-8")
    assert "[ERROR] read exploded" in log_text
    assert "Traceback" in log_text

    backend.calls.clear()
    state, _, _ = _run(backend, settings)
    assert backend.calls == ["read", ("queries", False)]
    assert state.total_rows == 1000


def test_missing_table_is_recreated_on_resume(tmp_path):
    settings = _settings(tmp_path, record_max=1000)
    saved = BenchmarkRunState("idx", 1000, 1000, 500)
    saved.completed.create = True
    StateStore(settings.state_file).save(saved)

    backend = _FakeBackend(exists=False)
    state, output, _ = _run(backend, settings)

    assert backend.calls[0] == "create"
    assert ("fill", 1000) in backend.calls
    assert state.total_rows == 1000
    assert "is missing, recreating" in output


def test_target_already_reached_skips_insert(tmp_path):
    backend = _FakeBackend(rows=1000, exists=True)
    state, output, _ = _run(backend, _settings(tmp_path, record_max=1000))

    assert not any(isinstance(c, tuple) and c[0] == "fill" for c in backend.calls)
    assert "prepare_fill" not in backend.calls
    assert "read" in backend.calls
    assert "[fill] nothing to add" in output
    assert state.completed.fill is True


def test_repair_flag_is_forwarded(tmp_path):
    backend = _FakeBackend()
    settings = _settings(tmp_path, record_max=1000, repair_fixtures=True)
    _run(backend, settings)
    assert ("queries", True) in backend.calls


def test_fill_uses_chunk_size_from_run_state(tmp_path):
    backend = _FakeBackend()
    state, _, _ = _run(backend, _settings(tmp_path, fill_batch=100))

    assert state.fill_batch == 100
    assert backend.chunk_sizes == [100, 100]


def test_crash_between_fill_and_layout_resumes_at_layout(tmp_path):
    settings = _settings(tmp_path, record_max=1000)
    saved = BenchmarkRunState("idx", 1000, 1000, 500)
    saved.completed.create = True
    saved.completed.fill = True
    saved.total_rows = 1000
    StateStore(settings.state_file).save(saved)

    backend = _FakeBackend(rows=1000, exists=True)
    state, _, _ = _run(backend, settings)

    assert backend.calls == ["layout", "read", ("queries", False)]
    assert state.total_rows == 1000
    assert state.completed.layout is True
