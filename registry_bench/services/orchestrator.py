"""Resumable full benchmark: create, then rounds of fill, layout restore,
read and queries until the target row count is reached.

Every completed step sets its flag in ``BenchmarkRunState`` and the state
is persisted before the next step starts. A restart re-reads the row count
from the table and runs only the steps whose flags are still unset.
"""

from __future__ import annotations

import logging
from typing import Optional

from tenacity import Retrying, retry_if_exception_type, stop_after_attempt

from config import BenchSettings
from registry_bench.services.reports import (
    format_queries_report,
    format_read_report,
    write_report,
)
from registry_bench.services.run_log import RunLog
from registry_bench.services.run_state import BenchmarkRunState, StateStore
from registry_bench.services.schema import TableMissingError
from registry_bench.services.variants import TableVariant

logger = logging.getLogger(__name__)


class BenchmarkOrchestrator:
    def __init__(
        self,
        backend,
        variant: TableVariant,
        settings: BenchSettings,
        run_log: RunLog,
        store: Optional[StateStore] = None,
        *,
        repair_fixtures: Optional[bool] = None,
    ):
        self.backend = backend
        self.variant = variant
        self.settings = settings
        self.log = run_log
        self.store = store or StateStore(settings.state_file)
        self.repair_fixtures = (
            settings.repair_fixtures if repair_fixtures is None else repair_fixtures
        )

    # -- helpers -------------------------------------------------------

    def _recreate_table(self, retry_state) -> None:
        self.log.line(
            f"Table {self.variant.table_name} is missing, recreating "
            f"(attempt {retry_state.attempt_number})"
        )
        self.backend.create_table(self.variant)

    def _count_rows(self) -> int:
        """Authoritative row count; a missing table is recreated once."""
        retryer = Retrying(
            stop=stop_after_attempt(2),
            retry=retry_if_exception_type(TableMissingError),
            before_sleep=self._recreate_table,
            reraise=True,
        )
        return retryer(self.backend.count_rows, self.variant)

    def _persist(self, state: BenchmarkRunState) -> None:
        self.store.save(state)

    # -- steps ---------------------------------------------------------

    def _step_create(self, state: BenchmarkRunState) -> None:
        self.log.line(f"[create] {self.variant.table_name}")
        self.backend.create_table(self.variant)
        state.completed.create = True
        self._persist(state)

    def _step_fill(self, state: BenchmarkRunState) -> None:
        to_add = max(0, min(state.batch_size, state.record_max - state.total_rows))
        if to_add == 0:
            self.log.line("[fill] nothing to add")
        else:
            self.log.line(f"[fill] adding {to_add} rows to {self.variant.table_name}")
            self.backend.prepare_fill(self.variant)
            self.backend.fill(
                self.variant, to_add, self.log.logger, batch_size=state.fill_batch
            )
        state.total_rows = self._count_rows()
        state.completed.fill = True
        self._persist(state)
        self.log.line(f"[fill] total rows: {state.total_rows}")

    def _step_layout(self, state: BenchmarkRunState) -> None:
        self.log.line("[layout] restoring logged mode, index and statistics")
        index_ms = self.backend.restore_layout(self.variant)
        if self.variant.indexed:
            self.log.line(f"Index rebuilt in {round(index_ms)} ms")
        state.completed.layout = True
        self._persist(state)

    def _step_read(self, state: BenchmarkRunState) -> None:
        if state.total_rows == 0:
            self.log.line("[read] skipped: table is empty")
        else:
            self.log.line(f"[read] samples={self.settings.samples}")
            stats = self.backend.read(self.variant, self.settings.samples, self.log.logger)
            body = format_read_report(
                self.variant, self.backend.mode, self.settings.samples, stats
            )
            path = write_report(self.settings.results_dir, "read", self.variant, body)
            self.log.line(body)
            self.log.line(f"Saved {path}")
        state.completed.read = True
        self._persist(state)

    def _step_queries(self, state: BenchmarkRunState) -> None:
        if state.total_rows == 0:
            self.log.line("[queries] skipped: table is empty")
        else:
            self.log.line(f"[queries] runs={self.settings.runs}")
            bench = self.backend.queries(
                self.variant,
                self.settings.runs,
                self.log.logger,
                repair_fixtures=self.repair_fixtures,
            )
            body = format_queries_report(
                self.variant, self.backend.mode, self.settings.runs, bench
            )
            path = write_report(self.settings.results_dir, "queries", self.variant, body)
            self.log.line(body)
            self.log.line(f"Saved {path}")
        state.completed.queries = True
        self._persist(state)

    # -- main loop -----------------------------------------------------

    def run(self) -> BenchmarkRunState:
        """Run (or resume) until the target is reached; returns the final state.

        Any step failure is written to the run log with its traceback and
        re-raised. The failing step keeps its flag unset.
        """
        settings = self.settings
        state, resumed = self.store.load_or_init(
            self.variant.value,
            settings.record_max,
            settings.batch_size,
            settings.fill_batch,
        )
        self.log.line(
            f"Benchmark {self.variant.table_name} mode={self.backend.mode} "
            f"target={state.record_max} batch={state.batch_size} "
            f"fillBatch={state.fill_batch} "
            + (f"resuming round {state.current_round}" if resumed else "fresh run")
        )
        try:
            if not state.completed.create:
                self._step_create(state)
            state.total_rows = self._count_rows()
            self._persist(state)

            done = state.completed
            while state.total_rows < state.record_max or not done.read or not done.queries:
                self.log.line(
                    f"== Round {state.current_round} (rows={state.total_rows}) =="
                )
                if not done.fill:
                    self._step_fill(state)
                if not done.layout:
                    self._step_layout(state)
                if not done.read:
                    self._step_read(state)
                if not done.queries:
                    self._step_queries(state)

                if state.total_rows >= state.record_max:
                    break
                state.current_round += 1
                done.reset_round()
                self._persist(state)
        except Exception as exc:
            self.log.error(exc)
            raise

        self.log.line(
            f"Done: {state.total_rows} rows in {self.variant.table_name} "
            f"after {state.current_round} round(s)"
        )
        return state


__all__ = ["BenchmarkOrchestrator"]
