from __future__ import annotations

from registry_bench.services.queries import QUERY_CATALOG
from registry_bench.services.query_bench import discover_params, run_queries

_CHARGE_ROW = ("doc-1", "bsBonusDocument", "profile-1", "premial")


class _FakeQueryExecutor:
    """Answers discovery from a canned row; the charge query starts unsatisfied."""

    engine_name = "postgres"
    supports_repair = True
    table_ref = '"bench"."bonus_registry_part"'

    def __init__(self, charge_rows=None, empty=False):
        self.charge_rows = list(charge_rows or [])
        self.empty = empty
        self.executed: list[tuple[str, dict]] = []
        self.updates: list[str] = []
        self.commits = 0

    def fetch_all(self, sql, params=None):
        params = dict(params or {})
        if sql.startswith("UPDATE"):
            self.updates.append(sql)
            if self.empty:
                return []
            if "amount = -100" in sql:
                self.charge_rows = [_CHARGE_ROW]
                return [_CHARGE_ROW]
            return []
        if "LIMIT :limit" in sql:
            if self.empty:
                return []
            if "amount < 0" in sql:
                return list(self.charge_rows)
            return [self._discovery_row(sql)]
        self.executed.append((sql, params))
        return []

    def _discovery_row(self, sql):
        select = sql.split(" FROM ")[0]
        width = select.count(",") + 1
        return tuple(f"value-{i}" for i in range(width))

    def commit(self):
        self.commits += 1


def _runs_for(executor, query_id):
    query = next(q for q in QUERY_CATALOG if q.id == query_id)
    sql = query.render(executor.table_ref)
    return [params for stmt, params in executor.executed if stmt == sql]


def test_catalog_has_ten_queries():
    assert [q.id for q in QUERY_CATALOG] == list(range(1, 11))


def test_charge_query_repaired_when_enabled():
    executor = _FakeQueryExecutor()
    bench = run_queries(executor, runs=1, discovery_limit=20, repair_fixtures=True)

    assert bench.repaired == [1]
    assert executor.commits == 1
    charge = next(r for r in bench.results if r.id == 1)
    assert charge.stats.n == 1
    runs = _runs_for(executor, 1)
    assert len(runs) == 1
    assert runs[0]["doc_id"] == "doc-1"
    assert runs[0]["profile_id"] == "profile-1"
    assert 1 not in bench.skipped


def test_charge_query_skipped_without_repair():
    executor = _FakeQueryExecutor()
    bench = run_queries(executor, runs=3, discovery_limit=20)

    assert executor.updates == []
    assert bench.skipped[1] == "no matching rows (fixture repair disabled)"
    assert all(r.id != 1 for r in bench.results)
    assert len(bench.results) == 9


def test_repair_unsupported_engine_is_reported():
    executor = _FakeQueryExecutor()
    executor.engine_name = "trino"
    executor.supports_repair = False
    result = discover_params(executor, 20, repair_fixtures=True)
    assert result.skipped[1] == "no matching rows (repair unsupported on trino)"
    assert executor.updates == []


def test_runs_cycle_through_discovered_parameters():
    executor = _FakeQueryExecutor(
        charge_rows=[_CHARGE_ROW, ("doc-2", "bsBonusDocument", "profile-2", "qualification")]
    )
    bench = run_queries(executor, runs=5, discovery_limit=20)

    runs = _runs_for(executor, 1)
    assert [r["doc_id"] for r in runs] == ["doc-1", "doc-2", "doc-1", "doc-2", "doc-1"]
    assert all(r["as_of"] is not None for r in runs)
    charge = next(r for r in bench.results if r.id == 1)
    assert charge.stats.n == 5


def test_empty_table_skips_every_shape_except_constant_ones():
    executor = _FakeQueryExecutor(empty=True)
    bench = run_queries(executor, runs=2, discovery_limit=20, repair_fixtures=True)

    assert [r.id for r in bench.results] == [9]
    assert bench.skipped[10] == "no matching rows"
    assert bench.skipped[1] == "no rows to repair"
