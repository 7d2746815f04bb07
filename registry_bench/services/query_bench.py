"""Query benchmark: discovery of real parameters, optional fixture repair,
then timed execution of every query shape."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Optional

from registry_bench.services.queries import QUERY_CATALOG, QueryDefinition
from registry_bench.services.stats import QueryStats, summarize

logger = logging.getLogger(__name__)


@dataclass
class DiscoveryResult:
    params: dict[int, list[dict[str, Any]]] = field(default_factory=dict)
    repaired: list[int] = field(default_factory=list)
    skipped: dict[int, str] = field(default_factory=dict)


@dataclass
class QueryBenchResult:
    results: list[QueryStats] = field(default_factory=list)
    skipped: dict[int, str] = field(default_factory=dict)
    repaired: list[int] = field(default_factory=list)


def _repair(executor, query: QueryDefinition, log: logging.Logger) -> list[dict[str, Any]]:
    sql = query.render_repair(executor.table_ref)
    rows = executor.fetch_all(sql, {})
    executor.commit()
    if rows:
        log.info("Query %d (%s): repaired %d row(s) to satisfy predicate", query.id, query.name, len(rows))
    return [query.bind(row) for row in rows]


def discover_params(
    executor,
    discovery_limit: int,
    *,
    repair_fixtures: bool = False,
    catalog: tuple[QueryDefinition, ...] = QUERY_CATALOG,
    log: Optional[logging.Logger] = None,
) -> DiscoveryResult:
    log = log or logger
    result = DiscoveryResult()
    for query in catalog:
        sql = query.render_discovery(executor.table_ref)
        if sql is None:
            result.params[query.id] = [dict(query.constants)]
            continue
        rows = executor.fetch_all(sql, {**query.constants, "limit": discovery_limit})
        tuples = [query.bind(row) for row in rows]
        if not tuples and query.repair_sql is not None:
            if not repair_fixtures:
                result.skipped[query.id] = "no matching rows (fixture repair disabled)"
            elif not executor.supports_repair:
                result.skipped[query.id] = f"no matching rows (repair unsupported on {executor.engine_name})"
            else:
                tuples = _repair(executor, query, log)
                if tuples:
                    result.repaired.append(query.id)
                else:
                    result.skipped[query.id] = "no rows to repair"
        elif not tuples:
            result.skipped[query.id] = "no matching rows"
        if tuples:
            result.params[query.id] = tuples
    return result


def run_queries(
    executor,
    runs: int,
    *,
    discovery_limit: int,
    repair_fixtures: bool = False,
    catalog: tuple[QueryDefinition, ...] = QUERY_CATALOG,
    log: Optional[logging.Logger] = None,
) -> QueryBenchResult:
    """Run each query ``runs`` times, cycling through discovered parameters."""
    log = log or logger
    discovery = discover_params(
        executor,
        discovery_limit,
        repair_fixtures=repair_fixtures,
        catalog=catalog,
        log=log,
    )
    bench = QueryBenchResult(skipped=dict(discovery.skipped), repaired=list(discovery.repaired))
    for query in catalog:
        tuples = discovery.params.get(query.id)
        if not tuples:
            log.info("Query %d (%s): skipped (%s)", query.id, query.name, bench.skipped.get(query.id, "no parameters"))
            continue
        sql = query.render(executor.table_ref)
        times_ms: list[float] = []
        for run in range(runs):
            params = tuples[run % len(tuples)]
            started = time.perf_counter()
            executor.fetch_all(sql, params)
            times_ms.append((time.perf_counter() - started) * 1000.0)
        bench.results.append(QueryStats(query.id, query.name, summarize(times_ms)))
    return bench
