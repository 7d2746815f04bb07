from __future__ import annotations

import statistics
from dataclasses import dataclass


@dataclass(frozen=True)
class LatencyStats:
    """Aggregate latency over ``n`` timed executions, in milliseconds."""

    min: float
    max: float
    avg: float
    median: float
    n: int


@dataclass(frozen=True)
class QueryStats:
    id: int
    name: str
    stats: LatencyStats


def summarize(times_ms: list[float]) -> LatencyStats:
    if not times_ms:
        raise ValueError("summarize() needs at least one timing")
    return LatencyStats(
        min=min(times_ms),
        max=max(times_ms),
        avg=sum(times_ms) / len(times_ms),
        median=float(statistics.median(times_ms)),
        n=len(times_ms),
    )
