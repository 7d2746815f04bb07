"""PostgreSQL expressions that generate bonus_registry rows server-side.

Used by ``INSERT ... SELECT ... FROM generate_series(1, :n)`` so a chunk of
any size is produced inside the database without client round-trips or
bind-parameter limits.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from registry_bench.services.columns import COLUMN_NAMES, column_list_sql
from registry_bench.services.row_generator import (
    EPOCH_START,
    FIELD_RULES,
    FUTURE_HORIZON,
    FieldRule,
)
from registry_bench.services.sql_literals import sql_string


def nullable(expr: str, probability: float) -> str:
    if probability <= 0:
        return expr
    if probability >= 1:
        return "NULL"
    return f"CASE WHEN random() < {probability} THEN NULL ELSE ({expr}) END"


def array_choice(choices: tuple[str, ...]) -> str:
    items = ", ".join(sql_string(c) for c in choices)
    return f"(ARRAY[{items}])[floor(random() * {len(choices)} + 1)::int]"


def random_int(low: int, high: int) -> str:
    return f"(floor(random() * {high - low + 1} + {low})::int)"


def _random_epoch(start: int, span: int) -> str:
    return f"to_timestamp({start} + floor(random() * {max(span, 1)})::bigint)::timestamp"


def rule_expression(rule: FieldRule, now: datetime) -> str:
    start = int(EPOCH_START.timestamp())
    now_ts = int(now.timestamp())
    horizon = int(FUTURE_HORIZON.total_seconds())
    kind = rule.kind
    if kind == "uuid":
        return "gen_random_uuid()::text"
    if kind == "short_uuid":
        return "substr(gen_random_uuid()::text, 1, 20)"
    if kind == "choice":
        return array_choice(rule.choices)
    if kind == "int":
        return random_int(rule.low, rule.high)
    if kind == "rand_str":
        return (
            "substr(replace(gen_random_uuid()::text, '-', ''), 1, "
            f"{random_int(rule.low, rule.high)})"
        )
    if kind == "past_ts":
        return _random_epoch(start, now_ts - start)
    if kind == "future_ts":
        return _random_epoch(now_ts, horizon)
    if kind == "past_date":
        return f"({_random_epoch(start, now_ts - start)})::date"
    if kind == "future_date":
        return f"({_random_epoch(now_ts, horizon)})::date"
    if kind == "bool":
        return "(random() < 0.5)"
    if kind == "now":
        return "LOCALTIMESTAMP"
    raise ValueError(f"Unknown field rule kind: {kind}")


def pg_insert_expressions(now: Optional[datetime] = None) -> list[str]:
    """One expression per column, in column order."""
    now = now or datetime.now()
    return [
        nullable(rule_expression(FIELD_RULES[name], now), FIELD_RULES[name].null_probability)
        for name in COLUMN_NAMES
    ]


def insert_select_sql(table_ref: str, now: Optional[datetime] = None) -> str:
    exprs = ",\n  ".join(pg_insert_expressions(now))
    return (
        f"INSERT INTO {table_ref} ({column_list_sql()})\n"
        f"SELECT\n  {exprs}\nFROM generate_series(1, :n) AS n"
    )
