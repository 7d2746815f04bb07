"""Literal SQL rendering for engines that receive fully-rendered statements.

All quoting rules live here: NULL, booleans, dates, timestamps, numbers and
strings each have exactly one rendering.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from datetime import date, datetime
from decimal import Decimal
from typing import Any

_PLACEHOLDER = re.compile(r"(?<![:\w]):([A-Za-z_][A-Za-z0-9_]*)")


def sql_string(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def sql_literal(value: Any) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return f"TIMESTAMP '{value.replace(tzinfo=None, microsecond=0).isoformat(sep=' ')}'"
    if isinstance(value, date):
        return f"DATE '{value.isoformat()}'"
    if isinstance(value, (int, Decimal)):
        return str(value)
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            raise ValueError(f"Cannot render non-finite float {value!r}")
        return repr(value)
    if isinstance(value, str):
        return sql_string(value)
    raise TypeError(f"Unsupported literal type: {type(value).__name__}")


def render_sql(sql: str, params: Mapping[str, Any] | None = None) -> str:
    """Replace ``:name`` placeholders with literals. ``::type`` casts are kept."""
    params = params or {}

    def _sub(match: re.Match) -> str:
        name = match.group(1)
        if name not in params:
            raise KeyError(f"Missing SQL parameter: {name}")
        return sql_literal(params[name])

    return _PLACEHOLDER.sub(_sub, sql)


def values_row(values: Iterable[Any]) -> str:
    return "(" + ", ".join(sql_literal(v) for v in values) + ")"


def values_clause(rows: Sequence[Sequence[Any]]) -> str:
    return ", ".join(values_row(r) for r in rows)


def insert_values_sql(table_ref: str, columns_sql: str, rows: Sequence[Sequence[Any]]) -> str:
    if not rows:
        raise ValueError("insert_values_sql needs at least one row")
    return f"INSERT INTO {table_ref} ({columns_sql}) VALUES {values_clause(rows)}"
