from __future__ import annotations

from enum import Enum

TABLE_PREFIX = "bonus_registry"
PARTITION_COLUMN = "accounted_for_bs_profile_id"
PARTITION_COUNT = 64


class TableVariant(str, Enum):
    """Physical layout of one bonus_registry table."""

    PLAIN = "plain"
    PART = "part"
    IDX = "idx"
    IDX_PART = "idx_part"

    @property
    def table_name(self) -> str:
        return f"{TABLE_PREFIX}_{self.value}"

    @property
    def partitioned(self) -> bool:
        return self in (TableVariant.PART, TableVariant.IDX_PART)

    @property
    def indexed(self) -> bool:
        return self in (TableVariant.IDX, TableVariant.IDX_PART)

    @property
    def index_name(self) -> str | None:
        if not self.indexed:
            return None
        return f"idx_{self.table_name}_accounted"

    def partition_name(self, remainder: int) -> str:
        return f"{self.table_name}_{remainder}"


TABLE_VARIANTS: tuple[TableVariant, ...] = tuple(TableVariant)


def parse_variant(value: str | TableVariant) -> TableVariant:
    """Resolve a CLI/env/API value to a variant; raises ValueError if unknown."""
    if isinstance(value, TableVariant):
        return value
    try:
        return TableVariant((value or "").strip())
    except ValueError:
        allowed = "|".join(v.value for v in TABLE_VARIANTS)
        raise ValueError(f"Unknown table variant {value!r} (expected {allowed})")


def quote_ident(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def qualified_name(schema: str, variant: TableVariant, catalog: str | None = None) -> str:
    parts = [schema, variant.table_name]
    if catalog:
        parts.insert(0, catalog)
    return ".".join(quote_ident(p) for p in parts)
