"""Catalog of the ten production-shaped read queries.

SQL templates use ``{table}`` for the table reference and ``:name`` bind
placeholders. ``discovery_sql`` finds real parameter values (its columns
map onto ``discovery_columns``); ``repair_sql`` makes one arbitrary row
satisfy the predicate and returns the same columns.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

AS_OF = date(2020, 1, 1)
PAGE_SIZE = 20

# One arbitrary existing row; the pair is unique for every variant.
_ANY_ROW = (
    "(id, accounted_for_bs_profile_id) IN "
    "(SELECT id, accounted_for_bs_profile_id FROM {table} LIMIT 1)"
)


@dataclass(frozen=True)
class QueryDefinition:
    id: int
    name: str
    sql: str
    discovery_sql: Optional[str] = None
    discovery_columns: tuple[str, ...] = ()
    constants: dict[str, Any] = field(default_factory=dict)
    repair_sql: Optional[str] = None

    def render(self, table_ref: str) -> str:
        return self.sql.format(table=table_ref)

    def render_discovery(self, table_ref: str) -> Optional[str]:
        if self.discovery_sql is None:
            return None
        return self.discovery_sql.format(table=table_ref)

    def render_repair(self, table_ref: str) -> Optional[str]:
        if self.repair_sql is None:
            return None
        return self.repair_sql.format(table=table_ref)

    def bind(self, row: tuple) -> dict[str, Any]:
        params = dict(self.constants)
        params.update(zip(self.discovery_columns, row))
        return params


QUERY_CATALOG: tuple[QueryDefinition, ...] = (
    QueryDefinition(
        id=1,
        name="Charges by document",
        sql=(
            "SELECT amount FROM {table} WHERE doc_to_track_id = :doc_id "
            "AND doc_to_track_type_id = :doc_type "
            "AND accounted_for_bs_profile_id = :profile_id "
            "AND bonus_type_id = :bonus_type AND amount < 0 AND cancelled = false "
            "AND (date_of_expire IS NULL OR date_of_expire >= :as_of)"
        ),
        discovery_sql=(
            "SELECT doc_to_track_id, doc_to_track_type_id, "
            "accounted_for_bs_profile_id, bonus_type_id FROM {table} "
            "WHERE amount < 0 AND cancelled = false "
            "AND (date_of_expire IS NULL OR date_of_expire >= :as_of) LIMIT :limit"
        ),
        discovery_columns=("doc_id", "doc_type", "profile_id", "bonus_type"),
        constants={"as_of": AS_OF},
        repair_sql=(
            "UPDATE {table} SET amount = -100, cancelled = false, "
            "date_of_expire = NULL WHERE " + _ANY_ROW + " "
            "RETURNING doc_to_track_id, doc_to_track_type_id, "
            "accounted_for_bs_profile_id, bonus_type_id"
        ),
    ),
    QueryDefinition(
        id=2,
        name="Pagination by profile",
        sql=(
            "SELECT * FROM {table} WHERE accounted_for_bs_profile_id = :profile_id "
            'ORDER BY "date" DESC OFFSET :offset LIMIT :page_size'
        ),
        discovery_sql="SELECT accounted_for_bs_profile_id FROM {table} LIMIT :limit",
        discovery_columns=("profile_id",),
        constants={"offset": 0, "page_size": PAGE_SIZE},
    ),
    QueryDefinition(
        id=3,
        name="Profile entries, not cancelled",
        sql=(
            "SELECT * FROM {table} WHERE accounted_for_bs_profile_id = :profile_id "
            "AND cancelled = false"
        ),
        discovery_sql=(
            "SELECT accounted_for_bs_profile_id FROM {table} "
            "WHERE cancelled = false LIMIT :limit"
        ),
        discovery_columns=("profile_id",),
        repair_sql=(
            "UPDATE {table} SET cancelled = false WHERE " + _ANY_ROW + " "
            "RETURNING accounted_for_bs_profile_id"
        ),
    ),
    QueryDefinition(
        id=4,
        name="Entries by bs_profile_id",
        sql="SELECT * FROM {table} WHERE bs_profile_id = :bs_profile_id AND cancelled = false",
        discovery_sql="SELECT bs_profile_id FROM {table} WHERE cancelled = false LIMIT :limit",
        discovery_columns=("bs_profile_id",),
        repair_sql=(
            "UPDATE {table} SET cancelled = false WHERE " + _ANY_ROW + " "
            "RETURNING bs_profile_id"
        ),
    ),
    QueryDefinition(
        id=5,
        name="Profile + bonus type",
        sql=(
            "SELECT * FROM {table} WHERE accounted_for_bs_profile_id = :profile_id "
            "AND cancelled = false AND bonus_type_id = :bonus_type"
        ),
        discovery_sql=(
            "SELECT accounted_for_bs_profile_id, bonus_type_id FROM {table} "
            "WHERE cancelled = false LIMIT :limit"
        ),
        discovery_columns=("profile_id", "bonus_type"),
        repair_sql=(
            "UPDATE {table} SET cancelled = false WHERE " + _ANY_ROW + " "
            "RETURNING accounted_for_bs_profile_id, bonus_type_id"
        ),
    ),
    QueryDefinition(
        id=6,
        name="Valid on date",
        sql=(
            "SELECT * FROM {table} WHERE accounted_for_bs_profile_id = :profile_id "
            "AND date_of_expire >= :as_of"
        ),
        discovery_sql=(
            "SELECT accounted_for_bs_profile_id, date_of_expire FROM {table} "
            "WHERE date_of_expire IS NOT NULL LIMIT :limit"
        ),
        discovery_columns=("profile_id", "as_of"),
        repair_sql=(
            "UPDATE {table} SET date_of_expire = CURRENT_DATE + 30 WHERE "
            + _ANY_ROW
            + " RETURNING accounted_for_bs_profile_id, date_of_expire"
        ),
    ),
    QueryDefinition(
        id=7,
        name="GROUP BY bs_quota_id",
        sql=(
            "SELECT bs_quota_id, COUNT(bs_quota_id) FROM {table} "
            "WHERE registrar_type_id = :registrar_type AND cancelled = false "
            'AND bs_quota_id IS NOT NULL AND "row" = 1 GROUP BY bs_quota_id'
        ),
        discovery_sql=(
            "SELECT registrar_type_id FROM {table} WHERE registrar_type_id IS NOT NULL "
            'AND cancelled = false AND bs_quota_id IS NOT NULL AND "row" = 1 '
            "LIMIT :limit"
        ),
        discovery_columns=("registrar_type",),
        repair_sql=(
            "UPDATE {table} SET registrar_type_id = COALESCE(registrar_type_id, "
            "'bsBonusDocument'), cancelled = false, "
            'bs_quota_id = COALESCE(bs_quota_id, 1), "row" = 1 WHERE '
            + _ANY_ROW
            + " RETURNING registrar_type_id"
        ),
    ),
    QueryDefinition(
        id=8,
        name="By registrar document",
        sql=(
            "SELECT * FROM {table} WHERE registrar_type_id = :registrar_type "
            "AND registrar_id = :registrar_id"
        ),
        discovery_sql=(
            "SELECT registrar_type_id, registrar_id FROM {table} "
            "WHERE registrar_type_id IS NOT NULL AND registrar_id IS NOT NULL "
            "LIMIT :limit"
        ),
        discovery_columns=("registrar_type", "registrar_id"),
        repair_sql=(
            "UPDATE {table} SET registrar_type_id = COALESCE(registrar_type_id, "
            "'bsBonusDocument'), registrar_id = COALESCE(registrar_id, "
            "gen_random_uuid()::text) WHERE "
            + _ANY_ROW
            + " RETURNING registrar_type_id, registrar_id"
        ),
    ),
    QueryDefinition(
        id=9,
        name="Global pagination",
        sql='SELECT * FROM {table} ORDER BY "date" DESC OFFSET :offset LIMIT :page_size',
        constants={"offset": 0, "page_size": PAGE_SIZE},
    ),
    QueryDefinition(
        id=10,
        name="By id",
        sql="SELECT * FROM {table} WHERE id = :row_id LIMIT 1",
        discovery_sql="SELECT id FROM {table} LIMIT :limit",
        discovery_columns=("row_id",),
    ),
)
