"""Column contract of the bonus_registry table.

One ordered list drives the DDL, the client-side row generator, the
server-side INSERT expressions and the literal VALUES renderer.
"""

from __future__ import annotations

from dataclasses import dataclass

# value kinds
STR = "str"
INT = "int"
BOOL = "bool"
DATE = "date"
TIMESTAMP = "timestamp"

_SQL_TYPES = {
    STR: "VARCHAR(255)",
    INT: "INTEGER",
    BOOL: "BOOLEAN",
    DATE: "DATE",
    TIMESTAMP: "TIMESTAMP",
}


@dataclass(frozen=True)
class Column:
    name: str
    kind: str
    required: bool = False

    @property
    def sql_type(self) -> str:
        return _SQL_TYPES[self.kind]

    @property
    def quoted(self) -> str:
        # "date" and "row" are reserved words in both PostgreSQL and Trino
        return f'"{self.name}"'

    def ddl(self) -> str:
        suffix = " NOT NULL" if self.required else ""
        return f"{self.quoted} {self.sql_type}{suffix}"


BONUS_REGISTRY_COLUMNS: tuple[Column, ...] = (
    Column("id", STR, required=True),
    Column("date", TIMESTAMP),
    Column("registrar_type_id", STR),
    Column("registrar_id", STR),
    Column("row", INT),
    Column("manager_id", INT),
    Column("bs_profile_id", STR, required=True),
    Column("accounted_for_bs_profile_id", STR, required=True),
    Column("first_name", STR),
    Column("first_name_latin", STR),
    Column("last_name", STR),
    Column("last_name_latin", STR),
    Column("departure_id", INT),
    Column("arrival_id", INT),
    Column("departure_date", DATE),
    Column("currency_entry_id", INT),
    Column("bonus_type_id", STR, required=True),
    Column("action_source_id", STR, required=True),
    Column("bs_bonus_ticket_id", STR),
    Column("validity_time", INT),
    Column("date_of_expire", DATE),
    Column("car_type_id", STR),
    Column("express_carrier_id", INT),
    Column("carrier_id", STR),
    Column("bs_partner_id", INT),
    Column("bs_train_number_id", STR),
    Column("bs_tourism_train_id", STR),
    Column("accounted_in_calculation", BOOL),
    Column("cancelled", BOOL),
    Column("bs_quota_id", INT),
    Column("doc_to_track_type_id", STR, required=True),
    Column("doc_to_track_id", STR, required=True),
    Column("doc_to_track_date", DATE),
    Column("active_date", DATE),
    Column("trip_for_another_person", BOOL),
    Column("ticket_number", STR),
    Column("currency_amount", INT),
    Column("amount", INT, required=True),
    Column("bs_partner_bonus_type_id", STR),
    Column("express_service_class_id", INT),
    Column("date_to_cancelled", TIMESTAMP),
    Column("prolongable", BOOL),
    Column("active_by_trips", BOOL),
    Column("is_empty", BOOL),
    Column("amount_calculation", STR),
    Column("distance", INT),
    Column("addition_amount", INT),
    Column("operation_doc_type_id", STR),
    Column("is_merged", BOOL),
    Column("merged_date", DATE),
    Column("created_at", TIMESTAMP),
    Column("ingested_at", TIMESTAMP),
)

COLUMN_NAMES: tuple[str, ...] = tuple(c.name for c in BONUS_REGISTRY_COLUMNS)
COLUMNS_BY_NAME: dict[str, Column] = {c.name: c for c in BONUS_REGISTRY_COLUMNS}
REQUIRED_COLUMNS: frozenset[str] = frozenset(
    c.name for c in BONUS_REGISTRY_COLUMNS if c.required
)


def column_list_sql() -> str:
    return ", ".join(c.quoted for c in BONUS_REGISTRY_COLUMNS)


def columns_ddl() -> str:
    return ",\n  ".join(c.ddl() for c in BONUS_REGISTRY_COLUMNS)
