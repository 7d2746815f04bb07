"""Synthetic bonus_registry rows.

``FIELD_RULES`` is the single source of value distributions: the
client-side generator below and the server-side SQL expressions in
``pg_expressions`` are both derived from it.
"""

from __future__ import annotations

import random
import uuid
from collections.abc import Mapping
from dataclasses import asdict, dataclass, fields, replace
from datetime import date, datetime, timedelta
from typing import Any, Optional

from registry_bench.services.columns import (
    BOOL,
    COLUMN_NAMES,
    COLUMNS_BY_NAME,
    DATE,
    INT,
    REQUIRED_COLUMNS,
    STR,
    TIMESTAMP,
)

REGISTRAR_TYPE_IDS = (
    "bsBonusReceiveForTrip",
    "bsRecoveryRequestDoc",
    "bsTripForBonusDoc",
    "bsBonusDocument",
    "bsCustomTransaction",
    "bsCharityDocument",
    "bsExpirationDocument",
    "bsReturnDocument",
    "bsSurveyDoc",
    "bsCompensationDoc",
    "bsSouvenirRequest",
    "bsAdvanceDoc",
    "bsReturnAdvanceDoc",
)
BONUS_TYPE_IDS = ("premial", "qualification")
ACTION_SOURCE_IDS = ("operator", "auto")
CARRIER_IDS = ("fpk", "tver", "rzd")
OPERATION_DOC_TYPE_IDS = (
    "operation_transfer",
    "operation_status_assignment",
    "operation_manual_bonus",
)

EPOCH_START = datetime(2020, 1, 1)
FUTURE_HORIZON = timedelta(days=730)


@dataclass(frozen=True)
class FieldRule:
    """How one column is generated.

    kind: uuid | short_uuid | choice | int | rand_str | past_ts | future_ts |
    past_date | future_date | bool | now
    """

    kind: str
    null_probability: float = 0.0
    low: int = 0
    high: int = 0
    choices: tuple[str, ...] = ()


FIELD_RULES: dict[str, FieldRule] = {
    "id": FieldRule("uuid"),
    "date": FieldRule("past_ts", 0.2),
    "registrar_type_id": FieldRule("choice", 0.2, choices=REGISTRAR_TYPE_IDS),
    "registrar_id": FieldRule("uuid", 0.2),
    "row": FieldRule("int", 0.2, 1, 10),
    "manager_id": FieldRule("int", 0.3, 1, 1000),
    "bs_profile_id": FieldRule("uuid"),
    "accounted_for_bs_profile_id": FieldRule("uuid"),
    "first_name": FieldRule("short_uuid", 0.4),
    "first_name_latin": FieldRule("short_uuid", 0.4),
    "last_name": FieldRule("short_uuid", 0.4),
    "last_name_latin": FieldRule("short_uuid", 0.4),
    "departure_id": FieldRule("int", 0.5, 1, 100),
    "arrival_id": FieldRule("int", 0.5, 1, 100),
    "departure_date": FieldRule("past_date", 0.5),
    "currency_entry_id": FieldRule("int", 0.5, 1, 10),
    "bonus_type_id": FieldRule("choice", choices=BONUS_TYPE_IDS),
    "action_source_id": FieldRule("choice", choices=ACTION_SOURCE_IDS),
    "bs_bonus_ticket_id": FieldRule("uuid", 0.8),
    "validity_time": FieldRule("int", 0.6, 30, 365),
    "date_of_expire": FieldRule("future_date", 0.6),
    "car_type_id": FieldRule("rand_str", 0.8, 5, 10),
    "express_carrier_id": FieldRule("int", 0.7, 1, 50),
    "carrier_id": FieldRule("choice", 0.6, choices=CARRIER_IDS),
    "bs_partner_id": FieldRule("int", 0.7, 1, 20),
    "bs_train_number_id": FieldRule("rand_str", 0.8, 5, 15),
    "bs_tourism_train_id": FieldRule("rand_str", 0.8, 5, 15),
    "accounted_in_calculation": FieldRule("bool", 0.7),
    "cancelled": FieldRule("bool", 0.7),
    "bs_quota_id": FieldRule("int", 0.8, 1, 100),
    "doc_to_track_type_id": FieldRule("choice", choices=REGISTRAR_TYPE_IDS),
    "doc_to_track_id": FieldRule("uuid"),
    "doc_to_track_date": FieldRule("past_date", 0.5),
    "active_date": FieldRule("past_date", 0.7),
    "trip_for_another_person": FieldRule("bool", 0.7),
    "ticket_number": FieldRule("rand_str", 0.8, 10, 20),
    "currency_amount": FieldRule("int", 0.8, 100, 10000),
    "amount": FieldRule("int", 0.0, -1000, 10000),
    "bs_partner_bonus_type_id": FieldRule("rand_str", 0.8, 5, 15),
    "express_service_class_id": FieldRule("int", 0.8, 1, 5),
    "date_to_cancelled": FieldRule("future_ts", 0.9),
    "prolongable": FieldRule("bool", 0.7),
    "active_by_trips": FieldRule("bool", 0.7),
    "is_empty": FieldRule("bool", 0.7),
    "amount_calculation": FieldRule("uuid", 0.7),
    "distance": FieldRule("int", 0.7, 100, 5000),
    "addition_amount": FieldRule("int", 0.8, 10, 500),
    "operation_doc_type_id": FieldRule("choice", 0.3, choices=OPERATION_DOC_TYPE_IDS),
    "is_merged": FieldRule("bool", 0.7),
    "merged_date": FieldRule("past_date", 0.9),
    "created_at": FieldRule("past_ts"),
    "ingested_at": FieldRule("now"),
}


@dataclass(kw_only=True)
class BonusRow:
    """One bonus_registry record. Field order matches the table columns."""

    id: str
    date: Optional[datetime] = None
    registrar_type_id: Optional[str] = None
    registrar_id: Optional[str] = None
    row: Optional[int] = None
    manager_id: Optional[int] = None
    bs_profile_id: str
    accounted_for_bs_profile_id: str
    first_name: Optional[str] = None
    first_name_latin: Optional[str] = None
    last_name: Optional[str] = None
    last_name_latin: Optional[str] = None
    departure_id: Optional[int] = None
    arrival_id: Optional[int] = None
    departure_date: Optional[date] = None
    currency_entry_id: Optional[int] = None
    bonus_type_id: str
    action_source_id: str
    bs_bonus_ticket_id: Optional[str] = None
    validity_time: Optional[int] = None
    date_of_expire: Optional[date] = None
    car_type_id: Optional[str] = None
    express_carrier_id: Optional[int] = None
    carrier_id: Optional[str] = None
    bs_partner_id: Optional[int] = None
    bs_train_number_id: Optional[str] = None
    bs_tourism_train_id: Optional[str] = None
    accounted_in_calculation: Optional[bool] = None
    cancelled: Optional[bool] = None
    bs_quota_id: Optional[int] = None
    doc_to_track_type_id: str
    doc_to_track_id: str
    doc_to_track_date: Optional[date] = None
    active_date: Optional[date] = None
    trip_for_another_person: Optional[bool] = None
    ticket_number: Optional[str] = None
    currency_amount: Optional[int] = None
    amount: int
    bs_partner_bonus_type_id: Optional[str] = None
    express_service_class_id: Optional[int] = None
    date_to_cancelled: Optional[datetime] = None
    prolongable: Optional[bool] = None
    active_by_trips: Optional[bool] = None
    is_empty: Optional[bool] = None
    amount_calculation: Optional[str] = None
    distance: Optional[int] = None
    addition_amount: Optional[int] = None
    operation_doc_type_id: Optional[str] = None
    is_merged: Optional[bool] = None
    merged_date: Optional[date] = None
    created_at: Optional[datetime] = None
    ingested_at: Optional[datetime] = None

    def to_params(self) -> dict[str, Any]:
        return asdict(self)

    def values(self) -> list[Any]:
        return [getattr(self, name) for name in COLUMN_NAMES]


def _random_uuid(rng: random.Random) -> str:
    return str(uuid.UUID(int=rng.getrandbits(128), version=4))


def _random_str(rng: random.Random, low: int, high: int) -> str:
    length = rng.randint(low, high)
    raw = _random_uuid(rng).replace("-", "")
    return (raw * (length // len(raw) + 1))[:length]


def _random_timestamp(rng: random.Random, start: datetime, end: datetime) -> datetime:
    span = max(int((end - start).total_seconds()), 1)
    return start + timedelta(seconds=rng.randrange(span))


def _generate_value(rule: FieldRule, rng: random.Random, now: datetime) -> Any:
    kind = rule.kind
    if kind == "uuid":
        return _random_uuid(rng)
    if kind == "short_uuid":
        return _random_uuid(rng)[:20]
    if kind == "choice":
        return rng.choice(rule.choices)
    if kind == "int":
        return rng.randint(rule.low, rule.high)
    if kind == "rand_str":
        return _random_str(rng, rule.low, rule.high)
    if kind == "past_ts":
        return _random_timestamp(rng, EPOCH_START, now)
    if kind == "future_ts":
        return _random_timestamp(rng, now, now + FUTURE_HORIZON)
    if kind == "past_date":
        return _random_timestamp(rng, EPOCH_START, now).date()
    if kind == "future_date":
        return _random_timestamp(rng, now, now + FUTURE_HORIZON).date()
    if kind == "bool":
        return rng.random() < 0.5
    if kind == "now":
        return now
    raise ValueError(f"Unknown field rule kind: {kind}")


def generate_row(rng: Optional[random.Random] = None, now: Optional[datetime] = None) -> BonusRow:
    """Build one fully-populated synthetic row. No I/O."""
    rng = rng or random.Random()
    now = (now or datetime.now()).replace(microsecond=0)
    values: dict[str, Any] = {}
    for name in COLUMN_NAMES:
        rule = FIELD_RULES[name]
        if rule.null_probability > 0 and rng.random() < rule.null_probability:
            values[name] = None
        else:
            values[name] = _generate_value(rule, rng, now)
    return BonusRow(**values)


def _coerce_date(name: str, value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            pass
    raise ValueError(f"Field {name!r} expects a date (YYYY-MM-DD), got {value!r}")


def _coerce_timestamp(name: str, value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        raw = value.strip().replace("Z", "+00:00")
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            parsed = None
        if parsed is not None:
            # Columns are TIMESTAMP WITHOUT TIME ZONE.
            return parsed.replace(tzinfo=None)
    raise ValueError(f"Field {name!r} expects a timestamp, got {value!r}")


def _coerce_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Field {name!r} expects an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise ValueError(f"Field {name!r} expects an integer, got {value!r}")


def _coerce_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ValueError(f"Field {name!r} expects a boolean, got {value!r}")


def coerce_field(name: str, value: Any) -> Any:
    """Coerce one incoming value to the column's Python type."""
    column = COLUMNS_BY_NAME[name]
    if value is None:
        if column.required:
            raise ValueError(f"Field {name!r} is required and cannot be null")
        return None
    if column.kind == DATE:
        return _coerce_date(name, value)
    if column.kind == TIMESTAMP:
        return _coerce_timestamp(name, value)
    if column.kind == INT:
        return _coerce_int(name, value)
    if column.kind == BOOL:
        return _coerce_bool(name, value)
    if column.kind == STR:
        if isinstance(value, (dict, list)):
            raise ValueError(f"Field {name!r} expects a string, got {value!r}")
        return str(value)
    raise ValueError(f"Unsupported column kind for {name!r}")


def overlay_row(base: BonusRow, partial: Mapping[str, Any]) -> tuple[BonusRow, list[str]]:
    """Apply known columns from ``partial`` over ``base``.

    Returns the merged row and the sorted list of ignored (unknown) keys.
    Raises ValueError when a known field cannot be coerced.
    """
    known = {f.name for f in fields(BonusRow)}
    updates: dict[str, Any] = {}
    ignored: list[str] = []
    for key, value in partial.items():
        if key not in known:
            ignored.append(str(key))
            continue
        updates[key] = coerce_field(key, value)
    return replace(base, **updates), sorted(ignored)


def missing_required(row: BonusRow) -> list[str]:
    return sorted(name for name in REQUIRED_COLUMNS if getattr(row, name) is None)
