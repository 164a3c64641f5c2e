"""Mapeo de filas de BD a los modelos tipados del dominio.

Los valores pueden llegar como tipos nativos (Postgres: date, uuid, int[])
o como texto (SQLite); aquí se normalizan antes de entrar al core.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Mapping, Optional

from ...core.domain.models import (
    DEFAULT_RULE_TIMEZONE,
    DeliveryResult,
    MonitoringExpectation,
    Occurrence,
    OccurrenceStatus,
    Reading,
    ReadingKind,
    RecurrenceKind,
    RecurrenceRule,
    TargetKind,
)
from ...scheduling.recurrence import parse_due_time


def _str_or_none(value: Any) -> Optional[str]:
    return str(value) if value is not None else None


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "t", "true", "yes")
    return bool(value)


def parse_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Timestamps naive se interpretan como UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        ts = value
    else:
        ts = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def parse_weekdays(value: Any) -> tuple[int, ...]:
    """Acepta int[] de Postgres, listas o texto "{1,3,5}" / "1,3,5"."""
    if value is None:
        return ()
    if isinstance(value, str):
        raw = value.strip().strip("{}[]")
        return tuple(int(p) for p in raw.split(",") if p.strip())
    return tuple(int(v) for v in value)


def rule_from_row(row: Mapping[str, Any]) -> RecurrenceRule:
    """check_schedules → RecurrenceRule. Lanza ValueError si la fila no parsea."""
    valid_from = parse_date(row["start_date"])
    if valid_from is None:
        raise ValueError("start_date is required")
    month_day = row.get("monthday")
    return RecurrenceRule(
        id=str(row["id"]),
        company_id=str(row["company_id"]),
        site_id=str(row["site_id"]),
        template_id=str(row["template_id"]),
        active=_as_bool(row.get("active", True)),
        timezone=str(row.get("timezone") or DEFAULT_RULE_TIMEZONE),
        due_time=parse_due_time(row["due_time"]),
        recurrence=RecurrenceKind(str(row["recurrence"]).lower()),
        weekdays=parse_weekdays(row.get("weekdays")),
        month_day=int(month_day) if month_day is not None else None,
        valid_from=valid_from,
        valid_until=parse_date(row.get("end_date")),
    )


def occurrence_from_row(row: Mapping[str, Any]) -> Occurrence:
    return Occurrence(
        id=str(row["id"]),
        company_id=str(row["company_id"]),
        site_id=str(row["site_id"]),
        status=OccurrenceStatus(str(row.get("status") or "open").lower()),
        due_at=parse_timestamp(row.get("due_at")),
        rule_id=_str_or_none(row.get("schedule_id")),
        template_id=_str_or_none(row.get("template_id")),
        template_name=_str_or_none(row.get("template_name")),
        completed_at=parse_timestamp(row.get("completed_at")),
        created_at=parse_timestamp(row.get("created_at")),
    )


def expectation_from_row(row: Mapping[str, Any]) -> MonitoringExpectation:
    kind = TargetKind(str(row["kind"]).lower())
    if kind == TargetKind.ASSET:
        target_ref = _str_or_none(row.get("asset_id"))
        target_name = _str_or_none(row.get("asset_name"))
    elif kind == TargetKind.FOOD:
        target_ref = _str_or_none(row.get("food_item_id"))
        target_name = _str_or_none(row.get("food_name"))
    else:
        target_ref, target_name = None, None

    return MonitoringExpectation(
        id=str(row["id"]),
        company_id=str(row["company_id"]),
        site_id=str(row["site_id"]),
        target_kind=kind,
        target_ref=target_ref,
        interval_minutes=int(row["every_minutes"]),
        active=_as_bool(row.get("active", True)),
        target_name=target_name,
        asset_type=_str_or_none(row.get("asset_type")),
    )


def reading_from_row(row: Mapping[str, Any]) -> Reading:
    kind = ReadingKind(str(row["kind"]).lower())
    if kind in (ReadingKind.FRIDGE, ReadingKind.FREEZER):
        target_ref = _str_or_none(row.get("asset_id"))
        target_name = _str_or_none(row.get("asset_name"))
    elif kind == ReadingKind.FOOD:
        target_ref = _str_or_none(row.get("food_item_id"))
        target_name = _str_or_none(row.get("food_name"))
    else:
        target_ref, target_name = None, None

    delivery_result = row.get("delivery_result")
    return Reading(
        id=str(row["id"]),
        company_id=str(row["company_id"]),
        site_id=str(row["site_id"]),
        kind=kind,
        target_ref=target_ref,
        target_name=target_name,
        value_c=float(row["value_c"]),
        recorded_at=parse_timestamp(row["recorded_at"]),
        delivery_item=_str_or_none(row.get("delivery_item")),
        supplier=_str_or_none(row.get("supplier")),
        delivery_result=DeliveryResult(str(delivery_result).lower()) if delivery_result else None,
    )
