"""Evaluador de recurrencias.

Decide si una regla "dispara" en una fecha UTC y calcula su vencimiento.

Simplificación conocida: el vencimiento es `today` a `due_time` en UTC,
ignorando `rule.timezone` (sin transiciones DST).
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Union

from ..core.domain.models import RecurrenceKind, RecurrenceRule

DateLike = Union[date, datetime]

MIN_WEEKDAY, MAX_WEEKDAY = 1, 7
MIN_MONTH_DAY, MAX_MONTH_DAY = 1, 31


def to_utc_date(today: DateLike) -> date:
    """Normaliza a fecha de calendario UTC.

    Datetimes naive se interpretan como UTC.
    """
    if isinstance(today, datetime):
        if today.tzinfo is not None:
            today = today.astimezone(timezone.utc)
        return today.date()
    return today


def rule_problems(rule: RecurrenceRule) -> list[str]:
    """Lista los problemas de forma de la regla (vacía si es válida)."""
    problems: list[str] = []

    if rule.recurrence == RecurrenceKind.WEEKLY:
        if not rule.weekdays:
            problems.append("weekly rule without weekdays")
        bad = [d for d in rule.weekdays if not MIN_WEEKDAY <= d <= MAX_WEEKDAY]
        if bad:
            problems.append(f"weekdays out of range 1..7: {bad}")
        if rule.month_day is not None:
            problems.append("weekly rule with month_day set")

    elif rule.recurrence == RecurrenceKind.MONTHLY:
        if rule.month_day is None:
            problems.append("monthly rule without month_day")
        elif not MIN_MONTH_DAY <= rule.month_day <= MAX_MONTH_DAY:
            problems.append(f"month_day out of range 1..31: {rule.month_day}")
        if rule.weekdays:
            problems.append("monthly rule with weekdays set")

    if rule.valid_until is not None and rule.valid_until < rule.valid_from:
        problems.append(f"valid_until {rule.valid_until} before valid_from {rule.valid_from}")

    return problems


def is_well_formed(rule: RecurrenceRule) -> bool:
    return not rule_problems(rule)


def in_validity_window(rule: RecurrenceRule, day: date) -> bool:
    if day < rule.valid_from:
        return False
    if rule.valid_until is not None and day > rule.valid_until:
        return False
    return True


def applies(rule: RecurrenceRule, today: DateLike) -> bool:
    """Indica si la regla dispara en `today`.

    Orden de evaluación:
    1. Normalizar a fecha UTC
    2. Regla mal formada → nunca aplica
    3. Fuera de [valid_from, valid_until] → no aplica
    4. daily siempre; weekly por día ISO (lunes=1); monthly por día del mes
       (sin rollover: un día 31 no dispara en meses de 30 días)
    """
    day = to_utc_date(today)

    if not is_well_formed(rule):
        return False
    if not in_validity_window(rule, day):
        return False

    if rule.recurrence == RecurrenceKind.DAILY:
        return True
    if rule.recurrence == RecurrenceKind.WEEKLY:
        return day.isoweekday() in rule.weekdays
    if rule.recurrence == RecurrenceKind.MONTHLY:
        return day.day == rule.month_day
    return False


def due_instant(rule: RecurrenceRule, today: DateLike) -> datetime:
    """`today` a la hora `rule.due_time`, en UTC."""
    day = to_utc_date(today)
    due_time = rule.due_time
    return datetime.combine(
        day,
        time(due_time.hour, due_time.minute),
        tzinfo=timezone.utc,
    )


def parse_due_time(value: Union[str, time]) -> time:
    """Parsea "HH:MM" o "HH:MM:SS" (segundos ignorados en el cálculo)."""
    if isinstance(value, time):
        return value
    parts = str(value).strip().split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"invalid due_time: {value!r}")
    hour, minute = int(parts[0]), int(parts[1])
    second = int(parts[2]) if len(parts) == 3 else 0
    return time(hour, minute, second)
