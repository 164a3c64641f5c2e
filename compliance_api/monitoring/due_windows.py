"""Agregador de ventanas de vencimiento.

Para cada expectativa activa calcula la última lectura, el próximo
vencimiento y la clasifica en overdue / due-soon.

Reglas:
- Sin lectura → overdue siempre (last_recorded_at=None, due_at=None)
- due_at = última lectura + intervalo
- due_at < now → overdue con minutos de retraso (≥ 0)
- due_at ≥ now → due-soon (orden ascendente, máximo DEFAULT_DUE_SOON_LIMIT)

Las lecturas se asumen ordenadas de más reciente a más antigua; la primera
vista por clave gana y el agregador no reordena.
"""

from __future__ import annotations

from datetime import datetime, time, timedelta, timezone
from enum import Enum
from typing import Iterable, Optional, Sequence

from ..core.domain.correlation import CorrelationKeyMapper
from ..core.domain.models import DueRow, DueWindows, MonitoringExpectation, Reading, TargetKind

DEFAULT_DUE_SOON_LIMIT = 20


class LookbackMode(str, Enum):
    """Ventana de lecturas consideradas por el agregador.

    CALENDAR_DAY: solo lecturas desde medianoche UTC (comportamiento legado;
    una lectura de anoche que aún cubre el intervalo no cuenta).
    INTERVAL: lecturas desde now - intervalo máximo de las expectativas.
    """

    CALENDAR_DAY = "calendar_day"
    INTERVAL = "interval"


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def start_of_utc_day(now: datetime) -> datetime:
    now = as_utc(now)
    return datetime.combine(now.date(), time.min, tzinfo=timezone.utc)


def readings_since(
    now: datetime,
    expectations: Sequence[MonitoringExpectation],
    mode: LookbackMode = LookbackMode.CALENDAR_DAY,
) -> datetime:
    """Inicio de la ventana de lecturas a solicitar al repositorio."""
    if mode == LookbackMode.INTERVAL:
        intervals = [e.interval_minutes for e in expectations if e.active]
        if intervals:
            return as_utc(now) - timedelta(minutes=max(intervals))
    return start_of_utc_day(now)


def expectation_label(expectation: MonitoringExpectation) -> str:
    """Etiqueta para UI, con placeholder si el objetivo fue borrado."""
    if expectation.target_kind == TargetKind.ASSET:
        asset_type = (expectation.asset_type or "asset").upper()
        return f"{asset_type} • {expectation.target_name or 'Asset'}"
    if expectation.target_kind == TargetKind.FOOD:
        return f"FOOD • {expectation.target_name or 'Food item'}"
    return "DELIVERY • Delivery temp"


def latest_by_key(readings: Iterable[Reading]) -> dict[str, Reading]:
    """Primera lectura vista por clave de correlación."""
    last: dict[str, Reading] = {}
    for reading in readings:
        key = CorrelationKeyMapper.for_reading(reading)
        if key not in last:
            last[key] = reading
    return last


def build_due_row(
    expectation: MonitoringExpectation,
    last: Optional[Reading],
    now: datetime,
) -> DueRow:
    key = CorrelationKeyMapper.for_expectation(expectation)
    label = expectation_label(expectation)

    if last is None:
        return DueRow(
            key=key,
            label=label,
            kind=expectation.target_kind,
            interval_minutes=expectation.interval_minutes,
            expectation_id=expectation.id,
        )

    last_at = as_utc(last.recorded_at)
    due_at = last_at + timedelta(minutes=expectation.interval_minutes)
    diff_minutes = int((as_utc(now) - due_at).total_seconds() // 60)

    return DueRow(
        key=key,
        label=label,
        kind=expectation.target_kind,
        interval_minutes=expectation.interval_minutes,
        expectation_id=expectation.id,
        last_recorded_at=last_at,
        due_at=due_at,
        minutes_overdue=max(diff_minutes, 0),
    )


def is_overdue(row: DueRow, now: datetime) -> bool:
    if row.last_recorded_at is None or row.due_at is None:
        return True
    return row.due_at < as_utc(now)


def compute_due_windows(
    expectations: Iterable[MonitoringExpectation],
    todays_readings: Iterable[Reading],
    now: datetime,
    *,
    due_soon_limit: int = DEFAULT_DUE_SOON_LIMIT,
) -> DueWindows:
    """Clasifica las expectativas activas en overdue / due-soon.

    Args:
        expectations: Expectativas del site (las inactivas se ignoran)
        todays_readings: Lecturas de la ventana, más recientes primero
        now: Instante de referencia (inyectado)
        due_soon_limit: Máximo de filas due-soon devueltas

    Returns:
        DueWindows con overdue (orden de entrada) y due_soon (ascendente)
    """
    last = latest_by_key(todays_readings)

    windows = DueWindows()
    for expectation in expectations:
        if not expectation.active:
            continue
        key = CorrelationKeyMapper.for_expectation(expectation)
        row = build_due_row(expectation, last.get(key), now)
        if is_overdue(row, now):
            windows.overdue.append(row)
        else:
            windows.due_soon.append(row)

    windows.due_soon.sort(key=lambda r: r.due_at)
    windows.due_soon = windows.due_soon[: max(due_soon_limit, 0)]
    return windows
