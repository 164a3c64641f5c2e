"""Resumen diario de ejecuciones de checklist (ocurrencias)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Iterable

from ..core.domain.models import Occurrence, OccurrenceStatus
from .due_windows import as_utc, start_of_utc_day

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


@dataclass
class RunSummary:
    overdue: list[Occurrence] = field(default_factory=list)
    due_today: list[Occurrence] = field(default_factory=list)
    completed_today: list[Occurrence] = field(default_factory=list)


def summarize_runs(runs: Iterable[Occurrence], now: datetime) -> RunSummary:
    """Separa las ocurrencias en vencidas, pendientes hoy y completadas hoy.

    - Abiertas con due_at antes de hoy → overdue (más antigua primero)
    - Abiertas con due_at hoy → due_today (más próxima primero)
    - Completadas hoy → completed_today (más reciente primero)

    Los límites del día son UTC.
    """
    start = start_of_utc_day(now)
    end = start + timedelta(days=1)
    summary = RunSummary()

    for run in runs:
        if run.status == OccurrenceStatus.COMPLETED:
            if run.completed_at is not None and start <= as_utc(run.completed_at) < end:
                summary.completed_today.append(run)
            continue

        if run.due_at is None:
            continue
        due_at = as_utc(run.due_at)
        if due_at < start:
            summary.overdue.append(run)
        elif due_at < end:
            summary.due_today.append(run)

    summary.overdue.sort(key=lambda r: as_utc(r.due_at))
    summary.due_today.sort(key=lambda r: as_utc(r.due_at))
    summary.completed_today.sort(key=lambda r: as_utc(r.completed_at or _EPOCH), reverse=True)
    return summary
