"""Flujos de la API: conectan repositorios con el core puro.

Cada flujo recibe la sesión, el site explícito y el instante `now`;
ninguno lee el reloj ni estado global.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, replace
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from common.config import Settings
from .classification.thresholds import classify
from .core.domain.models import Reading
from .infrastructure.persistence import (
    get_corrective_action,
    insert_reading,
    list_completed_corrective_actions,
    list_expectations,
    list_open_corrective_actions,
    list_readings_since,
    list_runs,
    mark_corrective_action_logged,
)
from .metrics import OVERDUE_EXPECTATIONS, READINGS_RECORDED
from .monitoring.corrective_actions import (
    CorrectiveAction,
    CorrectiveActionAlreadyCompleted,
    CorrectiveActionNotFound,
    draft_corrective_action,
)
from .monitoring.due_windows import LookbackMode, as_utc, compute_due_windows, readings_since
from .monitoring.run_summary import summarize_runs
from .schemas import (
    ChecksSummaryOut,
    CorrectiveActionOut,
    DueRowOut,
    RunOut,
    TempRecordIn,
    TempRecordResult,
    TempSummaryOut,
    VerdictOut,
)

logger = logging.getLogger(__name__)


def build_temp_summary(
    db: Session,
    *,
    company_id: str,
    site_id: str,
    now: datetime,
    settings: Settings,
) -> TempSummaryOut:
    """Resumen overdue / due-soon de temperaturas del site."""
    mode = LookbackMode(settings.due_window_lookback)
    expectations = list_expectations(db, company_id, site_id)
    since = readings_since(now, expectations, mode)
    readings = list_readings_since(db, company_id, site_id, since, limit=settings.readings_today_limit)

    windows = compute_due_windows(
        expectations,
        readings,
        now,
        due_soon_limit=settings.due_soon_limit,
    )
    OVERDUE_EXPECTATIONS.labels(site_id=site_id).set(len(windows.overdue))
    logger.debug(
        "temp_summary site=%s lookback=%s expectations=%d readings=%d overdue=%d due_soon=%d",
        site_id, mode.value, len(expectations), len(readings),
        len(windows.overdue), len(windows.due_soon),
    )
    return TempSummaryOut(
        site_id=site_id,
        generated_at=as_utc(now),
        lookback=mode.value,
        expectations=len([e for e in expectations if e.active]),
        readings=len(readings),
        overdue=[DueRowOut(**asdict(r)) for r in windows.overdue],
        due_soon=[DueRowOut(**asdict(r)) for r in windows.due_soon],
    )


def submit_reading(
    db: Session,
    payload: TempRecordIn,
    *,
    now: datetime,
    settings: Settings,
) -> TempRecordResult:
    """Clasifica la lectura, decide la acción correctiva y la persiste."""
    recorded_at = as_utc(payload.recorded_at or now)
    food_standard_c = payload.food_standard_c if payload.food_standard_c is not None else settings.food_standard_c
    verdict = classify(payload.kind, payload.value_c, food_standard_c=food_standard_c)

    reading = Reading(
        id="",
        company_id=payload.company_id,
        site_id=payload.site_id,
        kind=payload.kind,
        value_c=payload.value_c,
        recorded_at=recorded_at,
        target_ref=payload.asset_id or payload.food_item_id,
        delivery_item=payload.delivery_item,
        supplier=payload.supplier,
        delivery_result=payload.delivery_result,
    )
    action = draft_corrective_action(
        reading,
        verdict,
        due_minutes=settings.corrective_action_due_minutes,
        notes=payload.action_notes or payload.notes,
    )

    record_id = insert_reading(
        db,
        company_id=payload.company_id,
        site_id=payload.site_id,
        kind=payload.kind,
        value_c=payload.value_c,
        recorded_at=recorded_at,
        action=action,
        asset_id=payload.asset_id,
        food_item_id=payload.food_item_id,
        notes=payload.notes,
        delivery_item=payload.delivery_item,
        supplier=payload.supplier,
        delivery_result=payload.delivery_result.value if payload.delivery_result else None,
    )
    READINGS_RECORDED.labels(kind=payload.kind.value, status=verdict.status.value).inc()
    if action.requires_action:
        logger.info(
            "corrective_action_raised record=%s kind=%s value=%.1f due_at=%s",
            record_id, payload.kind.value, payload.value_c, action.action_due_at,
        )

    return TempRecordResult(
        id=record_id,
        verdict=VerdictOut(**asdict(verdict)),
        requires_action=action.requires_action,
        action_due_at=action.action_due_at,
    )


def _action_out(a: CorrectiveAction) -> CorrectiveActionOut:
    return CorrectiveActionOut(
        id=a.reading.id,
        title=a.title,
        details=a.details,
        due_at=a.due_at,
        recorded_at=a.reading.recorded_at,
        value_c=a.reading.value_c,
        action_logged=a.logged,
        action_logged_at=a.logged_at,
        completed_notes=a.completed_notes,
    )


def build_corrective_actions(
    db: Session,
    *,
    company_id: str,
    site_id: str,
    limit: int = 50,
) -> list[CorrectiveActionOut]:
    return [_action_out(a) for a in list_open_corrective_actions(db, company_id, site_id, limit=limit)]


def build_completed_corrective_actions(
    db: Session,
    *,
    company_id: str,
    site_id: str,
    limit: int = 10,
) -> list[CorrectiveActionOut]:
    return [_action_out(a) for a in list_completed_corrective_actions(db, company_id, site_id, limit=limit)]


def complete_action(
    db: Session,
    record_id: str,
    *,
    completed_notes: Optional[str],
    now: datetime,
) -> CorrectiveActionOut:
    """Registra la acción correctiva de una lectura. No hace commit.

    Lanza CorrectiveActionNotFound si la lectura no exigió acción y
    CorrectiveActionAlreadyCompleted si ya estaba registrada.
    """
    action = get_corrective_action(db, record_id)
    if action is None:
        raise CorrectiveActionNotFound(record_id)
    notes = (completed_notes or "").strip() or None
    if action.logged or not mark_corrective_action_logged(
        db, record_id, logged_at=as_utc(now), completed_notes=notes
    ):
        raise CorrectiveActionAlreadyCompleted(record_id)

    logger.info("corrective_action_completed record=%s kind=%s", record_id, action.reading.kind.value)
    return _action_out(replace(action, logged=True, logged_at=as_utc(now), completed_notes=notes))


def build_checks_summary(
    db: Session,
    *,
    company_id: str,
    site_id: str,
    now: datetime,
) -> ChecksSummaryOut:
    summary = summarize_runs(list_runs(db, company_id, site_id), now)

    def _out(runs):
        return [
            RunOut(
                id=r.id,
                status=r.status,
                due_at=r.due_at,
                completed_at=r.completed_at,
                template_id=r.template_id,
                template_name=r.template_name,
            )
            for r in runs
        ]

    return ChecksSummaryOut(
        site_id=site_id,
        overdue=_out(summary.overdue),
        due_today=_out(summary.due_today),
        completed_today=_out(summary.completed_today),
    )
