"""Endpoints de temperaturas: evaluación, registro, resumen y acciones correctivas."""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from common.config import Settings
from common.db import get_db
from ..classification.thresholds import classify
from ..dependencies import get_app_settings, get_now, raise_db_error
from ..flows import (
    build_completed_corrective_actions,
    build_corrective_actions,
    build_temp_summary,
    complete_action,
    submit_reading,
)
from ..monitoring.corrective_actions import CorrectiveActionAlreadyCompleted, CorrectiveActionNotFound
from ..schemas import (
    CorrectiveActionCompleteIn,
    CorrectiveActionOut,
    TempEvaluateIn,
    TempRecordIn,
    TempRecordResult,
    TempSummaryOut,
    VerdictOut,
)

router = APIRouter(tags=["temps"])


@router.post("/temps/evaluate", response_model=VerdictOut)
def evaluate_temp(
    payload: TempEvaluateIn,
    settings: Settings = Depends(get_app_settings),
):
    """Clasifica un valor sin persistirlo (vista previa del formulario)."""
    standard = payload.food_standard_c if payload.food_standard_c is not None else settings.food_standard_c
    verdict = classify(payload.kind, payload.value_c, food_standard_c=standard)
    return VerdictOut(
        status=verdict.status,
        requires_action=verdict.requires_action,
        message=verdict.message,
        standard=verdict.standard,
    )


@router.post("/temps/records", response_model=TempRecordResult, status_code=201)
def create_temp_record(
    payload: TempRecordIn,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
    now: datetime = Depends(get_now),
):
    """Registra una lectura y abre acción correctiva si el veredicto lo exige."""
    try:
        result = submit_reading(db, payload, now=now, settings=settings)
        db.commit()
        return result
    except SQLAlchemyError as e:
        raise_db_error(db, e, "/temps/records")


@router.get("/sites/{site_id}/temps/summary", response_model=TempSummaryOut)
def get_temp_summary(
    site_id: str,
    company_id: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
    now: datetime = Depends(get_now),
):
    try:
        return build_temp_summary(db, company_id=company_id, site_id=site_id, now=now, settings=settings)
    except SQLAlchemyError as e:
        raise_db_error(db, e, "/sites/{site_id}/temps/summary")


@router.get("/sites/{site_id}/temps/actions", response_model=List[CorrectiveActionOut])
def get_open_corrective_actions(
    site_id: str,
    company_id: str = Query(..., min_length=1),
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
):
    try:
        return build_corrective_actions(db, company_id=company_id, site_id=site_id, limit=limit)
    except SQLAlchemyError as e:
        raise_db_error(db, e, "/sites/{site_id}/temps/actions")


@router.get("/sites/{site_id}/temps/actions/completed", response_model=List[CorrectiveActionOut])
def get_completed_corrective_actions(
    site_id: str,
    company_id: str = Query(..., min_length=1),
    limit: int = Query(10, ge=1, le=500),
    db: Session = Depends(get_db),
):
    try:
        return build_completed_corrective_actions(db, company_id=company_id, site_id=site_id, limit=limit)
    except SQLAlchemyError as e:
        raise_db_error(db, e, "/sites/{site_id}/temps/actions/completed")


@router.post("/temps/actions/{record_id}/complete", response_model=CorrectiveActionOut)
def complete_corrective_action(
    record_id: str,
    payload: Optional[CorrectiveActionCompleteIn] = None,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Marca la acción correctiva como registrada (404 si no hay acción, 409 si ya estaba)."""
    try:
        result = complete_action(
            db,
            record_id,
            completed_notes=payload.completed_notes if payload is not None else None,
            now=now,
        )
        db.commit()
        return result
    except CorrectiveActionNotFound:
        raise HTTPException(status_code=404, detail="corrective action not found")
    except CorrectiveActionAlreadyCompleted:
        db.rollback()
        raise HTTPException(status_code=409, detail="corrective action already completed")
    except SQLAlchemyError as e:
        raise_db_error(db, e, "/temps/actions/{record_id}/complete")
