"""Endpoint para el resumen diario de checklists."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from common.db import get_db
from ..dependencies import get_now, raise_db_error
from ..flows import build_checks_summary
from ..schemas import ChecksSummaryOut

router = APIRouter(tags=["checks"])


@router.get("/sites/{site_id}/checks/summary", response_model=ChecksSummaryOut)
def get_checks_summary(
    site_id: str,
    company_id: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Ejecuciones vencidas, pendientes hoy y completadas hoy."""
    try:
        return build_checks_summary(db, company_id=company_id, site_id=site_id, now=now)
    except SQLAlchemyError as e:
        raise_db_error(db, e, "/sites/{site_id}/checks/summary")
