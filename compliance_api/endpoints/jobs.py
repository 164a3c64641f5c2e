"""Disparo HTTP del job de materialización (alternativa al CLI/cron)."""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from common.db import get_db
from jobs.materialize.runner import materialize_for_day
from ..dependencies import get_now, raise_db_error
from ..metrics import record_materialize
from ..scheduling.recurrence import to_utc_date
from ..schemas import MaterializeIn, MaterializeResultOut

router = APIRouter(tags=["jobs"])
logger = logging.getLogger(__name__)


@router.post("/jobs/materialize", response_model=MaterializeResultOut)
def trigger_materialize(
    payload: Optional[MaterializeIn] = None,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Materializa las ocurrencias del día; re-ejecutarlo no duplica filas."""
    day = payload.day if payload is not None and payload.day else to_utc_date(now)
    try:
        result = materialize_for_day(db, day)
        db.commit()
    except SQLAlchemyError as e:
        raise_db_error(db, e, "/jobs/materialize")

    record_materialize(result.drafted, result.created, result.skipped)
    logger.info(
        "materialize_http day=%s drafted=%d created=%d skipped=%d",
        result.day.isoformat(), result.drafted, result.created, result.skipped,
    )
    return MaterializeResultOut(
        day=result.day,
        drafted=result.drafted,
        created=result.created,
        skipped=result.skipped,
    )
