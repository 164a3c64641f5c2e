"""Dependencias FastAPI compartidas por los endpoints."""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from functools import lru_cache
from typing import NoReturn

from fastapi import HTTPException
from sqlalchemy.orm import Session

from common.config import Settings, get_settings


@lru_cache(maxsize=1)
def get_app_settings() -> Settings:
    return get_settings()


def get_now() -> datetime:
    """Reloj del borde HTTP; el core siempre recibe `now` inyectado."""
    return datetime.now(timezone.utc)


def raise_db_error(db: Session, e: Exception, route: str) -> NoReturn:
    """Rollback + log + 500. El detalle solo se expone con COMPLIANCE_DEBUG_ERRORS=1."""
    logging.getLogger(__name__).exception(
        "DB error in %s err=%s",
        route,
        type(e).__name__,
    )
    db.rollback()
    detail = f"DB error: {type(e).__name__}"
    if os.getenv("COMPLIANCE_DEBUG_ERRORS", "").strip() == "1":
        detail = f"{detail}: {e}"
    raise HTTPException(status_code=500, detail=detail)
