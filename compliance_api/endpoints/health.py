"""Liveness, readiness and Prometheus scrape endpoints."""

import logging
import time

from fastapi import APIRouter, HTTPException, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy import text

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/ready")
def ready():
    """SELECT 1 contra la BD de cumplimiento; 503 sin detalles si falla."""
    t0 = time.perf_counter()
    try:
        from common.db import get_engine
        with get_engine().connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning("ready_check_failed err=%s", type(e).__name__)
        raise HTTPException(status_code=503, detail="not ready")
    return {"status": "ready", "latency_ms": round((time.perf_counter() - t0) * 1000, 2)}


@router.get("/metrics")
def metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
