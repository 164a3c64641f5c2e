"""Materialize job orchestrator: turns today's recurrence rules into check runs."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy.engine import Connection, Engine
from sqlalchemy.orm import Session

from common.db import get_engine
from compliance_api.infrastructure.persistence.schedules import (
    insert_occurrences,
    list_active_rules,
    list_live_site_ids,
    list_live_template_ids,
)
from compliance_api.metrics import record_materialize
from compliance_api.scheduling.materializer import plan_today

from .config import RunnerConfig
from .retry import run_with_retry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MaterializeResult:
    """`drafted` puede superar a `created`: los duplicados se ignoran en BD."""

    day: date
    drafted: int
    created: int
    skipped: int


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def materialize_for_day(db: Session | Connection, day: date) -> MaterializeResult:
    """One materialization pass inside the caller's transaction.

    No registra métricas: el llamador las registra tras el commit.
    """
    rules = list_active_rules(db)
    plan = plan_today(
        rules,
        day,
        live_template_ids=list_live_template_ids(db),
        live_site_ids=list_live_site_ids(db),
    )
    created = insert_occurrences(db, plan.drafts)
    return MaterializeResult(
        day=day,
        drafted=len(plan.drafts),
        created=created,
        skipped=len(plan.skipped),
    )


def run_once(cfg: RunnerConfig, engine: Optional[Engine] = None) -> MaterializeResult:
    """Materialize cycle: one transaction, retried on deadlock."""
    engine = engine or get_engine()
    day = cfg.day or utc_today()

    def _cycle() -> MaterializeResult:
        with engine.begin() as conn:
            return materialize_for_day(conn, day)

    t0 = time.monotonic()
    result = run_with_retry(_cycle, max_retries=cfg.max_retries)
    cycle_ms = (time.monotonic() - t0) * 1000
    record_materialize(result.drafted, result.created, result.skipped)
    logger.info(
        "materialize_cycle ms=%.1f day=%s drafted=%d created=%d skipped=%d",
        cycle_ms, result.day.isoformat(), result.drafted, result.created, result.skipped,
    )
    return result

