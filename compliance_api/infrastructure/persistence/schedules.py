"""Repositorio de reglas de recurrencia y ocurrencias (check_schedules / check_entries).

Idempotencia: check_entries tiene UNIQUE (schedule_id, due_at) y la
inserción usa ON CONFLICT DO NOTHING; re-ejecutar el materializador el
mismo día no crea filas nuevas.
"""

from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy import text
from sqlalchemy.engine import Connection
from sqlalchemy.orm import Session

from ...core.domain.models import Occurrence, OccurrenceDraft, RecurrenceRule
from .mappers import occurrence_from_row, rule_from_row

logger = logging.getLogger(__name__)


def list_active_rules(db: Session | Connection) -> list[RecurrenceRule]:
    """Reglas activas. Filas que no parsean se omiten con warning."""
    rows = db.execute(
        text(
            """
            SELECT id, company_id, site_id, template_id, active, timezone, due_time,
                   recurrence, weekdays, monthday, start_date, end_date
            FROM check_schedules
            WHERE active = TRUE
            ORDER BY id ASC
            """
        )
    ).mappings().fetchall()

    rules: list[RecurrenceRule] = []
    for row in rows:
        try:
            rules.append(rule_from_row(row))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("schedule_row_invalid id=%s err=%s", row.get("id"), e)
    return rules


def list_live_template_ids(db: Session | Connection) -> set[str]:
    """Templates que aún existen, referenciados por reglas activas."""
    rows = db.execute(
        text(
            """
            SELECT DISTINCT t.id
            FROM check_schedules s
            JOIN check_templates t ON t.id = s.template_id
            WHERE s.active = TRUE
            """
        )
    ).fetchall()
    return {str(r[0]) for r in rows}


def list_live_site_ids(db: Session | Connection) -> set[str]:
    rows = db.execute(
        text(
            """
            SELECT DISTINCT st.id
            FROM check_schedules s
            JOIN sites st ON st.id = s.site_id
            WHERE s.active = TRUE
            """
        )
    ).fetchall()
    return {str(r[0]) for r in rows}


def insert_occurrences(db: Session | Connection, drafts: Iterable[OccurrenceDraft]) -> int:
    """Inserta borradores ignorando conflictos en (schedule_id, due_at).

    Returns:
        Filas realmente creadas (puede ser menor que los borradores)
    """
    created = 0
    for draft in drafts:
        result = db.execute(
            text(
                """
                INSERT INTO check_entries (
                  company_id, site_id, template_id, schedule_id, status, due_at
                )
                VALUES (
                  :company_id, :site_id, :template_id, :schedule_id, :status, :due_at
                )
                ON CONFLICT (schedule_id, due_at) DO NOTHING
                """
            ),
            draft.to_insert_params(),
        )
        inserted = max(result.rowcount or 0, 0)
        if not inserted:
            logger.debug("occurrence_exists rule=%s due_at=%s", *draft.natural_key)
        created += inserted
    return created


def list_runs(
    db: Session | Connection,
    company_id: str,
    site_id: str,
    limit: int = 200,
) -> list[Occurrence]:
    """Ejecuciones recientes del site, más nuevas primero."""
    rows = db.execute(
        text(
            """
            SELECT e.id, e.company_id, e.site_id, e.template_id, e.schedule_id,
                   e.status, e.due_at, e.completed_at, e.created_at,
                   t.name AS template_name
            FROM check_entries e
            LEFT JOIN check_templates t ON t.id = e.template_id
            WHERE e.company_id = :company_id
              AND e.site_id = :site_id
            ORDER BY e.created_at DESC
            LIMIT :limit
            """
        ),
        {"company_id": company_id, "site_id": site_id, "limit": limit},
    ).mappings().fetchall()

    runs: list[Occurrence] = []
    for row in rows:
        try:
            runs.append(occurrence_from_row(row))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("run_row_invalid id=%s err=%s", row.get("id"), e)
    return runs
