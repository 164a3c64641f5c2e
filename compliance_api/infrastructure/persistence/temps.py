"""Repositorio de temperaturas: expectativas, lecturas y acciones correctivas."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection
from sqlalchemy.orm import Session

from ...core.domain.models import MonitoringExpectation, Reading, ReadingKind
from ...monitoring.corrective_actions import CorrectiveAction, CorrectiveActionDraft
from .mappers import expectation_from_row, parse_timestamp, reading_from_row

logger = logging.getLogger(__name__)

_READING_COLUMNS = """
    r.id, r.company_id, r.site_id, r.kind, r.asset_id, r.food_item_id, r.value_c,
    r.recorded_at, r.delivery_item, r.supplier, r.delivery_result,
    r.notes, r.requires_action, r.action_due_at, r.action_notes, r.action_logged,
    r.action_logged_at, r.action_completed_notes,
    a.name AS asset_name, f.name AS food_name
"""


def list_expectations(
    db: Session | Connection,
    company_id: str,
    site_id: str,
) -> list[MonitoringExpectation]:
    """Expectativas del site con nombre del objetivo (None si fue borrado)."""
    rows = db.execute(
        text(
            """
            SELECT e.id, e.company_id, e.site_id, e.kind, e.asset_id, e.food_item_id,
                   e.every_minutes, e.active,
                   a.name AS asset_name, a.type AS asset_type, f.name AS food_name
            FROM temp_expectations e
            LEFT JOIN temp_assets a ON a.id = e.asset_id
            LEFT JOIN temp_food_items f ON f.id = e.food_item_id
            WHERE e.company_id = :company_id
              AND e.site_id = :site_id
            ORDER BY e.created_at DESC
            """
        ),
        {"company_id": company_id, "site_id": site_id},
    ).mappings().fetchall()

    expectations: list[MonitoringExpectation] = []
    for row in rows:
        try:
            expectations.append(expectation_from_row(row))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("expectation_row_invalid id=%s err=%s", row.get("id"), e)
    return expectations


def list_readings_since(
    db: Session | Connection,
    company_id: str,
    site_id: str,
    since: datetime,
    limit: int = 500,
) -> list[Reading]:
    """Lecturas desde `since`, más recientes primero."""
    rows = db.execute(
        text(
            f"""
            SELECT {_READING_COLUMNS}
            FROM temp_records r
            LEFT JOIN temp_assets a ON a.id = r.asset_id
            LEFT JOIN temp_food_items f ON f.id = r.food_item_id
            WHERE r.company_id = :company_id
              AND r.site_id = :site_id
              AND r.recorded_at >= :since
            ORDER BY r.recorded_at DESC
            LIMIT :limit
            """
        ),
        {"company_id": company_id, "site_id": site_id, "since": since, "limit": limit},
    ).mappings().fetchall()

    readings: list[Reading] = []
    for row in rows:
        try:
            readings.append(reading_from_row(row))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("reading_row_invalid id=%s err=%s", row.get("id"), e)
    return readings


def insert_reading(
    db: Session | Connection,
    *,
    company_id: str,
    site_id: str,
    kind: ReadingKind,
    value_c: float,
    recorded_at: datetime,
    action: CorrectiveActionDraft,
    asset_id: Optional[str] = None,
    food_item_id: Optional[str] = None,
    notes: Optional[str] = None,
    delivery_item: Optional[str] = None,
    supplier: Optional[str] = None,
    delivery_result: Optional[str] = None,
) -> str:
    """Inserta la lectura con sus campos de acción. Devuelve el id creado."""
    row = db.execute(
        text(
            """
            INSERT INTO temp_records (
              company_id, site_id, kind, asset_id, food_item_id, value_c, notes,
              recorded_at, delivery_item, supplier, delivery_result,
              requires_action, action_notes, action_due_at, action_logged
            )
            VALUES (
              :company_id, :site_id, :kind, :asset_id, :food_item_id, :value_c, :notes,
              :recorded_at, :delivery_item, :supplier, :delivery_result,
              :requires_action, :action_notes, :action_due_at, FALSE
            )
            RETURNING id
            """
        ),
        {
            "company_id": company_id,
            "site_id": site_id,
            "kind": kind.value,
            "asset_id": asset_id,
            "food_item_id": food_item_id,
            "value_c": float(value_c),
            "notes": notes,
            "recorded_at": recorded_at,
            "delivery_item": delivery_item,
            "supplier": supplier,
            "delivery_result": delivery_result,
            "requires_action": action.requires_action,
            "action_notes": action.action_notes,
            "action_due_at": action.action_due_at,
        },
    ).fetchone()
    if not row:
        raise RuntimeError("failed to create temp_records row")
    return str(row[0])


def _action_from_row(row) -> CorrectiveAction:
    return CorrectiveAction(
        reading=reading_from_row(row),
        notes=row.get("action_notes") or row.get("notes"),
        due_at=parse_timestamp(row.get("action_due_at")),
        logged=bool(row.get("action_logged")),
        logged_at=parse_timestamp(row.get("action_logged_at")),
        completed_notes=row.get("action_completed_notes"),
    )


def _list_actions(
    db: Session | Connection,
    company_id: str,
    site_id: str,
    *,
    logged: bool,
    order_by: str,
    limit: int,
) -> list[CorrectiveAction]:
    rows = db.execute(
        text(
            f"""
            SELECT {_READING_COLUMNS}
            FROM temp_records r
            LEFT JOIN temp_assets a ON a.id = r.asset_id
            LEFT JOIN temp_food_items f ON f.id = r.food_item_id
            WHERE r.company_id = :company_id
              AND r.site_id = :site_id
              AND r.requires_action = TRUE
              AND r.action_logged = :logged
            ORDER BY {order_by}
            LIMIT :limit
            """
        ),
        {"company_id": company_id, "site_id": site_id, "logged": logged, "limit": limit},
    ).mappings().fetchall()

    actions: list[CorrectiveAction] = []
    for row in rows:
        try:
            actions.append(_action_from_row(row))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("action_row_invalid id=%s err=%s", row.get("id"), e)
    return actions


def list_open_corrective_actions(
    db: Session | Connection,
    company_id: str,
    site_id: str,
    limit: int = 50,
) -> list[CorrectiveAction]:
    """Lecturas con acción pendiente, vencimiento más próximo primero."""
    return _list_actions(
        db, company_id, site_id,
        logged=False,
        order_by="r.action_due_at ASC, r.recorded_at DESC",
        limit=limit,
    )


def list_completed_corrective_actions(
    db: Session | Connection,
    company_id: str,
    site_id: str,
    limit: int = 10,
) -> list[CorrectiveAction]:
    """Acciones ya registradas, la más reciente primero."""
    return _list_actions(
        db, company_id, site_id,
        logged=True,
        order_by="r.action_logged_at DESC, r.recorded_at DESC",
        limit=limit,
    )


def get_corrective_action(db: Session | Connection, record_id: str) -> Optional[CorrectiveAction]:
    """None si la lectura no existe o nunca exigió acción."""
    row = db.execute(
        text(
            f"""
            SELECT {_READING_COLUMNS}
            FROM temp_records r
            LEFT JOIN temp_assets a ON a.id = r.asset_id
            LEFT JOIN temp_food_items f ON f.id = r.food_item_id
            WHERE r.id = :id
              AND r.requires_action = TRUE
            """
        ),
        {"id": record_id},
    ).mappings().fetchone()
    return _action_from_row(row) if row else None


def mark_corrective_action_logged(
    db: Session | Connection,
    record_id: str,
    *,
    logged_at: datetime,
    completed_notes: Optional[str] = None,
) -> bool:
    """Marca la acción como completada. False si ya estaba registrada."""
    result = db.execute(
        text(
            """
            UPDATE temp_records
            SET action_logged = TRUE,
                action_logged_at = :logged_at,
                action_completed_notes = :completed_notes
            WHERE id = :id
              AND requires_action = TRUE
              AND action_logged = FALSE
            """
        ),
        {"id": record_id, "logged_at": logged_at, "completed_notes": completed_notes},
    )
    return (result.rowcount or 0) > 0
