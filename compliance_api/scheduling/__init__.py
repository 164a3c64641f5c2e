"""Scheduling - Recurrencias de checklists y materialización de ocurrencias.

Estructura:
- recurrence.py: Evaluador puro (applies / due_instant)
- materializer.py: Orquestador diario de borradores de ocurrencia
"""

from .materializer import MaterializePlan, materialize_today, plan_today
from .recurrence import (
    applies,
    due_instant,
    is_well_formed,
    parse_due_time,
    rule_problems,
    to_utc_date,
)

__all__ = [
    "MaterializePlan",
    "applies",
    "due_instant",
    "is_well_formed",
    "materialize_today",
    "parse_due_time",
    "plan_today",
    "rule_problems",
    "to_utc_date",
]
