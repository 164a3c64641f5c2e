"""Monitoring - Ventanas de vencimiento, resumen de checklists y acciones.

Estructura:
- due_windows.py: Agregador overdue / due-soon por expectativa
- run_summary.py: Resumen diario de ocurrencias
- corrective_actions.py: Acciones correctivas por lectura (abiertas y completadas)
"""

from .corrective_actions import (
    CorrectiveAction,
    CorrectiveActionAlreadyCompleted,
    CorrectiveActionDraft,
    CorrectiveActionNotFound,
    corrective_action_details,
    corrective_action_title,
    draft_corrective_action,
)
from .due_windows import (
    DEFAULT_DUE_SOON_LIMIT,
    LookbackMode,
    compute_due_windows,
    expectation_label,
    readings_since,
    start_of_utc_day,
)
from .run_summary import RunSummary, summarize_runs

__all__ = [
    "CorrectiveAction",
    "CorrectiveActionAlreadyCompleted",
    "CorrectiveActionDraft",
    "CorrectiveActionNotFound",
    "DEFAULT_DUE_SOON_LIMIT",
    "LookbackMode",
    "RunSummary",
    "compute_due_windows",
    "corrective_action_details",
    "corrective_action_title",
    "draft_corrective_action",
    "expectation_label",
    "readings_since",
    "start_of_utc_day",
    "summarize_runs",
]
