"""Persistencia SQL (Postgres) de reglas, ocurrencias y temperaturas.

Las filas se mapean a modelos tipados en mappers.py antes de salir de aquí.
"""

from .schema_setup import ensure_schema
from .schedules import (
    insert_occurrences,
    list_active_rules,
    list_live_site_ids,
    list_live_template_ids,
    list_runs,
)
from .temps import (
    get_corrective_action,
    insert_reading,
    list_completed_corrective_actions,
    list_expectations,
    list_open_corrective_actions,
    list_readings_since,
    mark_corrective_action_logged,
)

__all__ = [
    "ensure_schema",
    "get_corrective_action",
    "insert_occurrences",
    "insert_reading",
    "list_active_rules",
    "list_completed_corrective_actions",
    "list_expectations",
    "list_live_site_ids",
    "list_live_template_ids",
    "list_open_corrective_actions",
    "list_readings_since",
    "list_runs",
    "mark_corrective_action_logged",
]
