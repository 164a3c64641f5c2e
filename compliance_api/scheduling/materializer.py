"""Materializador de ocurrencias.

Evalúa todas las reglas activas para "hoy" y genera borradores de
ocurrencia. No deduplica: la unicidad (rule_id, due_at) la garantiza el
INSERT ... ON CONFLICT DO NOTHING del repositorio, así que re-ejecutar el
mismo día no crea filas nuevas.

Fail-soft: una regla mal formada o cuyo template/site ya no existe se
omite con warning; nunca aborta el resto del lote.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import AbstractSet, Iterable, Optional

from ..core.domain.models import OccurrenceDraft, OccurrenceStatus, RecurrenceRule
from .recurrence import DateLike, applies, due_instant, rule_problems, to_utc_date

logger = logging.getLogger(__name__)


@dataclass
class MaterializePlan:
    """Resultado de una pasada del materializador."""

    drafts: list[OccurrenceDraft] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    evaluated: int = 0


def _missing_target(
    rule: RecurrenceRule,
    live_template_ids: Optional[AbstractSet[str]],
    live_site_ids: Optional[AbstractSet[str]],
) -> Optional[str]:
    if live_template_ids is not None and rule.template_id not in live_template_ids:
        return f"template {rule.template_id} no longer exists"
    if live_site_ids is not None and rule.site_id not in live_site_ids:
        return f"site {rule.site_id} no longer exists"
    return None


def plan_today(
    rules: Iterable[RecurrenceRule],
    today: DateLike,
    *,
    live_template_ids: Optional[AbstractSet[str]] = None,
    live_site_ids: Optional[AbstractSet[str]] = None,
) -> MaterializePlan:
    """Evalúa las reglas y devuelve borradores más las reglas omitidas.

    Args:
        rules: Reglas candidatas (las inactivas se filtran aquí)
        today: Fecha (o datetime) de la pasada, normalizada a UTC
        live_template_ids: Templates existentes; None = no verificar
        live_site_ids: Sites existentes; None = no verificar
    """
    day = to_utc_date(today)
    plan = MaterializePlan()

    for rule in rules:
        if not rule.active:
            continue
        plan.evaluated += 1

        problems = rule_problems(rule)
        if problems:
            logger.warning(
                "materialize_skip_malformed rule=%s problems=%s",
                rule.id,
                "; ".join(problems),
            )
            plan.skipped.append(rule.id)
            continue

        missing = _missing_target(rule, live_template_ids, live_site_ids)
        if missing:
            logger.warning("materialize_skip_orphan rule=%s reason=%s", rule.id, missing)
            plan.skipped.append(rule.id)
            continue

        if not applies(rule, day):
            continue

        plan.drafts.append(
            OccurrenceDraft(
                rule_id=rule.id,
                company_id=rule.company_id,
                site_id=rule.site_id,
                template_id=rule.template_id,
                due_at=due_instant(rule, day),
                status=OccurrenceStatus.OPEN,
            )
        )

    logger.debug(
        "materialize_plan day=%s evaluated=%d drafts=%d skipped=%d",
        day.isoformat(),
        plan.evaluated,
        len(plan.drafts),
        len(plan.skipped),
    )
    return plan


def materialize_today(
    rules: Iterable[RecurrenceRule],
    today: DateLike,
    *,
    live_template_ids: Optional[AbstractSet[str]] = None,
    live_site_ids: Optional[AbstractSet[str]] = None,
) -> list[OccurrenceDraft]:
    """Borradores de ocurrencia para las reglas activas que disparan hoy."""
    return plan_today(
        rules,
        today,
        live_template_ids=live_template_ids,
        live_site_ids=live_site_ids,
    ).drafts
