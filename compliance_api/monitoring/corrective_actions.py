"""Acciones correctivas derivadas de lecturas fuera de rango."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from ..core.domain.models import ComplianceVerdict, Reading, ReadingKind

DEFAULT_ACTION_DUE_MINUTES = 60

OPEN_PREFIX = "Action required"
COMPLETED_PREFIX = "Completed"


@dataclass(frozen=True)
class CorrectiveActionDraft:
    """Campos de acción que se guardan junto a la lectura."""

    requires_action: bool
    action_notes: Optional[str] = None
    action_due_at: Optional[datetime] = None


def corrective_action_title(reading: Reading, prefix: str = OPEN_PREFIX) -> str:
    if reading.kind == ReadingKind.FOOD:
        return f"{prefix}: FOOD • {reading.target_name or 'Food'}"
    if reading.kind in (ReadingKind.FRIDGE, ReadingKind.FREEZER):
        return f"{prefix}: {reading.kind.value.upper()} • {reading.target_name or 'Asset'}"
    return f"{prefix}: DELIVERY • {reading.delivery_item or 'Item'}"


def corrective_action_details(reading: Reading, notes: Optional[str] = None) -> Optional[str]:
    """Detalle de la acción: notas explícitas, o proveedor/resultado en entregas."""
    if notes:
        return notes
    if reading.kind != ReadingKind.DELIVERY:
        return None
    parts = []
    if reading.supplier:
        parts.append(f"Supplier: {reading.supplier}.")
    if reading.delivery_result is not None:
        parts.append(f"Result: {reading.delivery_result.value.upper()}.")
    return " ".join(parts) or None


def draft_corrective_action(
    reading: Reading,
    verdict: ComplianceVerdict,
    *,
    due_minutes: int = DEFAULT_ACTION_DUE_MINUTES,
    notes: Optional[str] = None,
) -> CorrectiveActionDraft:
    """Decide si la lectura abre una acción correctiva y con qué vencimiento."""
    if not verdict.requires_action:
        return CorrectiveActionDraft(requires_action=False)
    return CorrectiveActionDraft(
        requires_action=True,
        action_notes=corrective_action_details(reading, notes) or verdict.message,
        action_due_at=reading.recorded_at + timedelta(minutes=due_minutes),
    )


@dataclass(frozen=True)
class CorrectiveAction:
    """Acción leída de temp_records; `logged` la marca como completada."""

    reading: Reading
    notes: Optional[str] = None
    due_at: Optional[datetime] = None
    logged: bool = False
    logged_at: Optional[datetime] = None
    completed_notes: Optional[str] = None

    @property
    def completed(self) -> bool:
        return self.logged

    @property
    def title(self) -> str:
        prefix = COMPLETED_PREFIX if self.completed else OPEN_PREFIX
        return corrective_action_title(self.reading, prefix)

    @property
    def details(self) -> Optional[str]:
        return corrective_action_details(self.reading, self.notes)


class CorrectiveActionNotFound(LookupError):
    """La lectura no existe o no exigió acción correctiva."""


class CorrectiveActionAlreadyCompleted(RuntimeError):
    pass
