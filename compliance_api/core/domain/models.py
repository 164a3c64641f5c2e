"""Modelos de dominio del motor de cumplimiento.

Dataclasses tipadas que representan reglas de recurrencia, ocurrencias
materializadas, expectativas de monitoreo y lecturas de temperatura.
Las filas de BD se mapean a estos tipos en el borde (repositorios);
el core nunca recibe dicts sueltos.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import Optional, Tuple


class RecurrenceKind(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class OccurrenceStatus(str, Enum):
    OPEN = "open"
    COMPLETED = "completed"


class TargetKind(str, Enum):
    """Tipo de objetivo de una expectativa de monitoreo."""

    ASSET = "asset"
    FOOD = "food"
    DELIVERY = "delivery"


class ReadingKind(str, Enum):
    """Tipo de lectura de temperatura."""

    FRIDGE = "fridge"
    FREEZER = "freezer"
    FOOD = "food"
    DELIVERY = "delivery"


class VerdictStatus(str, Enum):
    OK = "ok"
    WARN = "warn"
    FAIL = "fail"


class DeliveryResult(str, Enum):
    OK = "ok"
    REJECT = "reject"
    QUARANTINE = "quarantine"


DEFAULT_RULE_TIMEZONE = "Europe/London"


@dataclass(frozen=True)
class RecurrenceRule:
    """Regla declarativa de recurrencia de un checklist.

    `timezone` es solo informativo: la hora de vencimiento se calcula
    siempre en UTC.
    """

    id: str
    company_id: str
    site_id: str
    template_id: str
    due_time: time
    recurrence: RecurrenceKind
    valid_from: date
    valid_until: Optional[date] = None
    weekdays: Tuple[int, ...] = ()
    month_day: Optional[int] = None
    active: bool = True
    timezone: str = DEFAULT_RULE_TIMEZONE


@dataclass(frozen=True)
class OccurrenceDraft:
    """Ocurrencia lista para insertar (insert-or-ignore por rule_id + due_at)."""

    rule_id: str
    company_id: str
    site_id: str
    template_id: str
    due_at: datetime
    status: OccurrenceStatus = OccurrenceStatus.OPEN

    @property
    def natural_key(self) -> Tuple[str, datetime]:
        return (self.rule_id, self.due_at)

    def to_insert_params(self) -> dict:
        """Convierte a parámetros para el INSERT."""
        return {
            "schedule_id": self.rule_id,
            "company_id": self.company_id,
            "site_id": self.site_id,
            "template_id": self.template_id,
            "due_at": self.due_at,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class Occurrence:
    """Ocurrencia persistida (check run)."""

    id: str
    company_id: str
    site_id: str
    status: OccurrenceStatus
    due_at: Optional[datetime] = None
    rule_id: Optional[str] = None
    template_id: Optional[str] = None
    template_name: Optional[str] = None
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class MonitoringExpectation:
    """Obligación recurrente de monitoreo ("revisar esta nevera cada 4 horas").

    `target_name` y `asset_type` vienen del join con el objetivo; son None
    cuando el objetivo fue borrado.
    """

    id: str
    company_id: str
    site_id: str
    target_kind: TargetKind
    interval_minutes: int
    target_ref: Optional[str] = None
    active: bool = True
    target_name: Optional[str] = None
    asset_type: Optional[str] = None


@dataclass(frozen=True)
class Reading:
    """Lectura de temperatura - inmutable una vez creada."""

    id: str
    company_id: str
    site_id: str
    kind: ReadingKind
    value_c: float
    recorded_at: datetime
    target_ref: Optional[str] = None
    target_name: Optional[str] = None

    # Campos de entrega
    delivery_item: Optional[str] = None
    supplier: Optional[str] = None
    delivery_result: Optional[DeliveryResult] = None


@dataclass(frozen=True)
class ComplianceVerdict:
    """Veredicto derivado de una lectura. Nunca se persiste como estado."""

    status: VerdictStatus
    requires_action: bool
    message: str
    standard: str = ""


@dataclass(frozen=True)
class DueRow:
    """Fila de vencimiento calculada para una expectativa."""

    key: str
    label: str
    kind: TargetKind
    interval_minutes: int
    expectation_id: str
    last_recorded_at: Optional[datetime] = None
    due_at: Optional[datetime] = None
    minutes_overdue: Optional[int] = None


@dataclass
class DueWindows:
    overdue: list[DueRow] = field(default_factory=list)
    due_soon: list[DueRow] = field(default_factory=list)
