"""Domain layer - Modelos y claves de correlación."""

from .correlation import CorrelationKeyMapper, DELIVERY_KEY
from .models import (
    ComplianceVerdict,
    DeliveryResult,
    DueRow,
    DueWindows,
    MonitoringExpectation,
    Occurrence,
    OccurrenceDraft,
    OccurrenceStatus,
    Reading,
    ReadingKind,
    RecurrenceKind,
    RecurrenceRule,
    TargetKind,
    VerdictStatus,
)

__all__ = [
    "ComplianceVerdict",
    "CorrelationKeyMapper",
    "DELIVERY_KEY",
    "DeliveryResult",
    "DueRow",
    "DueWindows",
    "MonitoringExpectation",
    "Occurrence",
    "OccurrenceDraft",
    "OccurrenceStatus",
    "Reading",
    "ReadingKind",
    "RecurrenceKind",
    "RecurrenceRule",
    "TargetKind",
    "VerdictStatus",
]
