"""Métricas Prometheus del servicio de cumplimiento."""

from __future__ import annotations

from prometheus_client import Counter, Gauge

OCCURRENCES = Counter(
    "compliance_occurrences_total",
    "Check-run occurrences handled by the materializer",
    ["outcome"],  # drafted, created, skipped
)

READINGS_RECORDED = Counter(
    "compliance_readings_recorded_total",
    "Temperature readings stored",
    ["kind", "status"],
)

OVERDUE_EXPECTATIONS = Gauge(
    "compliance_overdue_expectations",
    "Overdue monitoring expectations at the last summary",
    ["site_id"],
)


def record_materialize(drafted: int, created: int, skipped: int) -> None:
    OCCURRENCES.labels(outcome="drafted").inc(drafted)
    OCCURRENCES.labels(outcome="created").inc(created)
    OCCURRENCES.labels(outcome="skipped").inc(skipped)
