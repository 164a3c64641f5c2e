"""CorrelationKeyMapper - Claves que relacionan lecturas con expectativas.

Formatos:
- "asset:{id}"  → neveras y congeladores
- "food:{id}"   → alimentos
- "delivery"    → entregas (sin objetivo concreto)
"""

from __future__ import annotations

from typing import Optional

from .models import MonitoringExpectation, Reading, ReadingKind, TargetKind

DELIVERY_KEY = "delivery"


class CorrelationKeyMapper:
    """Mapea expectativas y lecturas a la misma clave de correlación."""

    @staticmethod
    def for_target(kind: TargetKind, target_ref: Optional[str]) -> str:
        """Construye la clave para un objetivo.

        Example:
            >>> CorrelationKeyMapper.for_target(TargetKind.ASSET, "a1")
            'asset:a1'
            >>> CorrelationKeyMapper.for_target(TargetKind.DELIVERY, None)
            'delivery'
        """
        if kind == TargetKind.DELIVERY:
            return DELIVERY_KEY
        return f"{kind.value}:{target_ref}"

    @staticmethod
    def for_expectation(expectation: MonitoringExpectation) -> str:
        return CorrelationKeyMapper.for_target(expectation.target_kind, expectation.target_ref)

    @staticmethod
    def target_kind_for_reading(kind: ReadingKind) -> TargetKind:
        """Neveras y congeladores son assets; el resto se mapea 1:1."""
        if kind in (ReadingKind.FRIDGE, ReadingKind.FREEZER):
            return TargetKind.ASSET
        if kind == ReadingKind.FOOD:
            return TargetKind.FOOD
        return TargetKind.DELIVERY

    @staticmethod
    def for_reading(reading: Reading) -> str:
        target_kind = CorrelationKeyMapper.target_kind_for_reading(reading.kind)
        return CorrelationKeyMapper.for_target(target_kind, reading.target_ref)
