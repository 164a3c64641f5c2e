"""Módulo de clasificación de lecturas de temperatura.

Estructura:
- thresholds.py: Bandas fijas por tipo y clasificador puro
"""

from .thresholds import (
    CHILLED_BAND,
    DEFAULT_FOOD_STANDARD_C,
    DELIVERY_BAND,
    FROZEN_BAND,
    SCOTLAND_FOOD_STANDARD_C,
    ThresholdBand,
    classify,
)

__all__ = [
    "CHILLED_BAND",
    "DEFAULT_FOOD_STANDARD_C",
    "DELIVERY_BAND",
    "FROZEN_BAND",
    "SCOTLAND_FOOD_STANDARD_C",
    "ThresholdBand",
    "classify",
]
