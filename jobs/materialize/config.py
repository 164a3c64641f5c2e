"""Materialize job configuration."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class RunnerConfig:
    """Configuración del job de materialización."""
    day: Optional[date]
    sleep_seconds: float
    once: bool
    max_retries: int = 3
