"""Materialize job package: daily check-run generation from recurrence rules.

Modules:
- config: RunnerConfig dataclass
- retry: Deadlock retry helper
- runner: Orchestrator (run_once, materialize_for_day)
- cli: CLI entry point (main)
"""

from .config import RunnerConfig
from .runner import MaterializeResult, materialize_for_day, run_once
from .cli import main

__all__ = ["RunnerConfig", "MaterializeResult", "materialize_for_day", "run_once", "main"]
