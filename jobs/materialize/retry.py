"""Deadlock / serialization retry helper for the materialize job."""

from __future__ import annotations

import logging
import random
import time
from typing import Callable, TypeVar

from sqlalchemy.exc import DBAPIError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Postgres SQLSTATE: deadlock_detected, serialization_failure
RETRYABLE_SQLSTATES = frozenset({"40P01", "40001"})


def sqlstate_of(error: DBAPIError) -> str | None:
    orig = getattr(error, "orig", None)
    if orig is None:
        return None
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    return str(code) if code else None


def run_with_retry(fn: Callable[[], T], max_retries: int = 3) -> T:
    """Ejecuta `fn` con retry + exponential backoff para deadlocks.

    Solo se reintentan deadlocks y fallos de serialización; el resto de
    errores se propaga en el primer intento.
    """
    for attempt in range(1, max_retries + 1):
        try:
            return fn()
        except DBAPIError as e:
            code = sqlstate_of(e)
            if code in RETRYABLE_SQLSTATES and attempt < max_retries:
                delay = min(1000 * (2 ** (attempt - 1)), 5000)
                jitter = random.uniform(0, delay * 0.1)
                total_delay = (delay + jitter) / 1000.0
                logger.warning(
                    "Deadlock detectado sqlstate=%s (intento %d/%d), reintentando en %.2fs...",
                    code, attempt, max_retries, total_delay,
                )
                time.sleep(total_delay)
                continue
            logger.error("Error ejecutando materialización (intento %d/%d): %s", attempt, max_retries, e)
            raise
    raise RuntimeError("max retries exceeded")
