"""Módulo de endpoints HTTP.

Contiene todos los endpoints de la API de cumplimiento organizados por función.
"""

from .health import router as health_router
from .temps import router as temps_router
from .checks import router as checks_router
from .jobs import router as jobs_router

__all__ = [
    "health_router",
    "temps_router",
    "checks_router",
    "jobs_router",
]
