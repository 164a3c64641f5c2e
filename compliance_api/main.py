from __future__ import annotations

from fastapi import FastAPI

from .endpoints import checks_router, health_router, jobs_router, temps_router

app = FastAPI(title="Food Safety Compliance Service", version="0.1.0")

app.include_router(health_router)
app.include_router(temps_router)
app.include_router(checks_router)
app.include_router(jobs_router)
