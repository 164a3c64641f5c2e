"""CLI entry point for the materialize job."""

from __future__ import annotations

import argparse
import logging
import time
from datetime import date

from common.config import get_settings
from common.db import get_engine
from compliance_api.infrastructure.persistence.schema_setup import ensure_schema

from .config import RunnerConfig
from .runner import run_once

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Materialize today's check runs from recurrence rules")
    p.add_argument("--date", type=date.fromisoformat, default=None, help="UTC day to materialize (YYYY-MM-DD)")
    p.add_argument("--sleep-seconds", type=float, default=3600.0)
    p.add_argument("--once", action="store_true", help="run a single iteration and exit")
    p.add_argument("--ensure-schema", action="store_true", help="create missing tables before the first run")
    return p


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )

    args = build_parser().parse_args(argv)

    settings = get_settings()
    cfg = RunnerConfig(
        day=args.date,
        sleep_seconds=args.sleep_seconds,
        once=bool(args.once),
        max_retries=settings.materialize_max_retries,
    )

    logger.info("Materialize job started")
    logger.info(
        "Config: day=%s, sleep=%.1fs, retries=%d",
        cfg.day.isoformat() if cfg.day else "today",
        cfg.sleep_seconds,
        cfg.max_retries,
    )

    if args.ensure_schema:
        ensure_schema(get_engine())

    while True:
        try:
            run_once(cfg)
            if cfg.once:
                return
            logger.info("Iteración completada, esperando %.1fs...", cfg.sleep_seconds)
            time.sleep(cfg.sleep_seconds)
        except Exception as e:
            logger.error("Error en iteración: %s", e)
            if cfg.once:
                raise
            logger.info("Continuando con siguiente iteración...")
            time.sleep(cfg.sleep_seconds)


if __name__ == "__main__":
    main()
