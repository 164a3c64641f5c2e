"""Schema bootstrap for the compliance tables.

Runs the migration file matching the engine dialect
(`migrations/<dialect>_001.sql`). Safe to call multiple times.
"""

from __future__ import annotations

import logging
import pathlib

from sqlalchemy import text
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = pathlib.Path(__file__).parent / "migrations"


def migration_file_for(engine: Engine) -> pathlib.Path:
    return MIGRATIONS_DIR / f"{engine.dialect.name}_001.sql"


def split_statements(sql_content: str) -> list[str]:
    statements = []
    for chunk in sql_content.split(";"):
        lines = [ln for ln in chunk.splitlines() if not ln.strip().startswith("--")]
        stmt = "\n".join(lines).strip()
        if stmt:
            statements.append(stmt)
    return statements


def ensure_schema(engine: Engine) -> int:
    """Create the tables if they don't exist; returns statements executed."""
    sql_file = migration_file_for(engine)
    logger.info("[Schema] Ensuring schema exists dialect=%s", engine.dialect.name)

    if not sql_file.exists():
        logger.warning("[Schema] Migration file not found: %s - skipping schema creation", sql_file)
        return 0

    statements = split_statements(sql_file.read_text(encoding="utf-8"))

    try:
        with engine.begin() as conn:
            for statement in statements:
                conn.execute(text(statement))
        logger.info("[Schema] Schema creation completed statements=%d", len(statements))
    except Exception as e:
        logger.exception("[Schema] Schema creation failed: %s", e)
        raise

    return len(statements)
