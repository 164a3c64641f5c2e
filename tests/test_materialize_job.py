"""Tests del job de materialización: ciclo, retry de deadlocks y CLI.

Ejecutar:
    pytest tests/test_materialize_job.py -v
"""

import logging
from contextlib import contextmanager
from datetime import date

import pytest
from prometheus_client import REGISTRY
from sqlalchemy import text
from sqlalchemy.exc import DBAPIError

from jobs.materialize import RunnerConfig, run_once
from jobs.materialize import cli, retry, runner


class _PgError(Exception):
    def __init__(self, pgcode):
        super().__init__(f"pg error {pgcode}")
        self.pgcode = pgcode


def db_error(pgcode) -> DBAPIError:
    return DBAPIError("INSERT INTO check_entries ...", {}, _PgError(pgcode))


def occurrences(outcome: str) -> float:
    return REGISTRY.get_sample_value("compliance_occurrences_total", {"outcome": outcome}) or 0.0


class SerializationFailureOnCommit:
    """Engine cuyo commit falla con 40001 las primeras `failures` veces."""

    def __init__(self, engine, failures: int):
        self.engine = engine
        self.failures = failures
        self.attempts = 0

    @contextmanager
    def begin(self):
        self.attempts += 1
        with self.engine.connect() as conn:
            trans = conn.begin()
            try:
                yield conn
            except Exception:
                trans.rollback()
                raise
            if self.attempts <= self.failures:
                trans.rollback()
                raise db_error("40001")
            trans.commit()


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    sleeps = []
    monkeypatch.setattr(retry.time, "sleep", sleeps.append)
    return sleeps


# =============================================================================
# RETRY
# =============================================================================

class TestRetry:

    def test_deadlock_retried_then_succeeds(self, no_sleep, caplog):
        calls = []

        def flaky():
            calls.append(1)
            if len(calls) < 3:
                raise db_error("40P01")
            return "ok"

        with caplog.at_level(logging.WARNING):
            assert retry.run_with_retry(flaky, max_retries=3) == "ok"

        assert len(calls) == 3
        assert len(no_sleep) == 2
        assert no_sleep[0] < no_sleep[1]
        assert "sqlstate=40P01" in caplog.text

    def test_serialization_failure_is_retryable(self):
        calls = []

        def flaky():
            calls.append(1)
            if len(calls) == 1:
                raise db_error("40001")
            return 7

        assert retry.run_with_retry(flaky) == 7

    def test_other_errors_not_retried(self):
        calls = []

        def broken():
            calls.append(1)
            raise db_error("23505")

        with pytest.raises(DBAPIError):
            retry.run_with_retry(broken, max_retries=5)

        assert len(calls) == 1

    def test_gives_up_after_max_retries(self):
        calls = []

        def always_deadlocked():
            calls.append(1)
            raise db_error("40P01")

        with pytest.raises(DBAPIError):
            retry.run_with_retry(always_deadlocked, max_retries=2)

        assert len(calls) == 2

    def test_sqlstate_of_without_orig_code(self):
        assert retry.sqlstate_of(DBAPIError("SELECT 1", {}, Exception("x"))) is None


# =============================================================================
# CICLO
# =============================================================================

class TestRunOnce:

    def test_run_once_is_idempotent(self, engine, seed, caplog):
        seed.site("s1")
        seed.template("t1")
        seed.schedule("r1")
        seed.schedule("r2", recurrence="monthly", monthday=10)
        cfg = RunnerConfig(day=date(2024, 3, 10), sleep_seconds=0, once=True)

        with caplog.at_level(logging.INFO):
            first = run_once(cfg, engine=engine)
        second = run_once(cfg, engine=engine)

        assert (first.drafted, first.created, first.skipped) == (2, 2, 0)
        assert (second.drafted, second.created) == (2, 0)
        assert seed.count("check_entries") == 2
        assert "materialize_cycle" in caplog.text

    def test_run_once_defaults_to_utc_today(self, engine, monkeypatch):
        monkeypatch.setattr(runner, "utc_today", lambda: date(2024, 3, 10))

        result = run_once(RunnerConfig(day=None, sleep_seconds=0, once=True), engine=engine)

        assert result.day == date(2024, 3, 10)
        assert result.drafted == 0

    def test_retried_cycle_counted_once(self, engine, seed):
        seed.site("s1")
        seed.template("t1")
        seed.schedule("r1")
        seed.schedule("r2", recurrence="monthly", monthday=10)
        flaky = SerializationFailureOnCommit(engine, failures=1)
        before = occurrences("created"), occurrences("drafted")

        result = run_once(RunnerConfig(day=date(2024, 3, 10), sleep_seconds=0, once=True), engine=flaky)

        assert flaky.attempts == 2
        assert (result.drafted, result.created) == (2, 2)
        assert occurrences("created") - before[0] == 2
        assert occurrences("drafted") - before[1] == 2
        assert seed.count("check_entries") == 2

    def test_exhausted_retries_record_nothing(self, engine, seed):
        seed.site("s1")
        seed.template("t1")
        seed.schedule("r1")
        flaky = SerializationFailureOnCommit(engine, failures=5)
        before = occurrences("created")

        with pytest.raises(DBAPIError):
            run_once(
                RunnerConfig(day=date(2024, 3, 10), sleep_seconds=0, once=True, max_retries=2),
                engine=flaky,
            )

        assert occurrences("created") == before
        assert seed.count("check_entries") == 0


# =============================================================================
# CLI
# =============================================================================

class TestCli:

    @pytest.fixture
    def wired(self, bare_engine, monkeypatch):
        monkeypatch.setattr(cli, "get_engine", lambda: bare_engine)
        monkeypatch.setattr(runner, "get_engine", lambda: bare_engine)
        monkeypatch.setenv("COMPLIANCE_ENV_FILE", "")
        return bare_engine

    def test_once_with_schema_bootstrap(self, wired):
        cli.main(["--once", "--ensure-schema", "--date", "2024-03-10"])

        with wired.connect() as conn:
            assert conn.execute(text("SELECT COUNT(*) FROM check_entries")).scalar_one() == 0

    def test_once_propagates_errors(self, wired):
        # Sin --ensure-schema no hay tablas
        with pytest.raises(DBAPIError):
            cli.main(["--once", "--date", "2024-03-10"])

    def test_bad_date_rejected(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["--date", "10/03/2024"])
