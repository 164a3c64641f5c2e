"""Fixtures compartidos: SQLite en memoria con el esquema real y datos semilla."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from common.config import Settings
from compliance_api.infrastructure.persistence.schema_setup import ensure_schema


def make_engine():
    # Una sola conexión compartida: la BD en memoria vive lo que viva el engine.
    return create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        future=True,
    )


class Seeder:
    """Inserta filas mínimas en las tablas del esquema."""

    def __init__(self, engine):
        self.engine = engine
        self._seq = 0

    def _next_id(self, prefix: str) -> str:
        self._seq += 1
        return f"{prefix}{self._seq}"

    def _insert(self, sql: str, params: dict) -> None:
        with self.engine.begin() as conn:
            conn.execute(text(sql), params)

    def _insert_returning(self, sql: str, params: dict) -> str:
        with self.engine.begin() as conn:
            return str(conn.execute(text(sql), params).scalar_one())

    def site(self, id: str = "s1", company_id: str = "c1", name: str = "Main kitchen") -> str:
        self._insert(
            "INSERT INTO sites (id, company_id, name) VALUES (:id, :company_id, :name)",
            {"id": id, "company_id": company_id, "name": name},
        )
        return id

    def template(self, id: str = "t1", company_id: str = "c1", name: str = "Opening checks") -> str:
        self._insert(
            "INSERT INTO check_templates (id, company_id, name) VALUES (:id, :company_id, :name)",
            {"id": id, "company_id": company_id, "name": name},
        )
        return id

    def schedule(
        self,
        id: str = "r1",
        *,
        company_id: str = "c1",
        site_id: str = "s1",
        template_id: str = "t1",
        recurrence: str = "daily",
        due_time: str = "09:00",
        weekdays: Optional[str] = None,
        monthday: Optional[int] = None,
        start_date: str = "2024-01-01",
        end_date: Optional[str] = None,
        active: bool = True,
    ) -> str:
        self._insert(
            """
            INSERT INTO check_schedules (
              id, company_id, site_id, template_id, active, due_time, recurrence,
              weekdays, monthday, start_date, end_date
            )
            VALUES (
              :id, :company_id, :site_id, :template_id, :active, :due_time, :recurrence,
              :weekdays, :monthday, :start_date, :end_date
            )
            """,
            {
                "id": id,
                "company_id": company_id,
                "site_id": site_id,
                "template_id": template_id,
                "active": active,
                "due_time": due_time,
                "recurrence": recurrence,
                "weekdays": weekdays,
                "monthday": monthday,
                "start_date": start_date,
                "end_date": end_date,
            },
        )
        return id

    def entry(
        self,
        *,
        status: str,
        due_at: Optional[str],
        completed_at: Optional[str] = None,
        template_id: Optional[str] = "t1",
        schedule_id: Optional[str] = None,
        company_id: str = "c1",
        site_id: str = "s1",
    ) -> None:
        self._insert(
            """
            INSERT INTO check_entries (
              company_id, site_id, template_id, schedule_id, status, due_at, completed_at
            )
            VALUES (
              :company_id, :site_id, :template_id, :schedule_id, :status, :due_at, :completed_at
            )
            """,
            {
                "company_id": company_id,
                "site_id": site_id,
                "template_id": template_id,
                "schedule_id": schedule_id,
                "status": status,
                "due_at": due_at,
                "completed_at": completed_at,
            },
        )

    def asset(self, id: str, *, type: str = "fridge", name: str = "Walk-in", site_id: str = "s1") -> str:
        self._insert(
            """
            INSERT INTO temp_assets (id, company_id, site_id, type, name)
            VALUES (:id, 'c1', :site_id, :type, :name)
            """,
            {"id": id, "site_id": site_id, "type": type, "name": name},
        )
        return id

    def food_item(self, id: str, *, name: str = "Chicken curry") -> str:
        self._insert(
            "INSERT INTO temp_food_items (id, company_id, name) VALUES (:id, 'c1', :name)",
            {"id": id, "name": name},
        )
        return id

    def expectation(
        self,
        *,
        kind: str,
        every_minutes: int,
        asset_id: Optional[str] = None,
        food_item_id: Optional[str] = None,
        active: bool = True,
        site_id: str = "s1",
    ) -> str:
        id = self._next_id("e")
        self._insert(
            """
            INSERT INTO temp_expectations (
              id, company_id, site_id, kind, asset_id, food_item_id, every_minutes, active
            )
            VALUES (:id, 'c1', :site_id, :kind, :asset_id, :food_item_id, :every_minutes, :active)
            """,
            {
                "id": id,
                "site_id": site_id,
                "kind": kind,
                "asset_id": asset_id,
                "food_item_id": food_item_id,
                "every_minutes": every_minutes,
                "active": active,
            },
        )
        return id

    def reading(
        self,
        *,
        kind: str,
        value_c: float,
        recorded_at: str,
        asset_id: Optional[str] = None,
        food_item_id: Optional[str] = None,
        delivery_item: Optional[str] = None,
        requires_action: bool = False,
        action_due_at: Optional[str] = None,
        action_logged: bool = False,
        action_logged_at: Optional[str] = None,
        notes: Optional[str] = None,
        action_notes: Optional[str] = None,
        site_id: str = "s1",
    ) -> str:
        return self._insert_returning(
            """
            INSERT INTO temp_records (
              company_id, site_id, kind, asset_id, food_item_id, value_c, recorded_at,
              delivery_item, notes, requires_action, action_notes, action_due_at,
              action_logged, action_logged_at
            )
            VALUES (
              'c1', :site_id, :kind, :asset_id, :food_item_id, :value_c, :recorded_at,
              :delivery_item, :notes, :requires_action, :action_notes, :action_due_at,
              :action_logged, :action_logged_at
            )
            RETURNING id
            """,
            {
                "site_id": site_id,
                "kind": kind,
                "asset_id": asset_id,
                "food_item_id": food_item_id,
                "value_c": value_c,
                "recorded_at": recorded_at,
                "delivery_item": delivery_item,
                "requires_action": requires_action,
                "action_due_at": action_due_at,
                "action_logged": action_logged,
                "action_logged_at": action_logged_at,
                "notes": notes,
                "action_notes": action_notes,
            },
        )

    def count(self, table: str) -> int:
        with self.engine.connect() as conn:
            return int(conn.execute(text(f"SELECT COUNT(*) FROM {table}")).scalar_one())


@pytest.fixture
def engine():
    eng = make_engine()
    ensure_schema(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seed(engine) -> Seeder:
    return Seeder(engine)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        database_url="sqlite://",
        food_standard_c=75.0,
        due_soon_limit=20,
        due_window_lookback="calendar_day",
        readings_today_limit=500,
        corrective_action_due_minutes=60,
        materialize_max_retries=3,
    )


@pytest.fixture
def now() -> datetime:
    return datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def bare_engine():
    """SQLite sin tablas: cualquier consulta falla con OperationalError."""
    eng = make_engine()
    yield eng
    eng.dispose()
