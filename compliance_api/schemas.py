from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from .core.domain.models import (
    DeliveryResult,
    OccurrenceStatus,
    ReadingKind,
    TargetKind,
    VerdictStatus,
)


class TempEvaluateIn(BaseModel):
    kind: ReadingKind
    # NaN/Infinity se rechazan aquí, antes de llegar al clasificador.
    value_c: float = Field(..., allow_inf_nan=False)
    food_standard_c: Optional[float] = Field(default=None, allow_inf_nan=False)


class VerdictOut(BaseModel):
    status: VerdictStatus
    requires_action: bool
    message: str
    standard: str


class TempRecordIn(BaseModel):
    company_id: str = Field(..., min_length=1)
    site_id: str = Field(..., min_length=1)
    kind: ReadingKind
    value_c: float = Field(..., allow_inf_nan=False)
    recorded_at: Optional[datetime] = None
    asset_id: Optional[str] = None
    food_item_id: Optional[str] = None
    notes: Optional[str] = None
    food_standard_c: Optional[float] = Field(default=None, allow_inf_nan=False)

    # Entregas
    delivery_item: Optional[str] = None
    supplier: Optional[str] = None
    delivery_result: Optional[DeliveryResult] = None

    # Qué hay que hacer si la lectura requiere acción
    action_notes: Optional[str] = None

    @model_validator(mode="after")
    def _check_target(self) -> "TempRecordIn":
        if self.kind in (ReadingKind.FRIDGE, ReadingKind.FREEZER) and not self.asset_id:
            raise ValueError(f"asset_id is required for {self.kind.value} readings")
        if self.kind == ReadingKind.FOOD and not self.food_item_id:
            raise ValueError("food_item_id is required for food readings")
        if self.kind == ReadingKind.DELIVERY and not self.delivery_item:
            raise ValueError("delivery_item is required for delivery readings")
        return self


class TempRecordResult(BaseModel):
    id: str
    verdict: VerdictOut
    requires_action: bool
    action_due_at: Optional[datetime] = None


class DueRowOut(BaseModel):
    key: str
    label: str
    kind: TargetKind
    interval_minutes: int
    expectation_id: str
    last_recorded_at: Optional[datetime] = None
    due_at: Optional[datetime] = None
    minutes_overdue: Optional[int] = None


class TempSummaryOut(BaseModel):
    site_id: str
    generated_at: datetime
    lookback: str
    expectations: int
    readings: int
    overdue: List[DueRowOut] = Field(default_factory=list)
    due_soon: List[DueRowOut] = Field(default_factory=list)


class CorrectiveActionOut(BaseModel):
    id: str
    title: str
    details: Optional[str] = None
    due_at: Optional[datetime] = None
    recorded_at: datetime
    value_c: float
    action_logged: bool = False
    action_logged_at: Optional[datetime] = None
    completed_notes: Optional[str] = None


class CorrectiveActionCompleteIn(BaseModel):
    completed_notes: Optional[str] = None


class RunOut(BaseModel):
    id: str
    status: OccurrenceStatus
    due_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    template_id: Optional[str] = None
    template_name: Optional[str] = None


class ChecksSummaryOut(BaseModel):
    site_id: str
    overdue: List[RunOut] = Field(default_factory=list)
    due_today: List[RunOut] = Field(default_factory=list)
    completed_today: List[RunOut] = Field(default_factory=list)


class MaterializeIn(BaseModel):
    day: Optional[date] = None


class MaterializeResultOut(BaseModel):
    day: date
    drafted: int
    created: int
    skipped: int
