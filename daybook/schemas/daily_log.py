"""
Daily log request / response schemas.

Metric values keep the three-field wire shape; which field is meaningful
depends on the metric's type and is checked by the service.
"""
import datetime as dt
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class MetricValueIn(BaseModel):
    metric_id: int
    boolean_value: Optional[bool] = None
    categorical_value: Optional[str] = Field(default=None, max_length=200)
    numeric_value: Optional[Decimal] = None


class MetricValueOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    metric_id: int
    boolean_value: Optional[bool] = None
    categorical_value: Optional[str] = None
    numeric_value: Optional[Decimal] = None


class DailyLogUpdateRequest(BaseModel):
    date: dt.date = Field(description="Calendar day of the log.", examples=["2024-01-15"])
    notes: Optional[str] = Field(default=None, max_length=2000)
    metric_values: list[MetricValueIn] = Field(default_factory=list)


class DailyLogCreateRequest(DailyLogUpdateRequest):
    student_id: int
    subject_id: int


class DailyLogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    student_id: int
    subject_id: int
    date: dt.date
    notes: Optional[str] = None
    metric_values: list[MetricValueOut] = Field(default_factory=list)


class DailyLogSummaryOut(BaseModel):
    """List entry; values are fetched per log."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    student_id: int
    subject_id: int
    date: dt.date
    notes: Optional[str] = None
