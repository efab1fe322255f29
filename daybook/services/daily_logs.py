"""
Daily log service: one log per (student, subject, day) plus its metric values.

Public API
----------
create_daily_log(db, data)                          → ServiceResult
update_daily_log(db, log_id, data)                  → ServiceResult
delete_daily_log(db, log_id)                        → ServiceResult
get_daily_log(db, log_id)                           → DailyLog | None
get_daily_log_for_day(db, student_id, subject_id, day) → DailyLog | None
list_daily_logs_for_student(db, student_id)         → list[DailyLog]
list_daily_logs_for_student_subject(db, student_id, subject_id) → list[DailyLog]
get_available_metrics_for_daily_log(db, student_id, subject_id, family_id) → list[Metric]

Every submitted value is validated before anything is written, so a
rejected value leaves no log behind. The (student, subject, date) unique
constraint backs the pre-check when two writers race.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Iterable, Optional, Union

import structlog
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from daybook.core.errors import ConflictError, NotFoundError
from daybook.models.daily_log import DailyLog, DailyLogMetricValue
from daybook.models.metric import Metric
from daybook.models.subject import Subject
from daybook.services.applicability import get_metrics_for_daily_log
from daybook.services.family_records import require_student, require_subject
from daybook.services.metric_values import (
    MetricValueInput,
    Reading,
    is_value_set,
    reading_columns,
    validate_metric_value,
)
from daybook.services.result import guarded_operation

logger = structlog.get_logger(__name__)

DUPLICATE_LOG = "A daily log already exists for this student, subject, and date."


@dataclass
class DailyLogData:
    student_id: int
    subject_id: int
    date: Union[date, datetime]
    notes: Optional[str] = None
    metric_values: list[MetricValueInput] = field(default_factory=list)


@dataclass
class DailyLogUpdate:
    date: Union[date, datetime]
    notes: Optional[str] = None
    metric_values: list[MetricValueInput] = field(default_factory=list)


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def normalize_log_date(value: Union[date, datetime]) -> date:
    """Drop the time of day; the calendar date is kept as given."""
    if isinstance(value, datetime):
        return value.date()
    return value


def _with_values():
    return selectinload(DailyLog.metric_values)


def _find_log(
    db: Session, student_id: int, subject_id: int, day: date, exclude_id: Optional[int] = None
) -> Optional[DailyLog]:
    stmt = select(DailyLog).where(
        DailyLog.student_id == student_id,
        DailyLog.subject_id == subject_id,
        DailyLog.date == day,
    )
    if exclude_id is not None:
        stmt = stmt.where(DailyLog.id != exclude_id)
    return db.scalars(stmt).unique().first()


def _validated_readings(db: Session, values: Iterable[MetricValueInput]) -> list[tuple[Metric, Reading]]:
    readings: list[tuple[Metric, Reading]] = []
    seen: set[int] = set()
    for value in values:
        if not is_value_set(value):
            continue
        metric = db.get(Metric, value.metric_id)
        if metric is None:
            logger.info("metric_value_skipped", metric_id=value.metric_id, reason="unknown metric")
            continue
        if metric.id in seen:
            raise ConflictError(f"A value for metric '{metric.name}' was submitted more than once.")
        seen.add(metric.id)
        readings.append((metric, validate_metric_value(metric, value)))
    return readings


def _value_rows(readings: list[tuple[Metric, Reading]]) -> list[DailyLogMetricValue]:
    return [
        DailyLogMetricValue(metric_id=metric.id, **reading_columns(reading))
        for metric, reading in readings
    ]


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

def get_daily_log(db: Session, log_id: int) -> Optional[DailyLog]:
    stmt = select(DailyLog).options(_with_values()).where(DailyLog.id == log_id)
    return db.scalars(stmt).unique().first()


def get_daily_log_for_day(
    db: Session, student_id: int, subject_id: int, day: Union[date, datetime]
) -> Optional[DailyLog]:
    stmt = (
        select(DailyLog)
        .options(_with_values())
        .where(
            DailyLog.student_id == student_id,
            DailyLog.subject_id == subject_id,
            DailyLog.date == normalize_log_date(day),
        )
    )
    return db.scalars(stmt).unique().first()


def list_daily_logs_for_student(db: Session, student_id: int) -> list[DailyLog]:
    stmt = (
        select(DailyLog)
        .join(Subject, Subject.id == DailyLog.subject_id)
        .where(DailyLog.student_id == student_id)
        .order_by(DailyLog.date.desc(), Subject.name.asc())
    )
    return list(db.scalars(stmt).unique().all())


def list_daily_logs_for_student_subject(db: Session, student_id: int, subject_id: int) -> list[DailyLog]:
    stmt = (
        select(DailyLog)
        .where(DailyLog.student_id == student_id, DailyLog.subject_id == subject_id)
        .order_by(DailyLog.date.desc())
    )
    return list(db.scalars(stmt).unique().all())


def get_available_metrics_for_daily_log(
    db: Session, student_id: int, subject_id: int, family_id: int
) -> list[Metric]:
    return get_metrics_for_daily_log(db, student_id, subject_id, family_id)


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

@guarded_operation("Daily log created successfully!", conflict_message=DUPLICATE_LOG)
def create_daily_log(db: Session, data: DailyLogData) -> DailyLog:
    require_student(db, data.student_id)
    require_subject(db, data.subject_id)

    day = normalize_log_date(data.date)
    if _find_log(db, data.student_id, data.subject_id, day) is not None:
        raise ConflictError(DUPLICATE_LOG)

    readings = _validated_readings(db, data.metric_values)

    log = DailyLog(
        student_id=data.student_id,
        subject_id=data.subject_id,
        date=day,
        notes=data.notes,
    )
    log.metric_values = _value_rows(readings)
    db.add(log)
    db.flush()
    logger.info(
        "daily_log_created",
        daily_log_id=log.id,
        student_id=data.student_id,
        subject_id=data.subject_id,
        day=str(day),
        values=len(readings),
    )
    return log


@guarded_operation("Daily log updated successfully!", conflict_message=DUPLICATE_LOG)
def update_daily_log(db: Session, log_id: int, data: DailyLogUpdate) -> DailyLog:
    log = get_daily_log(db, log_id)
    if log is None:
        raise NotFoundError("DailyLog", log_id, message="Daily log not found.")

    day = normalize_log_date(data.date)
    if day != log.date and _find_log(db, log.student_id, log.subject_id, day, exclude_id=log.id):
        raise ConflictError(DUPLICATE_LOG)

    readings = _validated_readings(db, data.metric_values)

    log.date = day
    log.notes = data.notes
    log.updated_at = _utcnow()

    # Old rows must be gone before the replacements hit the (log, metric) constraint.
    log.metric_values.clear()
    db.flush()
    log.metric_values.extend(_value_rows(readings))
    db.flush()
    logger.info("daily_log_updated", daily_log_id=log.id, day=str(day), values=len(readings))
    return log


@guarded_operation("Daily log deleted successfully!")
def delete_daily_log(db: Session, log_id: int) -> None:
    log = db.get(DailyLog, log_id)
    if log is None:
        raise NotFoundError("DailyLog", log_id, message="Daily log not found.")
    db.delete(log)
    logger.info("daily_log_deleted", daily_log_id=log_id)
