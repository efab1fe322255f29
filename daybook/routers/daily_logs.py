"""
Daily logs router.

POST   /daily-logs
GET    /daily-logs/lookup?student_id=&subject_id=&date=
GET    /daily-logs/{log_id}
PUT    /daily-logs/{log_id}       # replaces notes, date and the whole value set
DELETE /daily-logs/{log_id}
"""
from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from daybook.core.errors import NotFoundError
from daybook.db.base import get_db
from daybook.schemas.common import ErrorResponse, MessageResponse
from daybook.schemas.daily_log import (
    DailyLogCreateRequest,
    DailyLogOut,
    DailyLogUpdateRequest,
    MetricValueIn,
)
from daybook.services import daily_logs
from daybook.services.daily_logs import DailyLogData, DailyLogUpdate
from daybook.services.metric_values import MetricValueInput

router = APIRouter(prefix="/daily-logs", tags=["daily-logs"])


def _values(items: list[MetricValueIn]) -> list[MetricValueInput]:
    return [
        MetricValueInput(
            metric_id=item.metric_id,
            boolean_value=item.boolean_value,
            categorical_value=item.categorical_value,
            numeric_value=item.numeric_value,
        )
        for item in items
    ]


@router.post(
    "",
    response_model=DailyLogOut,
    status_code=status.HTTP_201_CREATED,
    summary="Record a daily log",
    responses={
        404: {"model": ErrorResponse, "description": "Unknown student or subject."},
        409: {"model": ErrorResponse, "description": "A log already exists for this student, subject and date."},
        422: {"model": ErrorResponse, "description": "A metric value does not fit its metric."},
    },
)
def create_daily_log(payload: DailyLogCreateRequest, db: Session = Depends(get_db)):
    """
    Create the log and its metric values in one transaction.

    Values with no field set are ignored; values for unknown metrics are skipped.
    Any invalid value rejects the whole log.
    """
    data = DailyLogData(
        student_id=payload.student_id,
        subject_id=payload.subject_id,
        date=payload.date,
        notes=payload.notes,
        metric_values=_values(payload.metric_values),
    )
    log = daily_logs.create_daily_log(db, data).unwrap()
    return DailyLogOut.model_validate(log)


@router.get("/lookup", response_model=DailyLogOut, summary="Find the log for a student, subject and day")
def lookup_daily_log(
    student_id: int = Query(),
    subject_id: int = Query(),
    day: date = Query(alias="date", examples=["2024-01-15"]),
    db: Session = Depends(get_db),
):
    log = daily_logs.get_daily_log_for_day(db, student_id, subject_id, day)
    if log is None:
        raise NotFoundError("DailyLog", message="Daily log not found.")
    return DailyLogOut.model_validate(log)


@router.get("/{log_id}", response_model=DailyLogOut)
def get_daily_log(log_id: int, db: Session = Depends(get_db)):
    log = daily_logs.get_daily_log(db, log_id)
    if log is None:
        raise NotFoundError("DailyLog", log_id, message="Daily log not found.")
    return DailyLogOut.model_validate(log)


@router.put("/{log_id}", response_model=DailyLogOut)
def update_daily_log(log_id: int, payload: DailyLogUpdateRequest, db: Session = Depends(get_db)):
    data = DailyLogUpdate(
        date=payload.date,
        notes=payload.notes,
        metric_values=_values(payload.metric_values),
    )
    log = daily_logs.update_daily_log(db, log_id, data).unwrap()
    return DailyLogOut.model_validate(log)


@router.delete("/{log_id}", response_model=MessageResponse)
def delete_daily_log(log_id: int, db: Session = Depends(get_db)):
    result = daily_logs.delete_daily_log(db, log_id)
    result.unwrap()
    return MessageResponse(message=result.message)
