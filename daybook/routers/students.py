"""
Students router: student records, subject assignments and metric configuration.

GET    /students/{student_id}
PUT    /students/{student_id}
DELETE /students/{student_id}
GET    /students/{student_id}/subjects
PUT    /students/{student_id}/subjects/{subject_id}          # assign
DELETE /students/{student_id}/subjects/{subject_id}          # unassign
GET    /students/{student_id}/metrics?family_id=
PUT    /students/{student_id}/metrics
PUT    /students/{student_id}/metrics/{metric_id}
GET    /students/{student_id}/subjects/{subject_id}/metrics?family_id=
PUT    /students/{student_id}/subjects/{subject_id}/metrics
GET    /students/{student_id}/subjects/{subject_id}/daily-log-metrics?family_id=
GET    /students/{student_id}/daily-logs[?subject_id=]

The family scope is always an explicit query parameter.
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from daybook.core.errors import NotFoundError
from daybook.db.base import get_db
from daybook.schemas.common import ErrorResponse, MessageResponse
from daybook.schemas.daily_log import DailyLogSummaryOut
from daybook.schemas.family import StudentOut, StudentRequest, SubjectOut
from daybook.schemas.metric import (
    MetricOut,
    StudentMetricConfigItem,
    StudentMetricUpdate,
    StudentSubjectMetricConfigItem,
)
from daybook.services import applicability, daily_logs, family_records, student_subjects
from daybook.services.applicability import StudentMetricConfig, StudentSubjectMetricConfig
from daybook.services.family_records import StudentData

router = APIRouter(prefix="/students", tags=["students"])


def _message(result) -> MessageResponse:
    result.unwrap()
    return MessageResponse(message=result.message)


# ---------------------------------------------------------------------------
# Student record
# ---------------------------------------------------------------------------

@router.get("/{student_id}", response_model=StudentOut)
def get_student(student_id: int, db: Session = Depends(get_db)):
    student = family_records.get_student(db, student_id)
    if student is None:
        raise NotFoundError("Student", student_id)
    return StudentOut.model_validate(student)


@router.put("/{student_id}", response_model=StudentOut)
def update_student(student_id: int, payload: StudentRequest, db: Session = Depends(get_db)):
    data = StudentData(name=payload.name, date_of_birth=payload.date_of_birth, notes=payload.notes)
    student = family_records.update_student(db, student_id, data).unwrap()
    return StudentOut.model_validate(student)


@router.delete("/{student_id}", response_model=MessageResponse)
def delete_student(student_id: int, db: Session = Depends(get_db)):
    return _message(family_records.delete_student(db, student_id))


# ---------------------------------------------------------------------------
# Subject assignments
# ---------------------------------------------------------------------------

@router.get("/{student_id}/subjects", response_model=list[SubjectOut])
def list_student_subjects(student_id: int, db: Session = Depends(get_db)):
    subjects = student_subjects.list_subjects_for_student(db, student_id)
    return [SubjectOut.model_validate(s) for s in subjects]


@router.put(
    "/{student_id}/subjects/{subject_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse, "description": "Subject already assigned."}},
)
def assign_subject(student_id: int, subject_id: int, db: Session = Depends(get_db)):
    return _message(student_subjects.assign_subject(db, student_id, subject_id))


@router.delete("/{student_id}/subjects/{subject_id}", response_model=MessageResponse)
def remove_subject(student_id: int, subject_id: int, db: Session = Depends(get_db)):
    return _message(student_subjects.remove_subject(db, student_id, subject_id))


# ---------------------------------------------------------------------------
# Student-level metric configuration
# ---------------------------------------------------------------------------

@router.get("/{student_id}/metrics", response_model=list[StudentMetricConfigItem])
def get_student_metrics(
    student_id: int,
    family_id: int = Query(description="Family whose templates and custom metrics are in scope."),
    db: Session = Depends(get_db),
):
    configs = applicability.get_metrics_for_student(db, student_id, family_id)
    return [StudentMetricConfigItem.model_validate(c) for c in configs]


@router.put("/{student_id}/metrics", response_model=MessageResponse)
def save_student_metrics(
    student_id: int,
    payload: list[StudentMetricConfigItem],
    db: Session = Depends(get_db),
):
    """Disabled rows are removed; enabled rows are created or updated."""
    configs = [
        StudentMetricConfig(
            metric_id=item.metric_id,
            is_enabled=item.is_enabled,
            applies_to_all_subjects=item.applies_to_all_subjects,
        )
        for item in payload
    ]
    return _message(applicability.save_student_metric_config(db, student_id, configs))


@router.put("/{student_id}/metrics/{metric_id}", response_model=MessageResponse)
def update_student_metric(
    student_id: int,
    metric_id: int,
    payload: StudentMetricUpdate,
    db: Session = Depends(get_db),
):
    result = applicability.update_student_metric(
        db, student_id, metric_id, payload.is_enabled, payload.applies_to_all_subjects
    )
    return _message(result)


# ---------------------------------------------------------------------------
# Per-subject metric configuration
# ---------------------------------------------------------------------------

@router.get(
    "/{student_id}/subjects/{subject_id}/metrics",
    response_model=list[StudentSubjectMetricConfigItem],
)
def get_student_subject_metrics(
    student_id: int,
    subject_id: int,
    family_id: int = Query(description="Family whose templates and custom metrics are in scope."),
    db: Session = Depends(get_db),
):
    configs = applicability.get_available_metrics_for_student_subject(db, student_id, subject_id, family_id)
    return [StudentSubjectMetricConfigItem.model_validate(c) for c in configs]


@router.put("/{student_id}/subjects/{subject_id}/metrics", response_model=MessageResponse)
def save_student_subject_metrics(
    student_id: int,
    subject_id: int,
    payload: list[StudentSubjectMetricConfigItem],
    db: Session = Depends(get_db),
):
    configs = [
        StudentSubjectMetricConfig(metric_id=item.metric_id, is_enabled=item.is_enabled)
        for item in payload
    ]
    return _message(
        applicability.save_student_subject_metric_config(db, student_id, subject_id, configs)
    )


@router.get(
    "/{student_id}/subjects/{subject_id}/daily-log-metrics",
    response_model=list[MetricOut],
    summary="Metrics to record on a daily log",
)
def get_daily_log_metrics(
    student_id: int,
    subject_id: int,
    family_id: int = Query(description="Family whose templates and custom metrics are in scope."),
    db: Session = Depends(get_db),
):
    metrics = daily_logs.get_available_metrics_for_daily_log(db, student_id, subject_id, family_id)
    return [MetricOut.model_validate(m) for m in metrics]


# ---------------------------------------------------------------------------
# Logs
# ---------------------------------------------------------------------------

@router.get("/{student_id}/daily-logs", response_model=list[DailyLogSummaryOut])
def list_student_daily_logs(
    student_id: int,
    subject_id: Optional[int] = Query(default=None, description="Restrict to one subject."),
    db: Session = Depends(get_db),
):
    """Newest first; same-day logs by subject name."""
    if subject_id is None:
        logs = daily_logs.list_daily_logs_for_student(db, student_id)
    else:
        logs = daily_logs.list_daily_logs_for_student_subject(db, student_id, subject_id)
    return [DailyLogSummaryOut.model_validate(log) for log in logs]
