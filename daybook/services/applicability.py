"""
Metric applicability: which metrics are active for a student in a subject.

Two tiers of configuration feed the answer:

* ``StudentMetric``: the student-level default. No row (or a disabled row)
  means the metric is off for the student everywhere. ``applies_to_all_subjects``
  decides whether it is on for every subject or for none by default.
* ``StudentSubjectMetric``: a per-subject override. When a row exists its
  ``is_enabled`` wins over the default for that one subject.

Disabling at student level deletes the row; disabling at subject level
always writes an explicit ``is_enabled=False`` row.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.orm import Session

from daybook.core.errors import NotFoundError
from daybook.models.metric import Metric, MetricType
from daybook.models.student_metric import StudentMetric
from daybook.models.student_subject_metric import StudentSubjectMetric
from daybook.services.family_records import require_student, require_subject
from daybook.services.metric_catalog import visible_metrics_filter
from daybook.services.result import guarded_operation

logger = structlog.get_logger(__name__)


@dataclass
class StudentMetricConfig:
    """One row of the student-level metric configuration."""
    metric_id: int
    is_enabled: bool = False
    applies_to_all_subjects: bool = True
    metric_name: str = ""
    metric_type: Optional[MetricType] = None
    category: Optional[str] = None


@dataclass
class StudentSubjectMetricConfig:
    """One row of the per-subject configuration for a student."""
    metric_id: int
    is_enabled: bool = False
    applies_to_all_subjects: bool = False
    metric_name: str = ""
    metric_type: Optional[MetricType] = None
    category: Optional[str] = None


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def _metric_sort_key(metric: Metric) -> tuple[str, str]:
    return (metric.category or "", metric.name)


def is_metric_active(student_metric: Optional[StudentMetric], override: Optional[bool]) -> bool:
    """
    Effective state of one metric for one (student, subject).

    ``override`` is the subject-level ``is_enabled`` or None when no override
    row exists.
    """
    if student_metric is None or not student_metric.is_enabled:
        return False
    if student_metric.applies_to_all_subjects:
        return override is None or override
    return override is True


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

def _enabled_student_metrics(db: Session, student_id: int, family_id: int) -> list[StudentMetric]:
    stmt = (
        select(StudentMetric)
        .join(Metric, Metric.id == StudentMetric.metric_id)
        .where(
            StudentMetric.student_id == student_id,
            StudentMetric.is_enabled.is_(True),
            visible_metrics_filter(family_id),
        )
    )
    return list(db.scalars(stmt).unique().all())


def _subject_overrides(db: Session, student_id: int, subject_id: int) -> dict[int, StudentSubjectMetric]:
    stmt = select(StudentSubjectMetric).where(
        StudentSubjectMetric.student_id == student_id,
        StudentSubjectMetric.subject_id == subject_id,
    )
    return {row.metric_id: row for row in db.scalars(stmt).unique().all()}


def get_student_metric(db: Session, student_id: int, metric_id: int) -> Optional[StudentMetric]:
    stmt = select(StudentMetric).where(
        StudentMetric.student_id == student_id,
        StudentMetric.metric_id == metric_id,
    )
    return db.scalars(stmt).unique().first()


def get_metrics_for_student(db: Session, student_id: int, family_id: int) -> list[StudentMetricConfig]:
    """Student-level configuration row for every metric visible to the family."""
    metrics = db.scalars(select(Metric).where(visible_metrics_filter(family_id))).all()
    configured = {
        sm.metric_id: sm
        for sm in db.scalars(
            select(StudentMetric).where(StudentMetric.student_id == student_id)
        ).unique().all()
    }

    configs = []
    for metric in sorted(metrics, key=_metric_sort_key):
        existing = configured.get(metric.id)
        configs.append(StudentMetricConfig(
            metric_id=metric.id,
            metric_name=metric.name,
            metric_type=metric.metric_type,
            category=metric.category,
            is_enabled=existing.is_enabled if existing else False,
            applies_to_all_subjects=existing.applies_to_all_subjects if existing else True,
        ))
    return configs


def get_available_metrics_for_student_subject(
    db: Session, student_id: int, subject_id: int, family_id: int
) -> list[StudentSubjectMetricConfig]:
    """
    Configuration rows for every metric the student has enabled.

    Per-subject metrics need a row to be switched on; all-subject metrics are
    listed so they can be switched off. The displayed state is the override
    when one exists, else the student-level default.
    """
    overrides = _subject_overrides(db, student_id, subject_id)

    configs = []
    for sm in _enabled_student_metrics(db, student_id, family_id):
        override = overrides.get(sm.metric_id)
        if override is not None:
            is_enabled = override.is_enabled
        else:
            is_enabled = sm.applies_to_all_subjects
        configs.append(StudentSubjectMetricConfig(
            metric_id=sm.metric_id,
            metric_name=sm.metric.name,
            metric_type=sm.metric.metric_type,
            category=sm.metric.category,
            is_enabled=is_enabled,
            applies_to_all_subjects=sm.applies_to_all_subjects,
        ))
    configs.sort(key=lambda c: (c.category or "", c.metric_name))
    return configs


def get_metrics_for_daily_log(db: Session, student_id: int, subject_id: int, family_id: int) -> list[Metric]:
    """The active metric set for recording values, ordered by category then name."""
    # Subject rows only refine an enabled student-level row; an orphan override never adds a metric.
    overrides = _subject_overrides(db, student_id, subject_id)

    active: dict[int, Metric] = {}
    for sm in _enabled_student_metrics(db, student_id, family_id):
        override = overrides.get(sm.metric_id)
        if is_metric_active(sm, override.is_enabled if override is not None else None):
            active[sm.metric_id] = sm.metric
    return sorted(active.values(), key=_metric_sort_key)


# ---------------------------------------------------------------------------
# Student-subject configuration
# ---------------------------------------------------------------------------

def _require_metric(db: Session, metric_id: int) -> Metric:
    metric = db.get(Metric, metric_id)
    if metric is None:
        raise NotFoundError("Metric", metric_id)
    return metric


@guarded_operation(
    "Student-subject metrics configured successfully!",
    conflict_message="A metric override already exists for this student and subject.",
)
def save_student_subject_metric_config(
    db: Session,
    student_id: int,
    subject_id: int,
    configs: Iterable[StudentSubjectMetricConfig],
) -> None:
    require_student(db, student_id)
    require_subject(db, subject_id)

    overrides = _subject_overrides(db, student_id, subject_id)
    student_metrics = {
        sm.metric_id: sm
        for sm in db.scalars(
            select(StudentMetric).where(StudentMetric.student_id == student_id)
        ).unique().all()
    }

    for config in configs:
        existing = overrides.get(config.metric_id)
        student_metric = student_metrics.get(config.metric_id)
        applies_to_all = student_metric.applies_to_all_subjects if student_metric else False

        if config.is_enabled and applies_to_all:
            # The default already covers it; drop any override.
            if existing is not None:
                db.delete(existing)
                del overrides[config.metric_id]
            continue

        if existing is None:
            _require_metric(db, config.metric_id)
            existing = StudentSubjectMetric(
                student_id=student_id,
                subject_id=subject_id,
                metric_id=config.metric_id,
                is_enabled=config.is_enabled,
            )
            db.add(existing)
            overrides[config.metric_id] = existing
        else:
            existing.is_enabled = config.is_enabled
            existing.updated_at = _utcnow()

    logger.info("student_subject_metrics_saved", student_id=student_id, subject_id=subject_id)


# ---------------------------------------------------------------------------
# Student-level configuration
# ---------------------------------------------------------------------------

def _set_student_metric(
    db: Session,
    student_id: int,
    metric_id: int,
    is_enabled: bool,
    applies_to_all_subjects: bool,
    existing: Optional[StudentMetric],
) -> Optional[StudentMetric]:
    if not is_enabled:
        if existing is not None:
            db.delete(existing)
        return None

    if existing is None:
        _require_metric(db, metric_id)
        existing = StudentMetric(
            student_id=student_id,
            metric_id=metric_id,
            is_enabled=True,
            applies_to_all_subjects=applies_to_all_subjects,
        )
        db.add(existing)
    else:
        existing.is_enabled = True
        existing.applies_to_all_subjects = applies_to_all_subjects
        existing.updated_at = _utcnow()
    return existing


@guarded_operation(
    "Student metrics configured successfully!",
    conflict_message="This metric is already configured for the student.",
)
def save_student_metric_config(db: Session, student_id: int, configs: Iterable[StudentMetricConfig]) -> None:
    require_student(db, student_id)

    existing_rows = {
        sm.metric_id: sm
        for sm in db.scalars(
            select(StudentMetric).where(StudentMetric.student_id == student_id)
        ).unique().all()
    }
    for config in configs:
        row = _set_student_metric(
            db,
            student_id,
            config.metric_id,
            config.is_enabled,
            config.applies_to_all_subjects,
            existing_rows.pop(config.metric_id, None),
        )
        if row is not None:
            existing_rows[config.metric_id] = row

    logger.info("student_metrics_saved", student_id=student_id)


@guarded_operation(
    "Metric configuration updated successfully!",
    conflict_message="This metric is already configured for the student.",
)
def update_student_metric(
    db: Session,
    student_id: int,
    metric_id: int,
    is_enabled: bool,
    applies_to_all_subjects: bool = True,
) -> None:
    require_student(db, student_id)
    _set_student_metric(
        db,
        student_id,
        metric_id,
        is_enabled,
        applies_to_all_subjects,
        get_student_metric(db, student_id, metric_id),
    )
    logger.info("student_metric_updated", student_id=student_id, metric_id=metric_id, enabled=is_enabled)
