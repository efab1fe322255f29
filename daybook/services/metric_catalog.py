"""
Metric catalog: template and family-custom metric definitions.

Public API
----------
list_visible_metrics(db, family_id)   → list[Metric]  templates first, then custom
list_templates(db)                    → list[Metric]
list_custom(db, family_id)            → list[Metric]
get_metric(db, metric_id)             → Metric | None
create_metric(db, family_id, data)    → ServiceResult
update_metric(db, metric_id, data)    → ServiceResult
delete_metric(db, metric_id)          → ServiceResult
seed_template_metrics(db, templates)  → int          (only path that creates templates)
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional

import structlog
from sqlalchemy import case, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from daybook.core.errors import InvalidOperationError, NotFoundError
from daybook.models.family import Family
from daybook.models.metric import Metric, MetricType
from daybook.services.result import guarded_operation

logger = structlog.get_logger(__name__)


@dataclass
class MetricData:
    """Editable fields of a custom metric."""
    name: str
    metric_type: MetricType
    description: Optional[str] = None
    category: Optional[str] = None
    possible_values: Optional[str] = None
    numeric_config: Optional[str] = None


DEFAULT_TEMPLATES: list[MetricData] = [
    MetricData(
        name="Completed",
        metric_type=MetricType.boolean,
        description="The planned work for the day was finished.",
        category="Progress",
    ),
    MetricData(
        name="Focus",
        metric_type=MetricType.categorical,
        description="How well the student stayed on task.",
        category="Engagement",
        possible_values='["Low", "Medium", "High"]',
    ),
    MetricData(
        name="Time Spent",
        metric_type=MetricType.numeric,
        description="Minutes spent on the subject.",
        category="Progress",
        numeric_config='{"min": 0, "max": 600, "unit": "minutes"}',
    ),
    MetricData(
        name="Time of Day",
        metric_type=MetricType.categorical,
        description="When the work happened.",
        category="Schedule",
        possible_values='["Morning", "Afternoon", "Evening"]',
    ),
]


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def _category_then_name():
    return (func.coalesce(Metric.category, ""), Metric.name)


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

def visible_metrics_filter(family_id: int):
    """Templates plus the family's own metrics."""
    return or_(Metric.is_template.is_(True), Metric.family_id == family_id)


def list_visible_metrics(db: Session, family_id: int) -> list[Metric]:
    stmt = (
        select(Metric)
        .where(visible_metrics_filter(family_id))
        .order_by(case((Metric.is_template.is_(True), 0), else_=1), *_category_then_name())
    )
    return list(db.scalars(stmt).all())


def list_templates(db: Session) -> list[Metric]:
    stmt = select(Metric).where(Metric.is_template.is_(True)).order_by(*_category_then_name())
    return list(db.scalars(stmt).all())


def list_custom(db: Session, family_id: int) -> list[Metric]:
    stmt = (
        select(Metric)
        .where(Metric.is_template.is_(False), Metric.family_id == family_id)
        .order_by(*_category_then_name())
    )
    return list(db.scalars(stmt).all())


def get_metric(db: Session, metric_id: int) -> Optional[Metric]:
    return db.get(Metric, metric_id)


# ---------------------------------------------------------------------------
# Custom metric CRUD
# ---------------------------------------------------------------------------

def _apply(metric: Metric, data: MetricData) -> None:
    metric.name = data.name
    metric.description = data.description
    metric.metric_type = MetricType(data.metric_type)
    metric.category = data.category
    metric.possible_values = data.possible_values
    metric.numeric_config = data.numeric_config


def _get_mutable(db: Session, metric_id: int, action: str) -> Metric:
    metric = db.get(Metric, metric_id)
    if metric is None:
        raise NotFoundError("Metric", metric_id)
    if metric.is_template:
        raise InvalidOperationError(f"Cannot {action} template metrics.")
    return metric


@guarded_operation("Metric created successfully!")
def create_metric(db: Session, family_id: int, data: MetricData) -> Metric:
    if db.get(Family, family_id) is None:
        raise NotFoundError("Family", family_id)

    metric = Metric(family_id=family_id, is_template=False)
    _apply(metric, data)
    db.add(metric)
    db.flush()
    logger.info("metric_created", metric_id=metric.id, family_id=family_id)
    return metric


@guarded_operation("Metric updated successfully!")
def update_metric(db: Session, metric_id: int, data: MetricData) -> Metric:
    metric = _get_mutable(db, metric_id, "update")
    _apply(metric, data)
    metric.updated_at = _utcnow()
    logger.info("metric_updated", metric_id=metric_id)
    return metric


@guarded_operation("Metric deleted successfully!")
def delete_metric(db: Session, metric_id: int) -> None:
    metric = _get_mutable(db, metric_id, "delete")
    db.delete(metric)
    logger.info("metric_deleted", metric_id=metric_id)


# ---------------------------------------------------------------------------
# Template seeding
# ---------------------------------------------------------------------------

def seed_template_metrics(db: Session, templates: Iterable[MetricData] = DEFAULT_TEMPLATES) -> int:
    """Insert templates that do not exist yet (matched by name). Returns the number added.

    Bootstrap path outside ServiceResult: a store failure rolls back and is re-raised.
    """
    existing = set(db.scalars(select(Metric.name).where(Metric.is_template.is_(True))).all())
    added = 0
    for data in templates:
        if data.name in existing:
            continue
        metric = Metric(family_id=None, is_template=True)
        _apply(metric, data)
        db.add(metric)
        existing.add(data.name)
        added += 1
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("template_seeding_failed")
        raise
    logger.info("template_metrics_seeded", added=added)
    return added
