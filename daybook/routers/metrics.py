"""
Metrics router: template and family-custom metric definitions.

GET    /metrics/templates
GET    /metrics/{metric_id}
PUT    /metrics/{metric_id}               # custom metrics only
DELETE /metrics/{metric_id}               # custom metrics only
GET    /families/{family_id}/metrics      # templates + custom (or custom only)
POST   /families/{family_id}/metrics
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from daybook.core.errors import NotFoundError
from daybook.db.base import get_db
from daybook.schemas.common import ErrorResponse, MessageResponse
from daybook.schemas.metric import MetricOut, MetricRequest
from daybook.services import metric_catalog
from daybook.services.metric_catalog import MetricData

router = APIRouter(tags=["metrics"])


def _to_data(payload: MetricRequest) -> MetricData:
    return MetricData(
        name=payload.name,
        metric_type=payload.metric_type,
        description=payload.description,
        category=payload.category,
        possible_values=payload.possible_values,
        numeric_config=payload.numeric_config,
    )


@router.get("/metrics/templates", response_model=list[MetricOut], summary="Global template metrics")
def list_templates(db: Session = Depends(get_db)):
    return [MetricOut.model_validate(m) for m in metric_catalog.list_templates(db)]


@router.get("/metrics/{metric_id}", response_model=MetricOut)
def get_metric(metric_id: int, db: Session = Depends(get_db)):
    metric = metric_catalog.get_metric(db, metric_id)
    if metric is None:
        raise NotFoundError("Metric", metric_id)
    return MetricOut.model_validate(metric)


@router.put(
    "/metrics/{metric_id}",
    response_model=MetricOut,
    responses={400: {"model": ErrorResponse, "description": "Template metrics cannot be changed."}},
)
def update_metric(metric_id: int, payload: MetricRequest, db: Session = Depends(get_db)):
    metric = metric_catalog.update_metric(db, metric_id, _to_data(payload)).unwrap()
    return MetricOut.model_validate(metric)


@router.delete(
    "/metrics/{metric_id}",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse, "description": "Template metrics cannot be deleted."}},
)
def delete_metric(metric_id: int, db: Session = Depends(get_db)):
    result = metric_catalog.delete_metric(db, metric_id)
    result.unwrap()
    return MessageResponse(message=result.message)


@router.get(
    "/families/{family_id}/metrics",
    response_model=list[MetricOut],
    summary="Metrics visible to a family",
)
def list_family_metrics(
    family_id: int,
    custom_only: bool = Query(default=False, description="Leave out the shared templates."),
    db: Session = Depends(get_db),
):
    """Templates first, then the family's own metrics; each group by category, then name."""
    if custom_only:
        metrics = metric_catalog.list_custom(db, family_id)
    else:
        metrics = metric_catalog.list_visible_metrics(db, family_id)
    return [MetricOut.model_validate(m) for m in metrics]


@router.post(
    "/families/{family_id}/metrics",
    response_model=MetricOut,
    status_code=status.HTTP_201_CREATED,
)
def create_metric(family_id: int, payload: MetricRequest, db: Session = Depends(get_db)):
    metric = metric_catalog.create_metric(db, family_id, _to_data(payload)).unwrap()
    return MetricOut.model_validate(metric)
