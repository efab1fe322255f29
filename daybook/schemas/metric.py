"""
Metric definition and metric configuration schemas.

``possible_values`` and ``numeric_config`` travel as JSON text, e.g.
``'["Low", "High"]'`` and ``'{"min": 0, "max": 10}'``.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from daybook.models.metric import MetricType


class MetricRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    metric_type: MetricType
    description: Optional[str] = Field(default=None, max_length=2000)
    category: Optional[str] = Field(default=None, max_length=100)
    possible_values: Optional[str] = Field(default=None, max_length=2000, examples=['["Low", "Medium", "High"]'])
    numeric_config: Optional[str] = Field(default=None, max_length=500, examples=['{"min": 0, "max": 120}'])


class MetricOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    family_id: Optional[int] = None
    name: str
    metric_type: MetricType
    is_template: bool
    description: Optional[str] = None
    category: Optional[str] = None
    possible_values: Optional[str] = None
    numeric_config: Optional[str] = None


class StudentMetricConfigItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    metric_id: int
    is_enabled: bool = False
    applies_to_all_subjects: bool = True
    metric_name: str = ""
    metric_type: Optional[MetricType] = None
    category: Optional[str] = None


class StudentMetricUpdate(BaseModel):
    is_enabled: bool
    applies_to_all_subjects: bool = True


class StudentSubjectMetricConfigItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    metric_id: int
    is_enabled: bool = False
    applies_to_all_subjects: bool = False
    metric_name: str = ""
    metric_type: Optional[MetricType] = None
    category: Optional[str] = None
