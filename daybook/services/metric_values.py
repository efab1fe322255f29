"""
Metric value validation.

Callers submit values in the three-field shape (boolean / categorical /
numeric). ``validate_metric_value`` checks one against its metric and hands
back a single typed reading, so nothing downstream ever deals with the
"other fields must be empty" case again.

Metric configuration is stored as JSON text and parsed leniently: a
malformed allowed-values list or bounds object disables that check instead
of rejecting the value.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

import structlog

from daybook.core.errors import InvalidMetricValueError
from daybook.models.metric import Metric, MetricType

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Value shapes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MetricValueInput:
    """A submitted value; any combination of the three fields may be filled."""
    metric_id: int
    boolean_value: Optional[bool] = None
    categorical_value: Optional[str] = None
    numeric_value: Optional[Decimal] = None


@dataclass(frozen=True)
class BooleanReading:
    value: bool


@dataclass(frozen=True)
class CategoricalReading:
    value: str


@dataclass(frozen=True)
class NumericReading:
    value: Decimal


Reading = Union[BooleanReading, CategoricalReading, NumericReading]


@dataclass(frozen=True)
class NumericBounds:
    min: Optional[Decimal] = None
    max: Optional[Decimal] = None
    unit: Optional[str] = None


# ---------------------------------------------------------------------------
# Config parsing (fail-open)
# ---------------------------------------------------------------------------

def parse_possible_values(raw: Optional[str]) -> Optional[list[str]]:
    """Return the allowed categorical values, or None when unset or unreadable."""
    if raw is None or not raw.strip():
        return None
    try:
        parsed = json.loads(raw)
    except ValueError:
        return None
    if not isinstance(parsed, list) or not all(isinstance(v, str) for v in parsed):
        return None
    return parsed


def _to_decimal(value: Any) -> Optional[Decimal]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value).strip())
    except InvalidOperation:
        return None


def parse_numeric_bounds(raw: Optional[str]) -> Optional[NumericBounds]:
    """
    Parse ``{"min": .., "max": .., "unit": ..}``; key case is ignored.

    Returns None when the text is unset or not a JSON object. A bound that
    does not read as a number is dropped on its own.
    """
    if raw is None or not raw.strip():
        return None
    try:
        parsed = json.loads(raw, parse_float=Decimal, parse_int=Decimal)
    except ValueError:
        return None
    if not isinstance(parsed, dict):
        return None

    config = {str(k).lower(): v for k, v in parsed.items()}
    unit = config.get("unit")
    return NumericBounds(
        min=_to_decimal(config.get("min")),
        max=_to_decimal(config.get("max")),
        unit=unit if isinstance(unit, str) else None,
    )


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def _has_text(value: Optional[str]) -> bool:
    return value is not None and bool(value.strip())


def is_value_set(value: MetricValueInput) -> bool:
    """Unset values are skipped entirely: no validation, no row."""
    return (
        value.boolean_value is not None
        or _has_text(value.categorical_value)
        or value.numeric_value is not None
    )


def _reject(metric: Metric, message: str) -> InvalidMetricValueError:
    logger.info("metric_value_rejected", metric_id=metric.id, reason=message)
    return InvalidMetricValueError(message, metric_id=metric.id, metric_name=metric.name)


def validate_metric_value(metric: Metric, value: MetricValueInput) -> Reading:
    """
    Check ``value`` against ``metric`` and return its typed reading.

    Raises InvalidMetricValueError with a message naming the metric.
    """
    name = metric.name
    kind = MetricType(metric.metric_type)

    if kind is MetricType.boolean:
        if value.boolean_value is None:
            raise _reject(metric, f"Boolean value is required for metric '{name}'.")
        if _has_text(value.categorical_value) or value.numeric_value is not None:
            raise _reject(metric, f"Only boolean value should be set for metric '{name}'.")
        return BooleanReading(value.boolean_value)

    if kind is MetricType.categorical:
        if not _has_text(value.categorical_value):
            raise _reject(metric, f"Categorical value is required for metric '{name}'.")
        if value.boolean_value is not None or value.numeric_value is not None:
            raise _reject(metric, f"Only categorical value should be set for metric '{name}'.")
        allowed = parse_possible_values(metric.possible_values)
        if allowed is not None and value.categorical_value not in allowed:
            raise _reject(
                metric,
                f"Categorical value '{value.categorical_value}' is not valid for metric '{name}'.",
            )
        return CategoricalReading(value.categorical_value)

    if kind is MetricType.numeric:
        if value.numeric_value is None:
            raise _reject(metric, f"Numeric value is required for metric '{name}'.")
        if value.boolean_value is not None or _has_text(value.categorical_value):
            raise _reject(metric, f"Only numeric value should be set for metric '{name}'.")
        number = Decimal(str(value.numeric_value))
        if not number.is_finite():
            raise _reject(metric, f"Numeric value must be a finite number for metric '{name}'.")
        bounds = parse_numeric_bounds(metric.numeric_config)
        if bounds is not None:
            if bounds.min is not None and number < bounds.min:
                raise _reject(metric, f"Numeric value must be at least {bounds.min} for metric '{name}'.")
            if bounds.max is not None and number > bounds.max:
                raise _reject(metric, f"Numeric value must be at most {bounds.max} for metric '{name}'.")
        return NumericReading(number)

    raise _reject(metric, f"Unsupported metric type for metric '{name}'.")


def reading_columns(reading: Reading) -> dict[str, Any]:
    """Column values for a DailyLogMetricValue row holding ``reading``."""
    return {
        "boolean_value": reading.value if isinstance(reading, BooleanReading) else None,
        "categorical_value": reading.value if isinstance(reading, CategoricalReading) else None,
        "numeric_value": reading.value if isinstance(reading, NumericReading) else None,
    }
