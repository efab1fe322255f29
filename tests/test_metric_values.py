"""
Unit tests for metric value validation and the lenient config parsers.
No database needed: metrics are plain unsaved model instances.
"""
from decimal import Decimal

import pytest

from daybook.core.errors import InvalidMetricValueError
from daybook.models.metric import Metric, MetricType
from daybook.services.metric_values import (
    BooleanReading,
    CategoricalReading,
    MetricValueInput,
    NumericBounds,
    NumericReading,
    is_value_set,
    parse_numeric_bounds,
    parse_possible_values,
    reading_columns,
    validate_metric_value,
)


def _metric(metric_type, name="Test", possible_values=None, numeric_config=None):
    return Metric(
        id=1,
        name=name,
        metric_type=metric_type,
        is_template=False,
        possible_values=possible_values,
        numeric_config=numeric_config,
    )


def _value(**fields):
    return MetricValueInput(metric_id=1, **fields)


# ---------------------------------------------------------------------------
# Config parsing
# ---------------------------------------------------------------------------

class TestParsePossibleValues:
    def test_list_of_strings(self):
        assert parse_possible_values('["Low", "High"]') == ["Low", "High"]

    @pytest.mark.parametrize("raw", [None, "", "   ", "not json", '{"a": 1}', "[1, 2]"])
    def test_unusable_config_disables_check(self, raw):
        assert parse_possible_values(raw) is None


class TestParseNumericBounds:
    def test_min_max_unit(self):
        bounds = parse_numeric_bounds('{"min": 0, "max": 120, "unit": "minutes"}')
        assert bounds == NumericBounds(min=Decimal("0"), max=Decimal("120"), unit="minutes")

    def test_keys_are_case_insensitive(self):
        bounds = parse_numeric_bounds('{"Min": 1.5, "MAX": 10}')
        assert bounds.min == Decimal("1.5")
        assert bounds.max == Decimal("10")

    def test_numeric_strings_are_accepted(self):
        bounds = parse_numeric_bounds('{"min": "2", "max": " 8 "}')
        assert bounds.min == Decimal("2")
        assert bounds.max == Decimal("8")

    def test_unparseable_bound_is_dropped_alone(self):
        bounds = parse_numeric_bounds('{"min": "abc", "max": 5}')
        assert bounds.min is None
        assert bounds.max == Decimal("5")

    def test_boolean_bound_is_ignored(self):
        assert parse_numeric_bounds('{"min": true}').min is None

    @pytest.mark.parametrize("raw", [None, "", "{{", "[0, 10]", '"min"'])
    def test_unusable_config_returns_none(self, raw):
        assert parse_numeric_bounds(raw) is None


# ---------------------------------------------------------------------------
# is_value_set
# ---------------------------------------------------------------------------

class TestIsValueSet:
    def test_all_empty(self):
        assert is_value_set(_value()) is False

    def test_whitespace_categorical_is_unset(self):
        assert is_value_set(_value(categorical_value="   ")) is False

    def test_false_boolean_is_set(self):
        assert is_value_set(_value(boolean_value=False)) is True

    def test_zero_numeric_is_set(self):
        assert is_value_set(_value(numeric_value=Decimal("0"))) is True


# ---------------------------------------------------------------------------
# validate_metric_value
# ---------------------------------------------------------------------------

class TestBooleanMetric:
    def test_valid(self):
        reading = validate_metric_value(_metric(MetricType.boolean), _value(boolean_value=True))
        assert reading == BooleanReading(True)

    def test_missing_value(self):
        with pytest.raises(InvalidMetricValueError) as exc:
            validate_metric_value(_metric(MetricType.boolean, name="Completed"), _value())
        assert exc.value.message == "Boolean value is required for metric 'Completed'."
        assert exc.value.details == {"metric_id": 1, "metric_name": "Completed"}

    def test_other_field_set(self):
        with pytest.raises(InvalidMetricValueError) as exc:
            validate_metric_value(
                _metric(MetricType.boolean, name="Completed"),
                _value(boolean_value=True, numeric_value=Decimal("3")),
            )
        assert exc.value.message == "Only boolean value should be set for metric 'Completed'."

    def test_whitespace_categorical_does_not_count_as_extra(self):
        reading = validate_metric_value(
            _metric(MetricType.boolean), _value(boolean_value=False, categorical_value="  ")
        )
        assert reading == BooleanReading(False)


class TestCategoricalMetric:
    def test_valid_member(self):
        metric = _metric(MetricType.categorical, possible_values='["Low", "Medium", "High"]')
        reading = validate_metric_value(metric, _value(categorical_value="Medium"))
        assert reading == CategoricalReading("Medium")

    def test_not_a_member(self):
        metric = _metric(MetricType.categorical, name="Focus", possible_values='["Low", "High"]')
        with pytest.raises(InvalidMetricValueError) as exc:
            validate_metric_value(metric, _value(categorical_value="Extreme"))
        assert exc.value.message == "Categorical value 'Extreme' is not valid for metric 'Focus'."

    def test_membership_is_case_sensitive(self):
        metric = _metric(MetricType.categorical, possible_values='["Low", "High"]')
        with pytest.raises(InvalidMetricValueError):
            validate_metric_value(metric, _value(categorical_value="low"))

    def test_malformed_allowed_list_accepts_anything(self):
        metric = _metric(MetricType.categorical, possible_values="Low, High")
        reading = validate_metric_value(metric, _value(categorical_value="Whatever"))
        assert reading == CategoricalReading("Whatever")

    def test_blank_value_is_required_error(self):
        metric = _metric(MetricType.categorical, name="Focus")
        with pytest.raises(InvalidMetricValueError) as exc:
            validate_metric_value(metric, _value(categorical_value=" "))
        assert exc.value.message == "Categorical value is required for metric 'Focus'."

    def test_other_field_set(self):
        metric = _metric(MetricType.categorical, name="Focus")
        with pytest.raises(InvalidMetricValueError) as exc:
            validate_metric_value(metric, _value(categorical_value="Low", boolean_value=True))
        assert exc.value.message == "Only categorical value should be set for metric 'Focus'."


class TestNumericMetric:
    def test_within_bounds(self):
        metric = _metric(MetricType.numeric, numeric_config='{"min": 0, "max": 120}')
        reading = validate_metric_value(metric, _value(numeric_value=Decimal("45")))
        assert reading == NumericReading(Decimal("45"))

    def test_bounds_are_inclusive(self):
        metric = _metric(MetricType.numeric, numeric_config='{"min": 0, "max": 120}')
        assert validate_metric_value(metric, _value(numeric_value=Decimal("0"))).value == 0
        assert validate_metric_value(metric, _value(numeric_value=Decimal("120"))).value == 120

    def test_below_min(self):
        metric = _metric(MetricType.numeric, name="Minutes", numeric_config='{"min": 0, "max": 120}')
        with pytest.raises(InvalidMetricValueError) as exc:
            validate_metric_value(metric, _value(numeric_value=Decimal("-5")))
        assert exc.value.message == "Numeric value must be at least 0 for metric 'Minutes'."

    def test_above_max(self):
        metric = _metric(MetricType.numeric, name="Minutes", numeric_config='{"min": 0, "max": 120}')
        with pytest.raises(InvalidMetricValueError) as exc:
            validate_metric_value(metric, _value(numeric_value=Decimal("121")))
        assert exc.value.message == "Numeric value must be at most 120 for metric 'Minutes'."

    def test_decimal_comparison_is_exact(self):
        metric = _metric(MetricType.numeric, numeric_config='{"max": 0.3}')
        reading = validate_metric_value(metric, _value(numeric_value=Decimal("0.3")))
        assert reading.value == Decimal("0.3")

    def test_malformed_config_means_unbounded(self):
        metric = _metric(MetricType.numeric, numeric_config="min=0")
        reading = validate_metric_value(metric, _value(numeric_value=Decimal("-1000")))
        assert reading.value == Decimal("-1000")

    def test_missing_value(self):
        with pytest.raises(InvalidMetricValueError) as exc:
            validate_metric_value(_metric(MetricType.numeric, name="Minutes"), _value(boolean_value=True))
        assert exc.value.message == "Numeric value is required for metric 'Minutes'."

    def test_other_field_set(self):
        with pytest.raises(InvalidMetricValueError) as exc:
            validate_metric_value(
                _metric(MetricType.numeric, name="Minutes"),
                _value(numeric_value=Decimal("5"), categorical_value="five"),
            )
        assert exc.value.message == "Only numeric value should be set for metric 'Minutes'."

    @pytest.mark.parametrize("raw", ["NaN", "Infinity", "-Infinity"])
    def test_non_finite_value_is_rejected(self, raw):
        metric = _metric(MetricType.numeric, name="Minutes", numeric_config='{"min": 10}')
        with pytest.raises(InvalidMetricValueError) as exc:
            validate_metric_value(metric, _value(numeric_value=Decimal(raw)))
        assert exc.value.message == "Numeric value must be a finite number for metric 'Minutes'."


class TestReadingColumns:
    def test_only_the_matching_column_is_filled(self):
        assert reading_columns(NumericReading(Decimal("2"))) == {
            "boolean_value": None,
            "categorical_value": None,
            "numeric_value": Decimal("2"),
        }

    def test_false_boolean_is_kept(self):
        assert reading_columns(BooleanReading(False))["boolean_value"] is False
