"""
Tests for error handling: structured error responses, HTTP status codes,
the custom exception classes and the operation boundary.
"""
import pytest
from sqlalchemy.exc import OperationalError

from daybook.core.errors import (
    ConflictError,
    DaybookException,
    InvalidMetricValueError,
    InvalidOperationError,
    NotFoundError,
    StoreError,
)
from daybook.models import Family
from daybook.services.result import ServiceResult, guarded_operation


# ---------------------------------------------------------------------------
# Unit tests on exception classes
# ---------------------------------------------------------------------------

class TestExceptionClasses:
    def test_not_found_error(self):
        err = NotFoundError("Student", 7)
        assert err.http_status == 404
        assert err.code == "NOT_FOUND"
        assert err.message == "Student not found."
        assert err.to_dict()["details"] == {"entity": "Student", "id": 7}

    def test_not_found_custom_message(self):
        err = NotFoundError("DailyLog", message="Daily log not found.")
        assert err.message == "Daily log not found."
        assert err.details == {"entity": "DailyLog"}

    def test_conflict_error(self):
        err = ConflictError("A daily log already exists for this student, subject, and date.")
        assert err.http_status == 409
        assert err.code == "CONFLICT"

    def test_invalid_metric_value_error(self):
        err = InvalidMetricValueError("Boolean value is required for metric 'Completed'.", 3, "Completed")
        assert err.http_status == 422
        assert err.code == "INVALID_METRIC_VALUE"
        assert err.to_dict()["details"] == {"metric_id": 3, "metric_name": "Completed"}

    def test_invalid_operation_error(self):
        err = InvalidOperationError("Cannot delete template metrics.")
        assert err.http_status == 400
        assert err.code == "INVALID_OPERATION"

    def test_store_error(self):
        err = StoreError("An error occurred: disk I/O error")
        assert err.http_status == 500
        assert err.code == "STORE_ERROR"

    def test_to_dict_without_details(self):
        d = InvalidOperationError("nope").to_dict()
        assert d == {"code": "INVALID_OPERATION", "message": "nope"}
        # details should not be in dict when empty
        assert "details" not in d


# ---------------------------------------------------------------------------
# Operation boundary
# ---------------------------------------------------------------------------

class TestGuardedOperation:
    def test_success_commits(self, db):
        @guarded_operation("Saved!")
        def add_family(session):
            fam = Family(name="Okafor")
            session.add(fam)
            return fam

        result = add_family(db)
        assert result == ServiceResult.success("Saved!", result.value)
        assert result.value.id is not None
        assert result.unwrap() is result.value

    def test_domain_error_rolls_back(self, db):
        @guarded_operation("Saved!")
        def add_then_fail(session):
            session.add(Family(name="Half"))
            session.flush()
            raise InvalidOperationError("Stop.")

        result = add_then_fail(db)
        assert not result.ok
        assert result.message == "Stop."
        assert db.query(Family).count() == 0

    def test_store_failure_becomes_store_error(self, db):
        @guarded_operation("Saved!")
        def broken(session):
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))

        result = broken(db)
        assert isinstance(result.error, StoreError)
        assert result.message.startswith("An error occurred:")
        assert "database is locked" in result.message

    def test_unwrap_raises_carried_error(self):
        result = ServiceResult.failure(ConflictError("Taken."))
        with pytest.raises(DaybookException) as exc:
            result.unwrap()
        assert exc.value.code == "CONFLICT"


# ---------------------------------------------------------------------------
# Integration tests on HTTP error responses
# ---------------------------------------------------------------------------

class TestValidationErrors:
    def test_empty_name_returns_validation_error(self, client):
        r = client.post("/families", json={"name": ""})
        assert r.status_code == 422
        body = r.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert "errors" in body["details"]
        assert isinstance(body["details"]["errors"], list)

    def test_whitespace_only_name_returns_validation_error(self, client):
        r = client.post("/families", json={"name": "   \t\n  "})
        assert r.status_code == 422
        assert r.json()["code"] == "VALIDATION_ERROR"

    def test_unknown_metric_type_names_the_field(self, client, family):
        r = client.post(f"/families/{family.id}/metrics", json={"name": "Mood", "metric_type": "emoji"})
        assert r.status_code == 422
        fields = [e["field"] for e in r.json()["details"]["errors"]]
        assert any("metric_type" in f for f in fields)

    def test_invalid_date_format(self, client, make_student, make_subject):
        student = make_student()
        subject = make_subject()
        r = client.post("/daily-logs", json={
            "student_id": student.id, "subject_id": subject.id, "date": "not-a-date",
        })
        assert r.status_code == 422
        assert r.json()["code"] == "VALIDATION_ERROR"


class TestDomainErrors:
    def test_unknown_student_is_404(self, client):
        r = client.get("/students/999")
        assert r.status_code == 404
        body = r.json()
        assert body["code"] == "NOT_FOUND"
        assert body["details"] == {"entity": "Student", "id": 999}

    def test_duplicate_daily_log_is_409(self, client, make_student, make_subject):
        student = make_student()
        subject = make_subject()
        payload = {"student_id": student.id, "subject_id": subject.id, "date": "2024-01-15"}
        assert client.post("/daily-logs", json=payload).status_code == 201

        r = client.post("/daily-logs", json=payload)
        assert r.status_code == 409
        body = r.json()
        assert body["code"] == "CONFLICT"
        assert "already exists" in body["message"]

    def test_invalid_metric_value_is_422_with_metric(self, client, make_student, make_subject, make_metric):
        from daybook.models import MetricType

        student = make_student()
        subject = make_subject()
        metric = make_metric(name="Minutes", metric_type=MetricType.numeric, numeric_config='{"min": 10}')
        r = client.post("/daily-logs", json={
            "student_id": student.id,
            "subject_id": subject.id,
            "date": "2024-01-15",
            "metric_values": [{"metric_id": metric.id, "numeric_value": 5}],
        })
        assert r.status_code == 422
        body = r.json()
        assert body["code"] == "INVALID_METRIC_VALUE"
        assert body["message"] == "Numeric value must be at least 10 for metric 'Minutes'."
        assert body["details"] == {"metric_id": metric.id, "metric_name": "Minutes"}

    def test_template_metric_is_400(self, client, make_metric):
        template = make_metric(name="Completed", is_template=True)
        r = client.delete(f"/metrics/{template.id}")
        assert r.status_code == 400
        assert r.json() == {"code": "INVALID_OPERATION", "message": "Cannot delete template metrics."}
