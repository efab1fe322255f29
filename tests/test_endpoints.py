"""
Integration tests for API endpoints using SQLite in-memory DB.
"""
from decimal import Decimal

import pytest

from daybook.models import MetricType


class TestHealth:
    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "ok"


class TestFamilies:
    def test_create_get_update_delete(self, client):
        r = client.post("/families", json={"name": "  Rivera  "})
        assert r.status_code == 201
        family_id = r.json()["id"]
        assert r.json()["name"] == "Rivera"

        assert client.get(f"/families/{family_id}").json()["name"] == "Rivera"

        r = client.put(f"/families/{family_id}", json={"name": "Rivera-Lopez"})
        assert r.status_code == 200
        assert r.json()["name"] == "Rivera-Lopez"

        r = client.delete(f"/families/{family_id}")
        assert r.status_code == 200
        assert r.json() == {"message": "Family deleted successfully!"}
        assert client.get(f"/families/{family_id}").status_code == 404

    def test_students_and_subjects(self, client, family):
        r = client.post(f"/families/{family.id}/students", json={"name": "Zoe", "date_of_birth": "2016-03-02"})
        assert r.status_code == 201
        assert r.json()["date_of_birth"] == "2016-03-02"
        client.post(f"/families/{family.id}/students", json={"name": "Ana"})
        assert [s["name"] for s in client.get(f"/families/{family.id}/students").json()] == ["Ana", "Zoe"]

        r = client.post(f"/families/{family.id}/subjects", json={"name": "Math", "description": "Grade 3"})
        assert r.status_code == 201
        assert r.json()["family_id"] == family.id
        assert [s["name"] for s in client.get(f"/families/{family.id}/subjects").json()] == ["Math"]

    def test_student_for_unknown_family(self, client):
        r = client.post("/families/999/students", json={"name": "Ana"})
        assert r.status_code == 404


class TestMetrics:
    def test_custom_metric_lifecycle(self, client, family, make_metric):
        template = make_metric(name="Completed", is_template=True)
        r = client.post(f"/families/{family.id}/metrics", json={
            "name": "Focus",
            "metric_type": "categorical",
            "category": "Engagement",
            "possible_values": '["Low", "High"]',
        })
        assert r.status_code == 201
        metric = r.json()
        assert metric["is_template"] is False
        assert metric["family_id"] == family.id

        listed = client.get(f"/families/{family.id}/metrics").json()
        assert [m["id"] for m in listed] == [template.id, metric["id"]]
        custom = client.get(f"/families/{family.id}/metrics", params={"custom_only": True}).json()
        assert [m["id"] for m in custom] == [metric["id"]]
        assert [m["id"] for m in client.get("/metrics/templates").json()] == [template.id]

        r = client.put(f"/metrics/{metric['id']}", json={"name": "Focus Level", "metric_type": "categorical"})
        assert r.status_code == 200
        assert r.json()["name"] == "Focus Level"

        assert client.delete(f"/metrics/{metric['id']}").status_code == 200
        assert client.get(f"/metrics/{metric['id']}").status_code == 404

    def test_template_cannot_be_updated(self, client, make_metric):
        template = make_metric(name="Completed", is_template=True)
        r = client.put(f"/metrics/{template.id}", json={"name": "X", "metric_type": "boolean"})
        assert r.status_code == 400
        assert r.json()["message"] == "Cannot update template metrics."


class TestStudentSubjects:
    def test_assign_list_remove(self, client, make_student, make_subject):
        student = make_student()
        subject = make_subject("Math")

        r = client.put(f"/students/{student.id}/subjects/{subject.id}")
        assert r.status_code == 201
        assert r.json() == {"message": "Subject assigned successfully!"}
        assert client.put(f"/students/{student.id}/subjects/{subject.id}").status_code == 409

        assert [s["id"] for s in client.get(f"/students/{student.id}/subjects").json()] == [subject.id]
        assert [s["id"] for s in client.get(f"/subjects/{subject.id}/students").json()] == [student.id]

        assert client.delete(f"/students/{student.id}/subjects/{subject.id}").status_code == 200
        assert client.delete(f"/students/{student.id}/subjects/{subject.id}").status_code == 404


class TestMetricConfiguration:
    def test_student_and_subject_configuration_drive_daily_log_metrics(
        self, client, family, make_student, make_subject, make_metric
    ):
        student = make_student()
        math = make_subject("Math")
        art = make_subject("Art")
        completed = make_metric(name="Completed")
        pages = make_metric(name="Pages", metric_type=MetricType.numeric)
        scope = {"family_id": family.id}

        r = client.put(f"/students/{student.id}/metrics", json=[
            {"metric_id": completed.id, "is_enabled": True, "applies_to_all_subjects": True},
            {"metric_id": pages.id, "is_enabled": True, "applies_to_all_subjects": False},
        ])
        assert r.status_code == 200
        assert r.json() == {"message": "Student metrics configured successfully!"}

        config = client.get(f"/students/{student.id}/metrics", params=scope).json()
        assert {c["metric_name"]: c["is_enabled"] for c in config} == {"Completed": True, "Pages": True}

        r = client.put(f"/students/{student.id}/subjects/{math.id}/metrics", json=[
            {"metric_id": pages.id, "is_enabled": True},
            {"metric_id": completed.id, "is_enabled": False},
        ])
        assert r.status_code == 200

        math_metrics = client.get(f"/students/{student.id}/subjects/{math.id}/daily-log-metrics", params=scope)
        assert [m["name"] for m in math_metrics.json()] == ["Pages"]
        art_metrics = client.get(f"/students/{student.id}/subjects/{art.id}/daily-log-metrics", params=scope)
        assert [m["name"] for m in art_metrics.json()] == ["Completed"]

        rows = client.get(f"/students/{student.id}/subjects/{math.id}/metrics", params=scope).json()
        assert {r["metric_name"]: r["is_enabled"] for r in rows} == {"Completed": False, "Pages": True}

    def test_disabling_a_student_metric(self, client, family, make_student, make_metric, enable_metric):
        student = make_student()
        metric = make_metric()
        enable_metric(student, metric)

        r = client.put(f"/students/{student.id}/metrics/{metric.id}", json={"is_enabled": False})
        assert r.status_code == 200
        config = client.get(f"/students/{student.id}/metrics", params={"family_id": family.id}).json()
        assert config[0]["is_enabled"] is False

    def test_family_scope_is_required(self, client, make_student):
        student = make_student()
        r = client.get(f"/students/{student.id}/metrics")
        assert r.status_code == 422


class TestDailyLogs:
    @pytest.fixture()
    def log_setup(self, make_student, make_subject, make_metric):
        student = make_student()
        subject = make_subject("Math")
        minutes = make_metric(name="Minutes", metric_type=MetricType.numeric, numeric_config='{"min": 0}')
        done = make_metric(name="Completed")
        return student, subject, minutes, done

    def test_create_get_update_delete(self, client, log_setup):
        student, subject, minutes, done = log_setup
        r = client.post("/daily-logs", json={
            "student_id": student.id,
            "subject_id": subject.id,
            "date": "2024-01-15",
            "notes": "Long division",
            "metric_values": [
                {"metric_id": minutes.id, "numeric_value": "42.5"},
                {"metric_id": done.id, "boolean_value": True},
            ],
        })
        assert r.status_code == 201
        log = r.json()
        assert log["date"] == "2024-01-15"
        values = {v["metric_id"]: v for v in log["metric_values"]}
        assert Decimal(str(values[minutes.id]["numeric_value"])) == Decimal("42.5")
        assert values[done.id]["boolean_value"] is True

        fetched = client.get(f"/daily-logs/{log['id']}").json()
        assert fetched["notes"] == "Long division"

        r = client.put(f"/daily-logs/{log['id']}", json={
            "date": "2024-01-16",
            "notes": "Moved",
            "metric_values": [{"metric_id": done.id, "boolean_value": False}],
        })
        assert r.status_code == 200
        assert r.json()["date"] == "2024-01-16"
        assert [(v["metric_id"], v["boolean_value"]) for v in r.json()["metric_values"]] == [(done.id, False)]

        r = client.delete(f"/daily-logs/{log['id']}")
        assert r.json() == {"message": "Daily log deleted successfully!"}
        assert client.get(f"/daily-logs/{log['id']}").status_code == 404

    def test_lookup_and_listing(self, client, log_setup, make_subject):
        student, math, *_ = log_setup
        art = make_subject("Art")
        for subject_id, day in ((math.id, "2024-01-14"), (math.id, "2024-01-15"), (art.id, "2024-01-15")):
            client.post("/daily-logs", json={"student_id": student.id, "subject_id": subject_id, "date": day})

        r = client.get("/daily-logs/lookup", params={
            "student_id": student.id, "subject_id": art.id, "date": "2024-01-15",
        })
        assert r.status_code == 200
        assert r.json()["subject_id"] == art.id
        missing = client.get("/daily-logs/lookup", params={
            "student_id": student.id, "subject_id": art.id, "date": "2024-01-14",
        })
        assert missing.status_code == 404

        listed = client.get(f"/students/{student.id}/daily-logs").json()
        assert [(l["date"], l["subject_id"]) for l in listed] == [
            ("2024-01-15", art.id),
            ("2024-01-15", math.id),
            ("2024-01-14", math.id),
        ]
        only_math = client.get(f"/students/{student.id}/daily-logs", params={"subject_id": math.id}).json()
        assert [l["date"] for l in only_math] == ["2024-01-15", "2024-01-14"]


class TestStartup:
    def test_templates_seeded_when_enabled(self, monkeypatch, db):
        from fastapi.testclient import TestClient
        from sqlalchemy.orm import sessionmaker

        import daybook.main as main
        from daybook.services.metric_catalog import DEFAULT_TEMPLATES, list_templates

        monkeypatch.setattr(main.settings, "SEED_TEMPLATES_ON_STARTUP", True)
        monkeypatch.setattr(main, "SessionLocal", sessionmaker(bind=db.get_bind()))
        with TestClient(main.app):
            pass

        assert len(list_templates(db)) == len(DEFAULT_TEMPLATES)

    def test_templates_not_seeded_by_default(self, client, db):
        from daybook.services.metric_catalog import list_templates

        assert list_templates(db) == []
