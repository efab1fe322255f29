"""
Shared pytest fixtures.

Uses an in-memory SQLite database so no Postgres is required for tests.
Tables are rebuilt for every test; SQLite foreign keys are switched on by
the engine listener in daybook.db.base, so cascades behave as in Postgres.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from daybook.db.base import Base, get_db
from daybook.main import app
from daybook.models import Family, Metric, MetricType, Student, StudentMetric, Subject

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def create_tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(db):
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Record factories
# ---------------------------------------------------------------------------

@pytest.fixture()
def family(db):
    fam = Family(name="Rivera")
    db.add(fam)
    db.commit()
    return fam


@pytest.fixture()
def make_student(db, family):
    def _make(name="Ana", family_id=None):
        student = Student(family_id=family_id or family.id, name=name)
        db.add(student)
        db.commit()
        return student
    return _make


@pytest.fixture()
def make_subject(db, family):
    def _make(name="Math", family_id=None):
        subject = Subject(family_id=family_id or family.id, name=name)
        db.add(subject)
        db.commit()
        return subject
    return _make


@pytest.fixture()
def make_metric(db, family):
    def _make(
        name="Completed",
        metric_type=MetricType.boolean,
        is_template=False,
        category=None,
        possible_values=None,
        numeric_config=None,
        family_id=None,
    ):
        metric = Metric(
            family_id=None if is_template else (family_id or family.id),
            name=name,
            metric_type=metric_type,
            is_template=is_template,
            category=category,
            possible_values=possible_values,
            numeric_config=numeric_config,
        )
        db.add(metric)
        db.commit()
        return metric
    return _make


@pytest.fixture()
def enable_metric(db):
    """Switch a metric on at student level."""
    def _enable(student, metric, applies_to_all_subjects=True):
        row = StudentMetric(
            student_id=student.id,
            metric_id=metric.id,
            is_enabled=True,
            applies_to_all_subjects=applies_to_all_subjects,
        )
        db.add(row)
        db.commit()
        return row
    return _enable
