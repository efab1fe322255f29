"""
Families, students and subjects.

Deletes rely on the store's ON DELETE CASCADE graph: a family takes its
students, subjects and custom metrics with it; a student or subject takes
its daily logs, assignments and metric configuration.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Optional

import structlog
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from daybook.core.errors import NotFoundError
from daybook.models.family import Family
from daybook.models.student import Student
from daybook.models.subject import Subject
from daybook.services.result import guarded_operation

logger = structlog.get_logger(__name__)


@dataclass
class StudentData:
    name: str
    date_of_birth: Optional[date] = None
    notes: Optional[str] = None


@dataclass
class SubjectData:
    name: str
    description: Optional[str] = None


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def require_family(db: Session, family_id: int) -> Family:
    family = db.get(Family, family_id)
    if family is None:
        raise NotFoundError("Family", family_id)
    return family


def require_student(db: Session, student_id: int) -> Student:
    student = db.get(Student, student_id)
    if student is None:
        raise NotFoundError("Student", student_id)
    return student


def require_subject(db: Session, subject_id: int) -> Subject:
    subject = db.get(Subject, subject_id)
    if subject is None:
        raise NotFoundError("Subject", subject_id)
    return subject


# ---------------------------------------------------------------------------
# Families
# ---------------------------------------------------------------------------

def get_family(db: Session, family_id: int) -> Optional[Family]:
    return db.get(Family, family_id)


@guarded_operation("Family created successfully!")
def create_family(db: Session, name: str) -> Family:
    family = Family(name=name)
    db.add(family)
    db.flush()
    logger.info("family_created", family_id=family.id)
    return family


@guarded_operation("Family updated successfully!")
def update_family(db: Session, family_id: int, name: str) -> Family:
    family = require_family(db, family_id)
    family.name = name
    family.updated_at = _utcnow()
    return family


@guarded_operation("Family deleted successfully!")
def delete_family(db: Session, family_id: int) -> None:
    family = require_family(db, family_id)
    db.delete(family)
    logger.info("family_deleted", family_id=family_id)


# ---------------------------------------------------------------------------
# Students
# ---------------------------------------------------------------------------

def list_students(db: Session, family_id: int) -> list[Student]:
    stmt = select(Student).where(Student.family_id == family_id).order_by(Student.name)
    return list(db.scalars(stmt).all())


def get_student(db: Session, student_id: int) -> Optional[Student]:
    return db.get(Student, student_id)


@guarded_operation("Student created successfully!")
def create_student(db: Session, family_id: int, data: StudentData) -> Student:
    require_family(db, family_id)
    student = Student(
        family_id=family_id,
        name=data.name,
        date_of_birth=data.date_of_birth,
        notes=data.notes,
    )
    db.add(student)
    db.flush()
    logger.info("student_created", student_id=student.id, family_id=family_id)
    return student


@guarded_operation("Student updated successfully!")
def update_student(db: Session, student_id: int, data: StudentData) -> Student:
    student = require_student(db, student_id)
    student.name = data.name
    student.date_of_birth = data.date_of_birth
    student.notes = data.notes
    student.updated_at = _utcnow()
    return student


@guarded_operation("Student deleted successfully!")
def delete_student(db: Session, student_id: int) -> None:
    student = require_student(db, student_id)
    db.delete(student)
    logger.info("student_deleted", student_id=student_id)


# ---------------------------------------------------------------------------
# Subjects
# ---------------------------------------------------------------------------

def list_subjects(db: Session, family_id: int) -> list[Subject]:
    stmt = (
        select(Subject)
        .where(Subject.family_id == family_id)
        .order_by(func.lower(Subject.name))
    )
    return list(db.scalars(stmt).all())


def get_subject(db: Session, subject_id: int) -> Optional[Subject]:
    return db.get(Subject, subject_id)


@guarded_operation("Subject created successfully!")
def create_subject(db: Session, family_id: int, data: SubjectData) -> Subject:
    require_family(db, family_id)
    subject = Subject(family_id=family_id, name=data.name, description=data.description)
    db.add(subject)
    db.flush()
    logger.info("subject_created", subject_id=subject.id, family_id=family_id)
    return subject


@guarded_operation("Subject updated successfully!")
def update_subject(db: Session, subject_id: int, data: SubjectData) -> Subject:
    subject = require_subject(db, subject_id)
    subject.name = data.name
    subject.description = data.description
    subject.updated_at = _utcnow()
    return subject


@guarded_operation("Subject deleted successfully!")
def delete_subject(db: Session, subject_id: int) -> None:
    subject = require_subject(db, subject_id)
    db.delete(subject)
    logger.info("subject_deleted", subject_id=subject_id)
