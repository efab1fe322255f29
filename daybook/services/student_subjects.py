"""
Which subjects each student studies.
"""
from __future__ import annotations

import structlog
from sqlalchemy import select
from sqlalchemy.orm import Session

from daybook.core.errors import ConflictError, NotFoundError
from daybook.models.student import Student
from daybook.models.student_subject import StudentSubject
from daybook.models.subject import Subject
from daybook.services.family_records import require_student, require_subject
from daybook.services.result import guarded_operation

logger = structlog.get_logger(__name__)

ALREADY_ASSIGNED = "Subject is already assigned to this student."


def list_subjects_for_student(db: Session, student_id: int) -> list[Subject]:
    stmt = (
        select(Subject)
        .join(StudentSubject, StudentSubject.subject_id == Subject.id)
        .where(StudentSubject.student_id == student_id)
        .order_by(Subject.name)
    )
    return list(db.scalars(stmt).all())


def list_students_for_subject(db: Session, subject_id: int) -> list[Student]:
    stmt = (
        select(Student)
        .join(StudentSubject, StudentSubject.student_id == Student.id)
        .where(StudentSubject.subject_id == subject_id)
        .order_by(Student.name)
    )
    return list(db.scalars(stmt).all())


def _find(db: Session, student_id: int, subject_id: int) -> StudentSubject | None:
    stmt = select(StudentSubject).where(
        StudentSubject.student_id == student_id,
        StudentSubject.subject_id == subject_id,
    )
    return db.scalars(stmt).first()


def student_has_subject(db: Session, student_id: int, subject_id: int) -> bool:
    return _find(db, student_id, subject_id) is not None


@guarded_operation("Subject assigned successfully!", conflict_message=ALREADY_ASSIGNED)
def assign_subject(db: Session, student_id: int, subject_id: int) -> StudentSubject:
    require_student(db, student_id)
    require_subject(db, subject_id)
    if _find(db, student_id, subject_id) is not None:
        raise ConflictError(ALREADY_ASSIGNED)

    link = StudentSubject(student_id=student_id, subject_id=subject_id)
    db.add(link)
    db.flush()
    logger.info("subject_assigned", student_id=student_id, subject_id=subject_id)
    return link


@guarded_operation("Subject removed successfully!")
def remove_subject(db: Session, student_id: int, subject_id: int) -> None:
    link = _find(db, student_id, subject_id)
    if link is None:
        raise NotFoundError("StudentSubject", message="Subject assignment not found.")
    db.delete(link)
    logger.info("subject_unassigned", student_id=student_id, subject_id=subject_id)
