"""
Subjects router.

GET    /subjects/{subject_id}
PUT    /subjects/{subject_id}
DELETE /subjects/{subject_id}            # cascades to its logs and metric overrides
GET    /subjects/{subject_id}/students
"""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from daybook.core.errors import NotFoundError
from daybook.db.base import get_db
from daybook.schemas.common import MessageResponse
from daybook.schemas.family import StudentOut, SubjectOut, SubjectRequest
from daybook.services import family_records, student_subjects
from daybook.services.family_records import SubjectData

router = APIRouter(prefix="/subjects", tags=["subjects"])


@router.get("/{subject_id}", response_model=SubjectOut)
def get_subject(subject_id: int, db: Session = Depends(get_db)):
    subject = family_records.get_subject(db, subject_id)
    if subject is None:
        raise NotFoundError("Subject", subject_id)
    return SubjectOut.model_validate(subject)


@router.put("/{subject_id}", response_model=SubjectOut)
def update_subject(subject_id: int, payload: SubjectRequest, db: Session = Depends(get_db)):
    data = SubjectData(name=payload.name, description=payload.description)
    subject = family_records.update_subject(db, subject_id, data).unwrap()
    return SubjectOut.model_validate(subject)


@router.delete("/{subject_id}", response_model=MessageResponse)
def delete_subject(subject_id: int, db: Session = Depends(get_db)):
    result = family_records.delete_subject(db, subject_id)
    result.unwrap()
    return MessageResponse(message=result.message)


@router.get("/{subject_id}/students", response_model=list[StudentOut])
def list_subject_students(subject_id: int, db: Session = Depends(get_db)):
    students = student_subjects.list_students_for_subject(db, subject_id)
    return [StudentOut.model_validate(s) for s in students]
