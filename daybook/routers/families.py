"""
Families router.

POST   /families
GET    /families/{family_id}
PUT    /families/{family_id}
DELETE /families/{family_id}                # cascades to students, subjects, custom metrics
GET    /families/{family_id}/students
POST   /families/{family_id}/students
GET    /families/{family_id}/subjects
POST   /families/{family_id}/subjects
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from daybook.core.errors import NotFoundError
from daybook.db.base import get_db
from daybook.schemas.common import ErrorResponse, MessageResponse
from daybook.schemas.family import (
    FamilyOut,
    FamilyRequest,
    StudentOut,
    StudentRequest,
    SubjectOut,
    SubjectRequest,
)
from daybook.services import family_records
from daybook.services.family_records import StudentData, SubjectData

router = APIRouter(prefix="/families", tags=["families"])


@router.post(
    "",
    response_model=FamilyOut,
    status_code=status.HTTP_201_CREATED,
    summary="Register a family",
)
def create_family(payload: FamilyRequest, db: Session = Depends(get_db)):
    family = family_records.create_family(db, payload.name).unwrap()
    return FamilyOut.model_validate(family)


@router.get(
    "/{family_id}",
    response_model=FamilyOut,
    responses={404: {"model": ErrorResponse, "description": "Unknown family."}},
)
def get_family(family_id: int, db: Session = Depends(get_db)):
    family = family_records.get_family(db, family_id)
    if family is None:
        raise NotFoundError("Family", family_id)
    return FamilyOut.model_validate(family)


@router.put("/{family_id}", response_model=FamilyOut)
def update_family(family_id: int, payload: FamilyRequest, db: Session = Depends(get_db)):
    family = family_records.update_family(db, family_id, payload.name).unwrap()
    return FamilyOut.model_validate(family)


@router.delete(
    "/{family_id}",
    response_model=MessageResponse,
    summary="Delete a family and everything it owns",
)
def delete_family(family_id: int, db: Session = Depends(get_db)):
    """Students, subjects, custom metrics and all their logs go with it. Templates stay."""
    result = family_records.delete_family(db, family_id)
    result.unwrap()
    return MessageResponse(message=result.message)


# ---------------------------------------------------------------------------
# Students / subjects owned by the family
# ---------------------------------------------------------------------------

@router.get("/{family_id}/students", response_model=list[StudentOut])
def list_students(family_id: int, db: Session = Depends(get_db)):
    return [StudentOut.model_validate(s) for s in family_records.list_students(db, family_id)]


@router.post("/{family_id}/students", response_model=StudentOut, status_code=status.HTTP_201_CREATED)
def create_student(family_id: int, payload: StudentRequest, db: Session = Depends(get_db)):
    data = StudentData(name=payload.name, date_of_birth=payload.date_of_birth, notes=payload.notes)
    student = family_records.create_student(db, family_id, data).unwrap()
    return StudentOut.model_validate(student)


@router.get("/{family_id}/subjects", response_model=list[SubjectOut])
def list_subjects(family_id: int, db: Session = Depends(get_db)):
    return [SubjectOut.model_validate(s) for s in family_records.list_subjects(db, family_id)]


@router.post("/{family_id}/subjects", response_model=SubjectOut, status_code=status.HTTP_201_CREATED)
def create_subject(family_id: int, payload: SubjectRequest, db: Session = Depends(get_db)):
    data = SubjectData(name=payload.name, description=payload.description)
    subject = family_records.create_subject(db, family_id, data).unwrap()
    return SubjectOut.model_validate(subject)
