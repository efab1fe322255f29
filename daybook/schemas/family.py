"""
Family, student and subject schemas.
"""
from datetime import date, datetime
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

Name = Annotated[str, Field(min_length=1, max_length=200)]


class _NamedRequest(BaseModel):
    name: Name

    @field_validator("name", mode="before")
    @classmethod
    def strip_and_check_empty(cls, v: str) -> str:
        stripped = v.strip() if isinstance(v, str) else v
        if not stripped:
            raise ValueError("name must not be empty after stripping whitespace")
        return stripped


class FamilyRequest(_NamedRequest):
    pass


class FamilyOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    created_at: Optional[datetime] = None


class StudentRequest(_NamedRequest):
    date_of_birth: Optional[date] = Field(default=None, examples=["2015-09-01"])
    notes: Optional[str] = Field(default=None, max_length=2000)


class StudentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    family_id: int
    name: str
    date_of_birth: Optional[date] = None
    notes: Optional[str] = None


class SubjectRequest(_NamedRequest):
    description: Optional[str] = Field(default=None, max_length=2000)


class SubjectOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    family_id: int
    name: str
    description: Optional[str] = None
