# app/schemas/course.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from app.core.enums import EnrollmentStatus
from app.schemas.user import UserBrief

CODE_PATTERN = r"^[A-Z0-9]{3,10}$"


class CourseBase(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(default="", max_length=2000)
    code: str = Field(pattern=CODE_PATTERN)
    is_active: bool = True
    is_published: bool = False
    enrollment_limit: Optional[int] = Field(default=None, ge=1)

    @field_validator("code", mode="before")
    @classmethod
    def normalize_code(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value


class CourseCreate(CourseBase):
    pass


class CourseUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    code: Optional[str] = Field(default=None, pattern=CODE_PATTERN)
    is_active: Optional[bool] = None
    is_published: Optional[bool] = None
    enrollment_limit: Optional[int] = Field(default=None, ge=1)
    teacher_id: Optional[int] = None

    @field_validator("code", mode="before")
    @classmethod
    def normalize_code(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value


class CourseOut(BaseModel):
    id: int
    title: str
    description: str
    code: str
    teacher_id: int
    teacher: Optional[UserBrief] = None
    is_active: bool
    is_published: bool
    enrollment_limit: Optional[int] = None
    enrolled_count: int
    is_full: bool
    is_enrolled: Optional[bool] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class EnrollmentOut(BaseModel):
    id: int
    course_id: int
    student_id: int
    status: EnrollmentStatus
    enrolled_at: datetime
    dropped_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RosterEntry(BaseModel):
    enrollment_id: int
    enrolled_at: datetime
    student: UserBrief


class CourseStats(BaseModel):
    total: int
    published: int
    active: int
    enrolled_students: int
