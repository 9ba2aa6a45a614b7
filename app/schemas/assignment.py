# app/schemas/assignment.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.core.enums import AssignmentStatus


class AssignmentCreate(BaseModel):
    course_id: int
    title: str = Field(min_length=1, max_length=100)
    description: str = Field(default="", max_length=2000)
    instructions: Optional[str] = Field(default=None, max_length=3000)
    due_date: datetime
    total_points: int = Field(default=100, ge=1, le=1000)
    late_penalty_per_day: float = Field(default=0, ge=0, le=100)


class AssignmentUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=2000)
    instructions: Optional[str] = Field(default=None, max_length=3000)
    due_date: Optional[datetime] = None
    total_points: Optional[int] = Field(default=None, ge=1, le=1000)
    late_penalty_per_day: Optional[float] = Field(default=None, ge=0, le=100)


class AssignmentOut(BaseModel):
    id: int
    course_id: int
    title: str
    description: str
    instructions: Optional[str] = None
    due_date: datetime
    total_points: int
    late_penalty_per_day: float
    status: AssignmentStatus
    is_overdue: bool
    created_by: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class AssignmentStats(BaseModel):
    total: int
    draft: int
    published: int
    closed: int
    submissions: int
    graded: int
    average_grade_percentage: Optional[float] = None
