# app/schemas/submission.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from app.core.enums import SubmissionStatus
from app.schemas.user import UserBrief


class Attachment(BaseModel):
    filename: str = Field(min_length=1, max_length=255)
    url: str
    file_type: Optional[str] = None
    file_size: Optional[int] = Field(default=None, ge=0)


class SubmissionCreate(BaseModel):
    content: str = Field(min_length=1, max_length=10000)
    attachments: List[Attachment] = []


class GradeIn(BaseModel):
    # range against total_points is checked when grading
    grade: float
    feedback: Optional[str] = Field(default=None, max_length=2000)


class SubmissionOut(BaseModel):
    id: int
    assignment_id: int
    student_id: int
    student: Optional[UserBrief] = None
    content: str
    attachments: List[Attachment] = []
    status: SubmissionStatus
    is_late: bool
    late_penalty: float
    submitted_at: Optional[datetime] = None
    grade: Optional[float] = None
    grade_percentage: Optional[float] = None
    feedback: Optional[str] = None
    graded_at: Optional[datetime] = None
    graded_by: Optional[int] = None

    class Config:
        from_attributes = True
