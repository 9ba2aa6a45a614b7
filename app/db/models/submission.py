from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from app.core.enums import SubmissionStatus
from app.core.timeutils import utcnow
from app.db.base import Base, str_enum


class Submission(Base):
    __tablename__ = "submissions"

    id = Column(Integer, primary_key=True, index=True)
    assignment_id = Column(Integer, ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    content = Column(Text, nullable=False)
    # [{"filename": ..., "url": ..., "file_type": ..., "file_size": ...}]
    attachments = Column(JSON, nullable=False, default=list)
    status = Column(
        str_enum(SubmissionStatus, "submission_status"),
        default=SubmissionStatus.PENDING,
        nullable=False,
        index=True,
    )

    is_late = Column(Boolean, default=False, nullable=False)
    late_penalty = Column(Float, default=0, nullable=False)  # percent, 0..100
    submitted_at = Column(DateTime(timezone=True), nullable=True)

    # grading fields, empty until graded
    grade = Column(Float, nullable=True)
    feedback = Column(Text, nullable=True)
    graded_at = Column(DateTime(timezone=True), nullable=True)
    graded_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("assignment_id", "student_id", name="uq_submissions_assignment_student"),
    )

    assignment = relationship("Assignment", back_populates="submissions")
    student = relationship("User", foreign_keys=[student_id])
    grader = relationship("User", foreign_keys=[graded_by])

    @property
    def grade_percentage(self) -> float | None:
        if self.grade is None or self.assignment is None:
            return None
        return round(self.grade / self.assignment.total_points * 100, 2)
