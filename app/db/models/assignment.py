from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from app.core.enums import AssignmentStatus
from app.core.timeutils import ensure_utc, utcnow
from app.db.base import Base, str_enum


class Assignment(Base):
    __tablename__ = "assignments"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False, default="")
    instructions = Column(Text, nullable=True)
    due_date = Column(DateTime(timezone=True), nullable=False, index=True)
    total_points = Column(Integer, default=100, nullable=False)  # 1..1000
    late_penalty_per_day = Column(Float, default=0, nullable=False)  # percent
    status = Column(
        str_enum(AssignmentStatus, "assignment_status"),
        default=AssignmentStatus.DRAFT,
        nullable=False,
        index=True,
    )
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    course = relationship("Course", back_populates="assignments")
    submissions = relationship(
        "Submission", back_populates="assignment", cascade="all, delete-orphan"
    )

    @property
    def is_overdue(self) -> bool:
        return ensure_utc(self.due_date) < utcnow() and self.status != AssignmentStatus.CLOSED
