from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from app.core.timeutils import utcnow
from app.db.base import Base


class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    code = Column(String(10), unique=True, index=True, nullable=False)  # upper-case
    teacher_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    is_published = Column(Boolean, default=False, nullable=False)
    enrollment_limit = Column(Integer, nullable=True)  # None - no limit
    # number of active enrollments, only changed through conditional UPDATEs
    enrolled_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    teacher = relationship("User", back_populates="courses_taught")
    enrollments = relationship(
        "Enrollment", back_populates="course", cascade="all, delete-orphan"
    )
    assignments = relationship(
        "Assignment", back_populates="course", cascade="all, delete-orphan"
    )

    @property
    def is_full(self) -> bool:
        if self.enrollment_limit is None:
            return False
        return self.enrolled_count >= self.enrollment_limit
