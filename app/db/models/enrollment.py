from sqlalchemy import Column, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship

from app.core.enums import EnrollmentStatus
from app.core.timeutils import utcnow
from app.db.base import Base, str_enum


class Enrollment(Base):
    __tablename__ = "enrollments"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(
        str_enum(EnrollmentStatus, "enrollment_status"),
        default=EnrollmentStatus.ACTIVE,
        nullable=False,
    )
    enrolled_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    dropped_at = Column(DateTime(timezone=True), nullable=True)

    # one row per pair for the whole history; dropping flips the status
    __table_args__ = (
        UniqueConstraint("course_id", "student_id", name="uq_enrollments_course_student"),
    )

    course = relationship("Course", back_populates="enrollments")
    student = relationship("User", back_populates="enrollments")
