import logging

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from app.core.enums import EnrollmentStatus
from app.core.errors import (
    CapacityExceeded,
    Conflict,
    Forbidden,
    InvalidOwner,
    NotFound,
    ValidationError,
)
from app.core.policies import is_student, is_teacher, owns_course
from app.core.timeutils import utcnow
from app.crud.base import paginate, search_pattern
from app.crud.user import get_active_teacher
from app.db.models.course import Course
from app.db.models.enrollment import Enrollment
from app.db.models.team import Team

logger = logging.getLogger(__name__)


def get_course_or_404(db: Session, course_id: int) -> Course:
    course = db.get(Course, course_id)
    if course is None:
        raise NotFound("Course not found")
    return course


def is_open_for_students(course: Course) -> bool:
    return course.is_active and course.is_published


def get_active_enrollment(db: Session, course_id: int, student_id: int):
    return (
        db.query(Enrollment)
        .filter(
            Enrollment.course_id == course_id,
            Enrollment.student_id == student_id,
            Enrollment.status == EnrollmentStatus.ACTIVE,
        )
        .first()
    )


def is_enrolled(db: Session, course_id: int, student_id: int) -> bool:
    return get_active_enrollment(db, course_id, student_id) is not None


def enrolled_course_ids(db: Session, student_id: int, course_ids=None) -> set[int]:
    query = db.query(Enrollment.course_id).filter(
        Enrollment.student_id == student_id,
        Enrollment.status == EnrollmentStatus.ACTIVE,
    )
    if course_ids is not None:
        query = query.filter(Enrollment.course_id.in_(course_ids))
    return {row[0] for row in query.all()}


def count_active_enrollments(db: Session, course_id: int) -> int:
    return (
        db.query(func.count(Enrollment.id))
        .filter(
            Enrollment.course_id == course_id,
            Enrollment.status == EnrollmentStatus.ACTIVE,
        )
        .scalar()
    )


def list_courses(
    db: Session,
    viewer=None,
    *,
    search: str | None = None,
    teacher_id: int | None = None,
    my: bool = False,
    page: int = 1,
    limit: int = 10,
):
    query = db.query(Course).options(joinedload(Course.teacher))

    if my and is_teacher(viewer):
        query = query.filter(Course.teacher_id == viewer.id)
    elif my and is_student(viewer):
        query = query.join(Enrollment, Enrollment.course_id == Course.id).filter(
            Enrollment.student_id == viewer.id,
            Enrollment.status == EnrollmentStatus.ACTIVE,
        )
    elif is_teacher(viewer):
        # other teachers' drafts stay hidden
        query = query.filter(
            or_(
                Course.teacher_id == viewer.id,
                (Course.is_active.is_(True)) & (Course.is_published.is_(True)),
            )
        )
    else:
        query = query.filter(Course.is_active.is_(True), Course.is_published.is_(True))

    if teacher_id is not None:
        query = query.filter(Course.teacher_id == teacher_id)

    if search:
        pattern = search_pattern(search)
        query = query.filter(
            or_(
                Course.title.ilike(pattern, escape="\\"),
                Course.description.ilike(pattern, escape="\\"),
                Course.code.ilike(pattern, escape="\\"),
            )
        )

    query = query.order_by(Course.created_at.desc(), Course.id.desc())
    return paginate(query, page, limit)


def get_course_for_viewer(db: Session, viewer, course_id: int) -> Course:
    course = get_course_or_404(db, course_id)
    if not is_open_for_students(course) and not owns_course(course, viewer):
        raise NotFound("Course not found")
    return course


def create_course(db: Session, teacher, course_data) -> Course:
    if not is_teacher(teacher) or not teacher.is_active:
        raise InvalidOwner("Only an active teacher can own a course")
    if db.query(Course.id).filter(Course.code == course_data.code).first():
        raise Conflict(f"Course code {course_data.code} already exists")

    course = Course(**course_data.model_dump(), teacher_id=teacher.id)
    db.add(course)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict(f"Course code {course_data.code} already exists")
    db.refresh(course)
    logger.info("Course %s (id=%s) created by teacher id=%s", course.code, course.id, teacher.id)
    return course


def update_course(db: Session, actor, course_id: int, course_data) -> Course:
    course = get_course_or_404(db, course_id)
    if not owns_course(course, actor):
        raise Forbidden("Not authorized to update this course")

    changes = course_data.model_dump(exclude_unset=True)
    for field in ("title", "description", "code", "is_active", "is_published", "teacher_id"):
        if field in changes and changes[field] is None:
            raise ValidationError(f"{field} cannot be null")

    new_code = changes.get("code")
    if new_code and new_code != course.code:
        taken = db.query(Course.id).filter(Course.code == new_code, Course.id != course.id).first()
        if taken:
            raise Conflict(f"Course code {new_code} already exists")

    new_teacher_id = changes.get("teacher_id")
    if new_teacher_id is not None and new_teacher_id != course.teacher_id:
        if get_active_teacher(db, new_teacher_id) is None:
            raise InvalidOwner("teacher_id must reference an active teacher")

    new_limit = changes.get("enrollment_limit")
    if new_limit is not None:
        del changes["enrollment_limit"]
        # enrolled_count <= enrollment_limit must hold after the write
        applied = (
            db.query(Course)
            .filter(Course.id == course.id, Course.enrolled_count <= new_limit)
            .update({Course.enrollment_limit: new_limit}, synchronize_session=False)
        )
        if not applied:
            db.rollback()
            db.refresh(course)
            raise ValidationError(
                f"Enrollment limit cannot be lower than the {course.enrolled_count} enrolled students"
            )

    for field, value in changes.items():
        setattr(course, field, value)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Course code already exists")
    db.refresh(course)
    return course


def delete_course(db: Session, actor, course_id: int) -> None:
    course = get_course_or_404(db, course_id)
    if not owns_course(course, actor):
        raise Forbidden("Not authorized to delete this course")

    active = count_active_enrollments(db, course.id)
    if active > 0:
        raise Conflict(f"Course has {active} active enrollments and cannot be deleted")

    db.query(Team).filter(Team.course_id == course.id).update(
        {Team.course_id: None}, synchronize_session=False
    )
    db.delete(course)
    db.commit()
    logger.info("Course id=%s deleted by teacher id=%s", course_id, actor.id)


def enroll(db: Session, student, course_id: int) -> Enrollment:
    """
    Enroll a student, claiming a seat with a single conditional UPDATE.

    The seat claim and the enrollment row are committed together; the unique
    (course_id, student_id) constraint rejects a concurrent duplicate and the
    rollback releases the seat again.
    """
    if not is_student(student):
        raise Forbidden("Only students can enroll in courses")

    course = db.get(Course, course_id)
    if course is None or not is_open_for_students(course):
        raise NotFound("Course not found")

    existing = (
        db.query(Enrollment)
        .filter(Enrollment.course_id == course_id, Enrollment.student_id == student.id)
        .first()
    )
    if existing is not None and existing.status == EnrollmentStatus.ACTIVE:
        raise Conflict("Already enrolled in this course")

    claimed = (
        db.query(Course)
        .filter(
            Course.id == course_id,
            or_(
                Course.enrollment_limit.is_(None),
                Course.enrolled_count < Course.enrollment_limit,
            ),
        )
        .update({Course.enrolled_count: Course.enrolled_count + 1}, synchronize_session=False)
    )
    if not claimed:
        db.rollback()
        logger.info("Enrollment rejected, course id=%s is full", course_id)
        raise CapacityExceeded("Course is full")

    if existing is not None:
        reactivated = (
            db.query(Enrollment)
            .filter(Enrollment.id == existing.id, Enrollment.status == EnrollmentStatus.DROPPED)
            .update(
                {
                    Enrollment.status: EnrollmentStatus.ACTIVE,
                    Enrollment.enrolled_at: utcnow(),
                    Enrollment.dropped_at: None,
                },
                synchronize_session=False,
            )
        )
        if not reactivated:
            db.rollback()
            raise Conflict("Already enrolled in this course")
        enrollment = existing
    else:
        enrollment = Enrollment(course_id=course_id, student_id=student.id)
        db.add(enrollment)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Already enrolled in this course")

    db.refresh(enrollment)
    logger.info("Student id=%s enrolled in course id=%s", student.id, course_id)
    return enrollment


def unenroll(db: Session, student, course_id: int) -> Enrollment:
    enrollment = get_active_enrollment(db, course_id, student.id)
    if enrollment is None:
        raise NotFound("Not enrolled in this course")

    dropped = (
        db.query(Enrollment)
        .filter(Enrollment.id == enrollment.id, Enrollment.status == EnrollmentStatus.ACTIVE)
        .update(
            {Enrollment.status: EnrollmentStatus.DROPPED, Enrollment.dropped_at: utcnow()},
            synchronize_session=False,
        )
    )
    if not dropped:
        db.rollback()
        raise NotFound("Not enrolled in this course")

    db.query(Course).filter(Course.id == course_id, Course.enrolled_count > 0).update(
        {Course.enrolled_count: Course.enrolled_count - 1}, synchronize_session=False
    )
    db.commit()
    db.refresh(enrollment)
    logger.info("Student id=%s dropped course id=%s", student.id, course_id)
    return enrollment


def list_roster(db: Session, actor, course_id: int):
    course = get_course_or_404(db, course_id)
    if not owns_course(course, actor):
        raise Forbidden("Not authorized to view this roster")
    return (
        db.query(Enrollment)
        .options(joinedload(Enrollment.student))
        .filter(
            Enrollment.course_id == course_id,
            Enrollment.status == EnrollmentStatus.ACTIVE,
        )
        .order_by(Enrollment.enrolled_at, Enrollment.id)
        .all()
    )


def course_stats(db: Session, teacher) -> dict:
    base = db.query(Course).filter(Course.teacher_id == teacher.id)
    return {
        "total": base.count(),
        "published": base.filter(Course.is_published.is_(True)).count(),
        "active": base.filter(Course.is_active.is_(True)).count(),
        "enrolled_students": (
            db.query(func.coalesce(func.sum(Course.enrolled_count), 0))
            .filter(Course.teacher_id == teacher.id)
            .scalar()
        ),
    }
