import logging

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from app.core.enums import AssignmentAction, AssignmentStatus, EnrollmentStatus, SubmissionStatus
from app.core.errors import Conflict, Forbidden, NotFound, ValidationError
from app.core.policies import is_student, is_teacher, next_assignment_status, owns_assignment, owns_course
from app.core.timeutils import ensure_utc
from app.crud.base import paginate, search_pattern
from app.crud.course import get_course_or_404, is_enrolled
from app.db.models.assignment import Assignment
from app.db.models.course import Course
from app.db.models.enrollment import Enrollment
from app.db.models.submission import Submission

logger = logging.getLogger(__name__)


def get_assignment_or_404(db: Session, assignment_id: int) -> Assignment:
    assignment = db.get(Assignment, assignment_id)
    if assignment is None:
        raise NotFound("Assignment not found")
    return assignment


def get_owned_assignment(db: Session, actor, assignment_id: int) -> Assignment:
    assignment = get_assignment_or_404(db, assignment_id)
    if not owns_assignment(assignment, actor):
        raise Forbidden("Not authorized to manage this assignment")
    return assignment


def list_assignments(
    db: Session,
    viewer,
    *,
    course_id: int | None = None,
    status: AssignmentStatus | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 10,
):
    query = db.query(Assignment).join(Course, Course.id == Assignment.course_id)

    if is_teacher(viewer):
        query = query.filter(Course.teacher_id == viewer.id)
    else:
        query = query.join(
            Enrollment,
            (Enrollment.course_id == Assignment.course_id)
            & (Enrollment.student_id == viewer.id)
            & (Enrollment.status == EnrollmentStatus.ACTIVE),
        ).filter(Assignment.status != AssignmentStatus.DRAFT)

    if course_id is not None:
        query = query.filter(Assignment.course_id == course_id)
    if status is not None:
        query = query.filter(Assignment.status == status)
    if search:
        pattern = search_pattern(search)
        query = query.filter(
            or_(
                Assignment.title.ilike(pattern, escape="\\"),
                Assignment.description.ilike(pattern, escape="\\"),
            )
        )

    query = query.order_by(Assignment.due_date.asc(), Assignment.id.asc())
    return paginate(query, page, limit)


def get_assignment_for_viewer(db: Session, viewer, assignment_id: int) -> Assignment:
    assignment = get_assignment_or_404(db, assignment_id)
    if owns_assignment(assignment, viewer):
        return assignment
    if is_student(viewer) and is_enrolled(db, assignment.course_id, viewer.id):
        if assignment.status == AssignmentStatus.DRAFT:
            raise NotFound("Assignment not found")
        return assignment
    raise Forbidden("Not authorized to view this assignment")


def create_assignment(db: Session, teacher, assignment_data) -> Assignment:
    course = get_course_or_404(db, assignment_data.course_id)
    if not owns_course(course, teacher):
        raise Forbidden("Not authorized to add assignments to this course")

    values = assignment_data.model_dump()
    values["due_date"] = ensure_utc(values["due_date"])
    assignment = Assignment(**values, created_by=teacher.id, status=AssignmentStatus.DRAFT)
    db.add(assignment)
    db.commit()
    db.refresh(assignment)
    logger.info("Assignment id=%s created in course id=%s", assignment.id, course.id)
    return assignment


def update_assignment(db: Session, actor, assignment_id: int, assignment_data) -> Assignment:
    assignment = get_owned_assignment(db, actor, assignment_id)

    changes = assignment_data.model_dump(exclude_unset=True)
    for field in ("title", "description", "due_date", "total_points", "late_penalty_per_day"):
        if field in changes and changes[field] is None:
            raise ValidationError(f"{field} cannot be null")

    if "total_points" in changes:
        highest = (
            db.query(func.max(Submission.grade))
            .filter(Submission.assignment_id == assignment.id)
            .scalar()
        )
        if highest is not None and changes["total_points"] < highest:
            raise ValidationError(
                f"total_points cannot be lower than an existing grade of {highest:g}"
            )
    if "due_date" in changes:
        changes["due_date"] = ensure_utc(changes["due_date"])

    for field, value in changes.items():
        setattr(assignment, field, value)
    db.commit()
    db.refresh(assignment)
    return assignment


def delete_assignment(db: Session, actor, assignment_id: int) -> None:
    assignment = get_owned_assignment(db, actor, assignment_id)
    submissions = (
        db.query(func.count(Submission.id))
        .filter(Submission.assignment_id == assignment.id)
        .scalar()
    )
    if submissions:
        raise Conflict(f"Assignment has {submissions} submissions and cannot be deleted")
    db.delete(assignment)
    db.commit()
    logger.info("Assignment id=%s deleted", assignment_id)


def transition(db: Session, actor, assignment_id: int, action: AssignmentAction) -> Assignment:
    assignment = get_owned_assignment(db, actor, assignment_id)
    new_status = next_assignment_status(assignment.status, action)

    # compare-and-set so two concurrent transitions cannot both apply
    updated = (
        db.query(Assignment)
        .filter(Assignment.id == assignment.id, Assignment.status == assignment.status)
        .update({Assignment.status: new_status}, synchronize_session=False)
    )
    if not updated:
        db.rollback()
        raise Conflict("Assignment status changed concurrently, reload and retry")
    db.commit()
    db.refresh(assignment)
    logger.info("Assignment id=%s is now %s", assignment.id, new_status.value)
    return assignment


def publish(db: Session, actor, assignment_id: int) -> Assignment:
    return transition(db, actor, assignment_id, AssignmentAction.PUBLISH)


def close(db: Session, actor, assignment_id: int) -> Assignment:
    return transition(db, actor, assignment_id, AssignmentAction.CLOSE)


def assignment_stats(db: Session, teacher) -> dict:
    owned = (
        select(Assignment.id)
        .join(Course, Course.id == Assignment.course_id)
        .where(Course.teacher_id == teacher.id)
    )
    by_status = dict(
        db.query(Assignment.status, func.count(Assignment.id))
        .join(Course, Course.id == Assignment.course_id)
        .filter(Course.teacher_id == teacher.id)
        .group_by(Assignment.status)
        .all()
    )

    submissions = db.query(Submission).filter(Submission.assignment_id.in_(owned))
    graded = submissions.filter(Submission.status == SubmissionStatus.GRADED).all()
    percentages = [s.grade_percentage for s in graded if s.grade_percentage is not None]

    return {
        "total": sum(by_status.values()),
        "draft": by_status.get(AssignmentStatus.DRAFT, 0),
        "published": by_status.get(AssignmentStatus.PUBLISHED, 0),
        "closed": by_status.get(AssignmentStatus.CLOSED, 0),
        "submissions": submissions.count(),
        "graded": len(graded),
        "average_grade_percentage": (
            round(sum(percentages) / len(percentages), 2) if percentages else None
        ),
    }
