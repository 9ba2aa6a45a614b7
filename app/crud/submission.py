import logging
import math
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session, joinedload

from app.core.enums import AssignmentStatus, SubmissionStatus
from app.core.errors import Forbidden, InvalidState, NotFound, OutOfRange
from app.core.policies import is_submission_author, is_teacher, owns_assignment, owns_submission_course
from app.core.timeutils import ensure_utc, utcnow
from app.crud.assignment import get_assignment_or_404, get_owned_assignment
from app.crud.base import paginate
from app.crud.course import is_enrolled
from app.db.models.assignment import Assignment
from app.db.models.course import Course
from app.db.models.submission import Submission

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60

_UPSERT_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


def late_penalty(assignment: Assignment, submitted_at: datetime) -> tuple[bool, float]:
    """Return ``(is_late, penalty_percent)``; every started day late costs the daily rate."""
    due = ensure_utc(assignment.due_date)
    if submitted_at <= due:
        return False, 0.0
    days_late = math.ceil((submitted_at - due).total_seconds() / SECONDS_PER_DAY)
    return True, min(100.0, days_late * assignment.late_penalty_per_day)


def get_submission_or_404(db: Session, submission_id: int) -> Submission:
    submission = db.get(Submission, submission_id)
    if submission is None:
        raise NotFound("Submission not found")
    return submission


def _upsert_statement(db: Session, values: dict):
    dialect = db.get_bind().dialect.name
    try:
        insert = _UPSERT_INSERTS[dialect]
    except KeyError:
        raise RuntimeError(f"Submission upsert is not supported on {dialect}")

    table = Submission.__table__
    stmt = insert(table).values(**values)
    overwrite = ("content", "attachments", "status", "is_late", "late_penalty", "submitted_at", "updated_at")
    return stmt.on_conflict_do_update(
        index_elements=[table.c.assignment_id, table.c.student_id],
        set_={name: stmt.excluded[name] for name in overwrite},
    )


def submit(db: Session, student, assignment_id: int, submission_data) -> Submission:
    """
    Create or overwrite the student's single submission for an assignment.

    One INSERT ... ON CONFLICT DO UPDATE on the (assignment_id, student_id)
    unique key, so concurrent resubmissions never produce a second row.
    Grade fields survive a resubmission until the teacher grades again.
    """
    assignment = get_assignment_or_404(db, assignment_id)
    if assignment.status != AssignmentStatus.PUBLISHED:
        raise InvalidState(f"Assignment is {assignment.status.value}, submissions are not accepted")
    if not is_enrolled(db, assignment.course_id, student.id):
        raise Forbidden("Not enrolled in this course")

    now = utcnow()
    is_late, penalty = late_penalty(assignment, now)
    values = {
        "assignment_id": assignment.id,
        "student_id": student.id,
        "content": submission_data.content,
        "attachments": [a.model_dump() for a in submission_data.attachments],
        "status": SubmissionStatus.SUBMITTED,
        "is_late": is_late,
        "late_penalty": penalty,
        "submitted_at": now,
        "created_at": now,
        "updated_at": now,
    }
    db.execute(_upsert_statement(db, values))
    db.commit()

    submission = (
        db.query(Submission)
        .populate_existing()
        .filter(Submission.assignment_id == assignment.id, Submission.student_id == student.id)
        .one()
    )
    logger.info(
        "Submission id=%s for assignment id=%s by student id=%s (late=%s, penalty=%s%%)",
        submission.id, assignment.id, student.id, is_late, penalty,
    )
    return submission


def grade_submission(db: Session, teacher, submission_id: int, grade_data, assignment_id: int | None = None) -> Submission:
    submission = get_submission_or_404(db, submission_id)
    if assignment_id is not None and submission.assignment_id != assignment_id:
        raise NotFound("Submission not found")
    if not owns_submission_course(submission, teacher):
        raise Forbidden("Not authorized to grade this submission")

    total = submission.assignment.total_points
    if not 0 <= grade_data.grade <= total:
        raise OutOfRange(f"Grade must be between 0 and {total}")

    submission.grade = grade_data.grade
    submission.feedback = grade_data.feedback
    submission.status = SubmissionStatus.GRADED
    submission.graded_at = utcnow()
    submission.graded_by = teacher.id
    db.commit()
    db.refresh(submission)
    logger.info("Submission id=%s graded %s/%s by teacher id=%s", submission.id, submission.grade, total, teacher.id)
    return submission


def list_for_assignment(db: Session, teacher, assignment_id: int) -> list[Submission]:
    assignment = get_owned_assignment(db, teacher, assignment_id)
    return (
        db.query(Submission)
        .options(joinedload(Submission.student))
        .filter(Submission.assignment_id == assignment.id)
        .order_by(Submission.submitted_at.desc(), Submission.id.desc())
        .all()
    )


def list_submissions(
    db: Session,
    viewer,
    *,
    assignment_id: int | None = None,
    student_id: int | None = None,
    page: int = 1,
    limit: int = 10,
):
    query = db.query(Submission).options(joinedload(Submission.student))

    if is_teacher(viewer):
        if assignment_id is not None:
            assignment = get_assignment_or_404(db, assignment_id)
            if not owns_assignment(assignment, viewer):
                raise Forbidden("Not authorized to view these submissions")
            query = query.filter(Submission.assignment_id == assignment_id)
        else:
            owned = (
                select(Assignment.id)
                .join(Course, Course.id == Assignment.course_id)
                .where(Course.teacher_id == viewer.id)
            )
            query = query.filter(Submission.assignment_id.in_(owned))
        if student_id is not None:
            query = query.filter(Submission.student_id == student_id)
    else:
        query = query.filter(Submission.student_id == viewer.id)
        if assignment_id is not None:
            query = query.filter(Submission.assignment_id == assignment_id)

    query = query.order_by(Submission.submitted_at.desc(), Submission.id.desc())
    return paginate(query, page, limit)


def get_submission_for_viewer(db: Session, viewer, submission_id: int) -> Submission:
    submission = get_submission_or_404(db, submission_id)
    if is_submission_author(submission, viewer) or owns_submission_course(submission, viewer):
        return submission
    raise Forbidden("Not authorized to view this submission")
