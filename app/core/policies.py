# app/core/policies.py
"""
Ownership and state-transition rules.

Plain functions over ORM objects so they can be checked without a request.
Every write under a course (the course itself, its assignments, their
submissions) is authorized by comparing the actor with ``course.teacher_id``.
"""
from app.core.enums import AssignmentAction, AssignmentStatus, TeamRole, UserRole
from app.core.errors import InvalidState


def is_teacher(user) -> bool:
    return user is not None and user.role == UserRole.TEACHER


def is_student(user) -> bool:
    return user is not None and user.role == UserRole.STUDENT


def owns_course(course, user) -> bool:
    return is_teacher(user) and course.teacher_id == user.id


def owns_assignment(assignment, user) -> bool:
    return owns_course(assignment.course, user)


def owns_submission_course(submission, user) -> bool:
    return owns_assignment(submission.assignment, user)


def is_submission_author(submission, user) -> bool:
    return user is not None and submission.student_id == user.id


def is_team_member(team, user) -> bool:
    return user is not None and team.member(user.id) is not None


def is_team_leader(team, user) -> bool:
    if user is None:
        return False
    member = team.member(user.id)
    return member is not None and member.role == TeamRole.LEADER


def teaches_team_course(team, user) -> bool:
    return team.course is not None and owns_course(team.course, user)


def next_assignment_status(current: AssignmentStatus, action: AssignmentAction) -> AssignmentStatus:
    """Only draft -> published -> closed, one step at a time."""
    match current:
        case AssignmentStatus.DRAFT:
            if action == AssignmentAction.PUBLISH:
                return AssignmentStatus.PUBLISHED
        case AssignmentStatus.PUBLISHED:
            if action == AssignmentAction.CLOSE:
                return AssignmentStatus.CLOSED
        case AssignmentStatus.CLOSED:
            pass
        case _:
            raise ValueError(f"Unknown assignment status: {current!r}")
    raise InvalidState(f"Cannot {action.value} an assignment that is {current.value}")
