from types import SimpleNamespace

import pytest

from app.core.enums import AssignmentAction, AssignmentStatus, TeamRole, UserRole
from app.core.errors import InvalidState
from app.core.policies import (
    is_submission_author,
    is_team_leader,
    is_team_member,
    next_assignment_status,
    owns_assignment,
    owns_course,
    owns_submission_course,
    teaches_team_course,
)

teacher = SimpleNamespace(id=1, role=UserRole.TEACHER)
other_teacher = SimpleNamespace(id=2, role=UserRole.TEACHER)
student = SimpleNamespace(id=3, role=UserRole.STUDENT)


class FakeTeam(SimpleNamespace):
    def member(self, user_id):
        return next((m for m in self.members if m.user_id == user_id), None)


def test_course_ownership():
    course = SimpleNamespace(teacher_id=1)
    assert owns_course(course, teacher)
    assert not owns_course(course, other_teacher)
    assert not owns_course(course, None)
    # a student sharing the id still is not an owner
    assert not owns_course(SimpleNamespace(teacher_id=3), student)


def test_ownership_follows_the_course():
    course = SimpleNamespace(teacher_id=1)
    assignment = SimpleNamespace(course=course)
    submission = SimpleNamespace(assignment=assignment, student_id=3)

    assert owns_assignment(assignment, teacher)
    assert owns_submission_course(submission, teacher)
    assert not owns_submission_course(submission, other_teacher)
    assert is_submission_author(submission, student)
    assert not is_submission_author(submission, teacher)


def test_team_roles():
    team = FakeTeam(
        members=[
            SimpleNamespace(user_id=3, role=TeamRole.LEADER),
            SimpleNamespace(user_id=4, role=TeamRole.MEMBER),
        ],
        course=SimpleNamespace(teacher_id=1),
    )
    member = SimpleNamespace(id=4, role=UserRole.STUDENT)

    assert is_team_member(team, student) and is_team_leader(team, student)
    assert is_team_member(team, member) and not is_team_leader(team, member)
    assert not is_team_member(team, teacher)
    assert teaches_team_course(team, teacher)
    assert not teaches_team_course(team, other_teacher)
    assert not teaches_team_course(FakeTeam(members=[], course=None), teacher)


@pytest.mark.parametrize(
    "current, action, expected",
    [
        (AssignmentStatus.DRAFT, AssignmentAction.PUBLISH, AssignmentStatus.PUBLISHED),
        (AssignmentStatus.PUBLISHED, AssignmentAction.CLOSE, AssignmentStatus.CLOSED),
    ],
)
def test_legal_transitions(current, action, expected):
    assert next_assignment_status(current, action) == expected


@pytest.mark.parametrize(
    "current, action",
    [
        (AssignmentStatus.DRAFT, AssignmentAction.CLOSE),
        (AssignmentStatus.PUBLISHED, AssignmentAction.PUBLISH),
        (AssignmentStatus.CLOSED, AssignmentAction.PUBLISH),
        (AssignmentStatus.CLOSED, AssignmentAction.CLOSE),
    ],
)
def test_illegal_transitions(current, action):
    with pytest.raises(InvalidState):
        next_assignment_status(current, action)
