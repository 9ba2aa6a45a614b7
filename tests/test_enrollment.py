import pytest
from sqlalchemy.exc import IntegrityError

from app.core.enums import EnrollmentStatus, UserRole
from app.core.errors import CapacityExceeded, Conflict, ValidationError
from app.crud import course as crud_course
from app.db.models.course import Course
from app.db.models.enrollment import Enrollment
from app.db.models.user import User
from app.schemas.course import CourseUpdate


def test_enroll_and_unenroll(client, teacher, student, make_course):
    headers, _ = teacher
    course = make_course(headers, code="ENR100")
    student_headers, user = student

    response = client.post(f"/api/courses/{course['id']}/enroll", headers=student_headers)
    assert response.status_code == 201
    enrollment = response.json()["data"]
    assert enrollment["status"] == "active"
    assert enrollment["student_id"] == user["id"]

    assert client.post(f"/api/courses/{course['id']}/enroll", headers=student_headers).status_code == 409

    response = client.delete(f"/api/courses/{course['id']}/enroll", headers=student_headers)
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "dropped"
    assert response.json()["data"]["dropped_at"] is not None
    assert client.get(f"/api/courses/{course['id']}").json()["data"]["enrolled_count"] == 0

    assert client.delete(f"/api/courses/{course['id']}/enroll", headers=student_headers).status_code == 404


def test_reenroll_reuses_the_dropped_row(client, db, teacher, student, make_course):
    headers, _ = teacher
    course = make_course(headers, code="ENR200")
    student_headers, user = student

    first = client.post(f"/api/courses/{course['id']}/enroll", headers=student_headers).json()["data"]
    client.delete(f"/api/courses/{course['id']}/enroll", headers=student_headers)
    second = client.post(f"/api/courses/{course['id']}/enroll", headers=student_headers)

    assert second.status_code == 201
    assert second.json()["data"]["id"] == first["id"]
    assert second.json()["data"]["status"] == "active"
    assert second.json()["data"]["dropped_at"] is None
    assert db.query(Enrollment).filter(Enrollment.student_id == user["id"]).count() == 1


def test_capacity_is_enforced(client, teacher, register, make_course):
    headers, _ = teacher
    course = make_course(headers, code="CAP100", enrollment_limit=2)
    students = [register()[0] for _ in range(3)]

    assert client.post(f"/api/courses/{course['id']}/enroll", headers=students[0]).status_code == 201
    assert client.post(f"/api/courses/{course['id']}/enroll", headers=students[1]).status_code == 201
    response = client.post(f"/api/courses/{course['id']}/enroll", headers=students[2])
    assert response.status_code == 409
    assert response.json() == {"success": False, "error": "Course is full"}

    detail = client.get(f"/api/courses/{course['id']}").json()["data"]
    assert detail["enrolled_count"] == 2
    assert detail["is_full"] is True

    client.delete(f"/api/courses/{course['id']}/enroll", headers=students[0])
    assert client.post(f"/api/courses/{course['id']}/enroll", headers=students[2]).status_code == 201


def test_only_students_enroll_in_open_courses(client, teacher, student, make_course):
    headers, _ = teacher
    hidden = make_course(headers, code="HID100", published=False)
    open_course = make_course(headers, code="OPN100")
    student_headers, _ = student

    assert client.post(f"/api/courses/{open_course['id']}/enroll", headers=headers).status_code == 403
    assert client.post(f"/api/courses/{hidden['id']}/enroll", headers=student_headers).status_code == 404
    assert client.post("/api/courses/9999/enroll", headers=student_headers).status_code == 404
    assert client.post(f"/api/courses/{open_course['id']}/enroll").status_code == 401


def test_student_my_courses(client, teacher, student, make_course):
    headers, _ = teacher
    joined = make_course(headers, code="MY100")
    make_course(headers, code="MY200")
    student_headers, _ = student
    client.post(f"/api/courses/{joined['id']}/enroll", headers=student_headers)

    body = client.get("/api/courses", params={"my": True}, headers=student_headers).json()
    assert [c["code"] for c in body["data"]] == ["MY100"]
    assert body["data"][0]["is_enrolled"] is True


def _seed(session):
    teacher = User(email="t@example.com", hashed_password="x", full_name="Teacher", role=UserRole.TEACHER)
    students = [
        User(email=f"s{i}@example.com", hashed_password="x", full_name=f"Student {i}", role=UserRole.STUDENT)
        for i in range(2)
    ]
    session.add_all([teacher, *students])
    session.flush()
    course = Course(
        title="Race", code="RACE1", teacher_id=teacher.id, is_published=True, enrollment_limit=1
    )
    session.add(course)
    session.commit()
    return course.id, [s.id for s in students]


def test_stale_session_cannot_overfill_course(two_sessions):
    first, second = two_sessions
    course_id, (student_a, student_b) = _seed(first)

    # both sessions have read the course while it still had a free seat
    assert first.get(Course, course_id).enrolled_count == 0
    assert second.get(Course, course_id).enrolled_count == 0

    crud_course.enroll(second, second.get(User, student_b), course_id)
    with pytest.raises(CapacityExceeded):
        crud_course.enroll(first, first.get(User, student_a), course_id)

    first.expire_all()
    assert first.get(Course, course_id).enrolled_count == 1
    assert first.query(Enrollment).filter(Enrollment.status == EnrollmentStatus.ACTIVE).count() == 1


def test_duplicate_enrollment_from_second_session_conflicts(two_sessions):
    first, second = two_sessions
    course_id, (student_a, _) = _seed(first)
    first.query(Course).filter(Course.id == course_id).update({Course.enrollment_limit: None})
    first.commit()

    crud_course.enroll(first, first.get(User, student_a), course_id)
    with pytest.raises(Conflict):
        crud_course.enroll(second, second.get(User, student_a), course_id)

    second.expire_all()
    assert second.get(Course, course_id).enrolled_count == 1


def test_enrollment_pair_is_unique_in_the_store(two_sessions):
    first, _ = two_sessions
    course_id, (student_a, _) = _seed(first)
    first.add(Enrollment(course_id=course_id, student_id=student_a))
    first.commit()

    first.add(Enrollment(course_id=course_id, student_id=student_a, status=EnrollmentStatus.DROPPED))
    with pytest.raises(IntegrityError):
        first.commit()
    first.rollback()


def test_stale_session_cannot_lower_limit_below_enrolled(two_sessions):
    first, second = two_sessions
    course_id, students = _seed(first)
    first.query(Course).filter(Course.id == course_id).update({Course.enrollment_limit: 3})
    first.commit()

    # first still sees an empty course when it lowers the limit
    assert first.get(Course, course_id).enrolled_count == 0
    for student_id in students:
        crud_course.enroll(second, second.get(User, student_id), course_id)

    teacher = first.query(User).filter(User.role == UserRole.TEACHER).one()
    with pytest.raises(ValidationError):
        crud_course.update_course(first, teacher, course_id, CourseUpdate(enrollment_limit=1))

    first.expire_all()
    course = first.get(Course, course_id)
    assert (course.enrolled_count, course.enrollment_limit) == (2, 3)
