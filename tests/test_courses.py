from app.db.models.assignment import Assignment
from app.db.models.enrollment import Enrollment
from app.db.models.team import Team


def test_create_course_normalizes_code(client, teacher):
    headers, user = teacher
    response = client.post("/api/courses", json={"title": "Algebra", "code": "alg101"}, headers=headers)
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["code"] == "ALG101"
    assert data["teacher_id"] == user["id"]
    assert data["enrolled_count"] == 0
    assert data["is_full"] is False


def test_student_cannot_own_a_course(client, student):
    headers, _ = student
    response = client.post("/api/courses", json={"title": "Algebra", "code": "ALG101"}, headers=headers)
    assert response.status_code == 400


def test_duplicate_code_conflicts(client, teacher, register, make_course):
    headers, _ = teacher
    make_course(headers, code="DUP100")
    other_headers, _ = register("teacher")
    response = client.post("/api/courses", json={"title": "Other", "code": "dup100"}, headers=other_headers)
    assert response.status_code == 409


def test_invalid_code_is_rejected(client, teacher):
    headers, _ = teacher
    response = client.post("/api/courses", json={"title": "Bad", "code": "A-1"}, headers=headers)
    assert response.status_code == 400


def test_listing_hides_unpublished_courses(client, teacher, student, register, make_course):
    headers, _ = teacher
    make_course(headers, code="PUB101")
    make_course(headers, code="DRAFT1", published=False)

    anonymous = client.get("/api/courses").json()
    assert [c["code"] for c in anonymous["data"]] == ["PUB101"]
    assert anonymous["pagination"] == {"page": 1, "limit": 10, "total": 1, "pages": 1}

    student_headers, _ = student
    assert [c["code"] for c in client.get("/api/courses", headers=student_headers).json()["data"]] == ["PUB101"]

    own = client.get("/api/courses", params={"my": True}, headers=headers).json()
    assert {c["code"] for c in own["data"]} == {"PUB101", "DRAFT1"}

    other_headers, _ = register("teacher")
    others = client.get("/api/courses", headers=other_headers).json()
    assert [c["code"] for c in others["data"]] == ["PUB101"]


def test_search_and_pagination(client, teacher, make_course):
    headers, _ = teacher
    make_course(headers, code="BIO101", title="Biology basics")
    make_course(headers, code="CHE101", title="Chemistry")
    make_course(headers, code="BIO201", title="Advanced biology")

    body = client.get("/api/courses", params={"search": "biology"}).json()
    assert {c["code"] for c in body["data"]} == {"BIO101", "BIO201"}

    body = client.get("/api/courses", params={"limit": 2, "page": 2}).json()
    assert len(body["data"]) == 1
    assert body["pagination"]["total"] == 3
    assert body["pagination"]["pages"] == 2

    body = client.get("/api/courses", params={"search": "100%"}).json()
    assert body["data"] == []


def test_unpublished_course_is_not_found_for_others(client, teacher, student, make_course):
    headers, _ = teacher
    course = make_course(headers, code="HID101", published=False)

    assert client.get(f"/api/courses/{course['id']}", headers=headers).status_code == 200
    student_headers, _ = student
    assert client.get(f"/api/courses/{course['id']}", headers=student_headers).status_code == 404
    assert client.get(f"/api/courses/{course['id']}").status_code == 404
    assert client.get("/api/courses/9999").status_code == 404


def test_course_detail_reports_enrollment(client, teacher, student, make_course):
    headers, _ = teacher
    course = make_course(headers, code="ENR101")
    student_headers, _ = student

    assert client.get(f"/api/courses/{course['id']}", headers=student_headers).json()["data"]["is_enrolled"] is False
    client.post(f"/api/courses/{course['id']}/enroll", headers=student_headers)
    assert client.get(f"/api/courses/{course['id']}", headers=student_headers).json()["data"]["is_enrolled"] is True


def test_update_course(client, teacher, register, make_course):
    headers, _ = teacher
    course = make_course(headers, code="UPD101")
    make_course(headers, code="TAKEN1")

    response = client.put(f"/api/courses/{course['id']}", json={"title": "Renamed"}, headers=headers)
    assert response.status_code == 200
    assert response.json()["data"]["title"] == "Renamed"

    response = client.put(f"/api/courses/{course['id']}", json={"code": "TAKEN1"}, headers=headers)
    assert response.status_code == 409

    other_headers, _ = register("teacher")
    response = client.put(f"/api/courses/{course['id']}", json={"title": "Hijack"}, headers=other_headers)
    assert response.status_code == 403


def test_reassigning_teacher_requires_active_teacher(client, teacher, student, register, make_course):
    headers, _ = teacher
    course = make_course(headers, code="OWN101")
    _, student_user = student

    response = client.put(f"/api/courses/{course['id']}", json={"teacher_id": student_user["id"]}, headers=headers)
    assert response.status_code == 400

    new_headers, new_teacher = register("teacher")
    response = client.put(f"/api/courses/{course['id']}", json={"teacher_id": new_teacher["id"]}, headers=headers)
    assert response.status_code == 200
    assert response.json()["data"]["teacher_id"] == new_teacher["id"]
    # the previous owner lost write access
    assert client.put(f"/api/courses/{course['id']}", json={"title": "X"}, headers=headers).status_code == 403


def test_limit_cannot_drop_below_enrolled(client, teacher, register, make_course):
    headers, _ = teacher
    course = make_course(headers, code="LIM101")
    for _ in range(2):
        student_headers, _ = register()
        client.post(f"/api/courses/{course['id']}/enroll", headers=student_headers)

    response = client.put(f"/api/courses/{course['id']}", json={"enrollment_limit": 1}, headers=headers)
    assert response.status_code == 400
    response = client.put(f"/api/courses/{course['id']}", json={"enrollment_limit": 2}, headers=headers)
    assert response.status_code == 200
    assert response.json()["data"]["is_full"] is True


def test_delete_course_with_active_enrollments_conflicts(client, teacher, student, make_course):
    headers, _ = teacher
    course = make_course(headers, code="DEL101")
    student_headers, _ = student
    client.post(f"/api/courses/{course['id']}/enroll", headers=student_headers)

    assert client.delete(f"/api/courses/{course['id']}", headers=headers).status_code == 409

    client.delete(f"/api/courses/{course['id']}/enroll", headers=student_headers)
    assert client.delete(f"/api/courses/{course['id']}", headers=headers).status_code == 200
    assert client.get(f"/api/courses/{course['id']}", headers=headers).status_code == 404


def test_delete_course_removes_dependents(client, db, teacher, student, make_course, make_assignment):
    headers, _ = teacher
    course = make_course(headers, code="DEP101")
    make_assignment(headers, course["id"])
    student_headers, _ = student
    client.post(f"/api/courses/{course['id']}/enroll", headers=student_headers)
    client.delete(f"/api/courses/{course['id']}/enroll", headers=student_headers)
    team = client.post("/api/teams", json={"name": "Crew", "course_id": course["id"]}, headers=student_headers)

    assert client.delete(f"/api/courses/{course['id']}", headers=headers).status_code == 200

    assert db.query(Assignment).filter(Assignment.course_id == course["id"]).count() == 0
    assert db.query(Enrollment).filter(Enrollment.course_id == course["id"]).count() == 0
    assert db.get(Team, team.json()["data"]["id"]).course_id is None


def test_delete_course_requires_owner(client, teacher, register, make_course):
    headers, _ = teacher
    course = make_course(headers, code="OWN202")
    other_headers, _ = register("teacher")
    assert client.delete(f"/api/courses/{course['id']}", headers=other_headers).status_code == 403
    assert client.delete("/api/courses/9999", headers=headers).status_code == 404


def test_roster_and_stats(client, teacher, register, make_course):
    headers, _ = teacher
    course = make_course(headers, code="ROS101")
    make_course(headers, code="ROS102", published=False)
    names = []
    for _ in range(2):
        student_headers, user = register()
        names.append(user["full_name"])
        client.post(f"/api/courses/{course['id']}/enroll", headers=student_headers)

    roster = client.get(f"/api/courses/{course['id']}/students", headers=headers).json()["data"]
    assert [entry["student"]["full_name"] for entry in roster] == names

    stats = client.get("/api/courses/stats", headers=headers).json()["data"]
    assert stats == {"total": 2, "published": 1, "active": 2, "enrolled_students": 2}


def test_roster_forbidden_for_other_teacher_and_students(client, teacher, student, register, make_course):
    headers, _ = teacher
    course = make_course(headers, code="ROS201")
    other_headers, _ = register("teacher")
    student_headers, _ = student
    assert client.get(f"/api/courses/{course['id']}/students", headers=other_headers).status_code == 403
    assert client.get(f"/api/courses/{course['id']}/students", headers=student_headers).status_code == 403
