from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import PageParams, get_current_user, get_db, get_optional_user, page_params, require_student, require_teacher
from app.core.policies import is_student
from app.crud import course as crud_course
from app.db.models.user import User
from app.schemas.common import Envelope, Message, Pagination
from app.schemas.course import CourseCreate, CourseOut, CourseStats, CourseUpdate, EnrollmentOut, RosterEntry
from app.schemas.user import UserBrief

router = APIRouter()


def _course_out(course, is_enrolled: Optional[bool] = None) -> CourseOut:
    out = CourseOut.model_validate(course)
    out.is_enrolled = is_enrolled
    return out


@router.get("", response_model=Envelope[List[CourseOut]])
def list_courses(
    search: Optional[str] = None,
    teacher_id: Optional[int] = None,
    my: bool = False,
    paging: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
    viewer: Optional[User] = Depends(get_optional_user),
):
    courses, total = crud_course.list_courses(
        db, viewer, search=search, teacher_id=teacher_id, my=my, page=paging.page, limit=paging.limit
    )
    if is_student(viewer):
        enrolled = crud_course.enrolled_course_ids(db, viewer.id, [c.id for c in courses])
        data = [_course_out(c, c.id in enrolled) for c in courses]
    else:
        data = [_course_out(c) for c in courses]
    return Envelope(data=data, pagination=Pagination.build(paging.page, paging.limit, total))


# declared before /{course_id} so "stats" is not parsed as an id
@router.get("/stats", response_model=Envelope[CourseStats])
def course_stats(db: Session = Depends(get_db), current_user: User = Depends(require_teacher)):
    return Envelope(data=CourseStats(**crud_course.course_stats(db, current_user)))


@router.get("/{course_id}", response_model=Envelope[CourseOut])
def read_course(
    course_id: int,
    db: Session = Depends(get_db),
    viewer: Optional[User] = Depends(get_optional_user),
):
    course = crud_course.get_course_for_viewer(db, viewer, course_id)
    enrolled = crud_course.is_enrolled(db, course.id, viewer.id) if is_student(viewer) else None
    return Envelope(data=_course_out(course, enrolled))


@router.post("", response_model=Envelope[CourseOut], status_code=201)
def create_course(
    course_in: CourseCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    course = crud_course.create_course(db, current_user, course_in)
    return Envelope(data=_course_out(course))


@router.put("/{course_id}", response_model=Envelope[CourseOut])
def update_course(
    course_id: int,
    course_in: CourseUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher),
):
    course = crud_course.update_course(db, current_user, course_id, course_in)
    return Envelope(data=_course_out(course))


@router.delete("/{course_id}", response_model=Envelope[Message])
def delete_course(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher),
):
    crud_course.delete_course(db, current_user, course_id)
    return Envelope(data=Message(message="Course deleted"))


@router.post("/{course_id}/enroll", response_model=Envelope[EnrollmentOut], status_code=201)
def enroll(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_student),
):
    enrollment = crud_course.enroll(db, current_user, course_id)
    return Envelope(data=EnrollmentOut.model_validate(enrollment))


@router.delete("/{course_id}/enroll", response_model=Envelope[EnrollmentOut])
def unenroll(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_student),
):
    enrollment = crud_course.unenroll(db, current_user, course_id)
    return Envelope(data=EnrollmentOut.model_validate(enrollment))


@router.get("/{course_id}/students", response_model=Envelope[List[RosterEntry]])
def list_students(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher),
):
    roster = crud_course.list_roster(db, current_user, course_id)
    data = [
        RosterEntry(enrollment_id=e.id, enrolled_at=e.enrolled_at, student=UserBrief.model_validate(e.student))
        for e in roster
    ]
    return Envelope(data=data)
