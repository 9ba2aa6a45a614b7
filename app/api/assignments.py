from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import PageParams, get_current_user, get_db, page_params, require_student, require_teacher
from app.core.enums import AssignmentStatus
from app.crud import assignment as crud_assignment
from app.crud import submission as crud_submission
from app.db.models.user import User
from app.schemas.assignment import AssignmentCreate, AssignmentOut, AssignmentStats, AssignmentUpdate
from app.schemas.common import Envelope, Message, Pagination
from app.schemas.submission import GradeIn, SubmissionCreate, SubmissionOut

router = APIRouter()


@router.get("", response_model=Envelope[List[AssignmentOut]])
def list_assignments(
    course_id: Optional[int] = None,
    status: Optional[AssignmentStatus] = None,
    search: Optional[str] = None,
    paging: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    assignments, total = crud_assignment.list_assignments(
        db,
        current_user,
        course_id=course_id,
        status=status,
        search=search,
        page=paging.page,
        limit=paging.limit,
    )
    return Envelope(
        data=[AssignmentOut.model_validate(a) for a in assignments],
        pagination=Pagination.build(paging.page, paging.limit, total),
    )


@router.get("/stats", response_model=Envelope[AssignmentStats])
def assignment_stats(db: Session = Depends(get_db), current_user: User = Depends(require_teacher)):
    return Envelope(data=AssignmentStats(**crud_assignment.assignment_stats(db, current_user)))


@router.post("", response_model=Envelope[AssignmentOut], status_code=201)
def create_assignment(
    assignment_in: AssignmentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher),
):
    assignment = crud_assignment.create_assignment(db, current_user, assignment_in)
    return Envelope(data=AssignmentOut.model_validate(assignment))


@router.get("/{assignment_id}", response_model=Envelope[AssignmentOut])
def read_assignment(
    assignment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    assignment = crud_assignment.get_assignment_for_viewer(db, current_user, assignment_id)
    return Envelope(data=AssignmentOut.model_validate(assignment))


@router.put("/{assignment_id}", response_model=Envelope[AssignmentOut])
def update_assignment(
    assignment_id: int,
    assignment_in: AssignmentUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher),
):
    assignment = crud_assignment.update_assignment(db, current_user, assignment_id, assignment_in)
    return Envelope(data=AssignmentOut.model_validate(assignment))


@router.delete("/{assignment_id}", response_model=Envelope[Message])
def delete_assignment(
    assignment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher),
):
    crud_assignment.delete_assignment(db, current_user, assignment_id)
    return Envelope(data=Message(message="Assignment deleted"))


@router.post("/{assignment_id}/publish", response_model=Envelope[AssignmentOut])
def publish_assignment(
    assignment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher),
):
    assignment = crud_assignment.publish(db, current_user, assignment_id)
    return Envelope(data=AssignmentOut.model_validate(assignment))


@router.post("/{assignment_id}/close", response_model=Envelope[AssignmentOut])
def close_assignment(
    assignment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher),
):
    assignment = crud_assignment.close(db, current_user, assignment_id)
    return Envelope(data=AssignmentOut.model_validate(assignment))


@router.post("/{assignment_id}/submit", response_model=Envelope[SubmissionOut], status_code=201)
def submit_assignment(
    assignment_id: int,
    submission_in: SubmissionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_student),
):
    submission = crud_submission.submit(db, current_user, assignment_id, submission_in)
    return Envelope(data=SubmissionOut.model_validate(submission))


@router.get("/{assignment_id}/submissions", response_model=Envelope[List[SubmissionOut]])
def list_assignment_submissions(
    assignment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher),
):
    submissions = crud_submission.list_for_assignment(db, current_user, assignment_id)
    return Envelope(data=[SubmissionOut.model_validate(s) for s in submissions])


@router.put("/{assignment_id}/submissions/{submission_id}/grade", response_model=Envelope[SubmissionOut])
def grade_submission(
    assignment_id: int,
    submission_id: int,
    grade_in: GradeIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher),
):
    submission = crud_submission.grade_submission(
        db, current_user, submission_id, grade_in, assignment_id=assignment_id
    )
    return Envelope(data=SubmissionOut.model_validate(submission))
