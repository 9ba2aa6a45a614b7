from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import PageParams, get_current_user, get_db, page_params
from app.crud import submission as crud_submission
from app.db.models.user import User
from app.schemas.common import Envelope, Pagination
from app.schemas.submission import SubmissionOut

router = APIRouter()


@router.get("", response_model=Envelope[List[SubmissionOut]])
def list_submissions(
    assignment_id: Optional[int] = None,
    student_id: Optional[int] = None,
    paging: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    submissions, total = crud_submission.list_submissions(
        db,
        current_user,
        assignment_id=assignment_id,
        student_id=student_id,
        page=paging.page,
        limit=paging.limit,
    )
    return Envelope(
        data=[SubmissionOut.model_validate(s) for s in submissions],
        pagination=Pagination.build(paging.page, paging.limit, total),
    )


@router.get("/{submission_id}", response_model=Envelope[SubmissionOut])
def read_submission(
    submission_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    submission = crud_submission.get_submission_for_viewer(db, current_user, submission_id)
    return Envelope(data=SubmissionOut.model_validate(submission))
