from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import PageParams, get_current_user, get_db, page_params
from app.crud import team as crud_team
from app.db.models.user import User
from app.schemas.common import Envelope, Message, Pagination
from app.schemas.team import (
    ProjectCreate,
    TaskCreate,
    TaskStatusUpdate,
    TeamCreate,
    TeamOut,
    TeamStats,
    TeamSummary,
    TeamUpdate,
)

router = APIRouter()


@router.get("", response_model=Envelope[List[TeamSummary]])
def list_teams(
    course_id: Optional[int] = None,
    my: bool = False,
    search: Optional[str] = None,
    paging: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    teams, total = crud_team.list_teams(
        db, current_user, course_id=course_id, my=my, search=search, page=paging.page, limit=paging.limit
    )
    return Envelope(
        data=[TeamSummary.model_validate(t) for t in teams],
        pagination=Pagination.build(paging.page, paging.limit, total),
    )


@router.post("", response_model=Envelope[TeamOut], status_code=201)
def create_team(
    team_in: TeamCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    team = crud_team.create_team(db, current_user, team_in)
    return Envelope(data=TeamOut.model_validate(team))


@router.get("/stats", response_model=Envelope[TeamStats])
def team_stats(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return Envelope(data=TeamStats(**crud_team.team_stats(db, current_user)))


@router.get("/{team_id}", response_model=Envelope[TeamOut])
def read_team(
    team_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    team = crud_team.get_team_for_viewer(db, current_user, team_id)
    return Envelope(data=TeamOut.model_validate(team))


@router.put("/{team_id}", response_model=Envelope[TeamOut])
def update_team(
    team_id: int,
    team_in: TeamUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    team = crud_team.update_team(db, current_user, team_id, team_in)
    return Envelope(data=TeamOut.model_validate(team))


@router.delete("/{team_id}", response_model=Envelope[Message])
def delete_team(
    team_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    crud_team.delete_team(db, current_user, team_id)
    return Envelope(data=Message(message="Team deleted"))


@router.post("/{team_id}/join", response_model=Envelope[TeamOut])
def join_team(
    team_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    team = crud_team.join_team(db, current_user, team_id)
    return Envelope(data=TeamOut.model_validate(team))


@router.post("/{team_id}/leave", response_model=Envelope[Message])
def leave_team(
    team_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    crud_team.leave_team(db, current_user, team_id)
    return Envelope(data=Message(message="Left the team"))


@router.post("/{team_id}/projects", response_model=Envelope[TeamOut], status_code=201)
def add_project(
    team_id: int,
    project_in: ProjectCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    team = crud_team.add_project(db, current_user, team_id, project_in)
    return Envelope(data=TeamOut.model_validate(team))


@router.post("/{team_id}/projects/{project_id}/tasks", response_model=Envelope[TeamOut], status_code=201)
def add_task(
    team_id: int,
    project_id: int,
    task_in: TaskCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    team = crud_team.add_task(db, current_user, team_id, project_id, task_in)
    return Envelope(data=TeamOut.model_validate(team))


@router.put("/{team_id}/projects/{project_id}/tasks/{task_id}", response_model=Envelope[TeamOut])
def update_task_status(
    team_id: int,
    project_id: int,
    task_id: int,
    status_in: TaskStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    team = crud_team.update_task_status(db, current_user, team_id, project_id, task_id, status_in.status)
    return Envelope(data=TeamOut.model_validate(team))
