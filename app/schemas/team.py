# app/schemas/team.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from app.core.enums import (
    ChannelKind,
    ProjectPriority,
    ProjectStatus,
    TaskStatus,
    TeamActivityKind,
    TeamRole,
)
from app.schemas.user import UserBrief


class TeamCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)
    course_id: Optional[int] = None
    max_members: int = Field(default=6, ge=2, le=20)
    is_public: bool = False
    allow_self_join: bool = True


class TeamUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)
    max_members: Optional[int] = Field(default=None, ge=2, le=20)
    is_public: Optional[bool] = None
    allow_self_join: Optional[bool] = None


class ProjectCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    status: ProjectStatus = ProjectStatus.PLANNING
    priority: ProjectPriority = ProjectPriority.MEDIUM
    due_date: Optional[datetime] = None


class TaskCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    assignee_id: Optional[int] = None
    due_date: Optional[datetime] = None


class TaskStatusUpdate(BaseModel):
    status: TaskStatus


class MemberOut(BaseModel):
    user_id: int
    role: TeamRole
    joined_at: datetime
    user: Optional[UserBrief] = None

    class Config:
        from_attributes = True


class ChannelOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    kind: ChannelKind

    class Config:
        from_attributes = True


class TaskOut(BaseModel):
    id: int
    position: int
    title: str
    description: Optional[str] = None
    status: TaskStatus
    assignee_id: Optional[int] = None
    due_date: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProjectOut(BaseModel):
    id: int
    position: int
    title: str
    description: Optional[str] = None
    status: ProjectStatus
    priority: ProjectPriority
    due_date: Optional[datetime] = None
    tasks: List[TaskOut] = []

    class Config:
        from_attributes = True


class ActivityOut(BaseModel):
    kind: TeamActivityKind
    user_id: Optional[int] = None
    description: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class TeamSummary(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    course_id: Optional[int] = None
    creator_id: int
    max_members: int
    is_public: bool
    allow_self_join: bool
    total_projects: int
    completed_projects: int
    total_tasks: int
    completed_tasks: int
    created_at: datetime

    class Config:
        from_attributes = True


class TeamOut(TeamSummary):
    members: List[MemberOut] = []
    channels: List[ChannelOut] = []
    projects: List[ProjectOut] = []
    activity: List[ActivityOut] = []


class TeamStats(BaseModel):
    total_teams: int
    teams_as_leader: int
    active_projects: int
    completed_tasks: int
