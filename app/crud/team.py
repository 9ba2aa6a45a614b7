import logging

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.enums import ChannelKind, ProjectStatus, TaskStatus, TeamActivityKind, TeamRole
from app.core.errors import CapacityExceeded, Conflict, Forbidden, InvalidState, NotFound, ValidationError
from app.core.policies import is_team_leader, is_team_member, teaches_team_course
from app.core.timeutils import ensure_utc
from app.crud.base import paginate, search_pattern
from app.crud.course import get_course_or_404
from app.crud.user import get_user_or_404
from app.db.models.team import (
    Project,
    ProjectTask,
    Team,
    TeamActivity,
    TeamChannel,
    TeamMember,
)

logger = logging.getLogger(__name__)

DEFAULT_CHANNELS = (
    ("general", "General team discussion", ChannelKind.GENERAL),
    ("announcements", "Team announcements", ChannelKind.ANNOUNCEMENT),
)


def get_team_or_404(db: Session, team_id: int) -> Team:
    team = db.get(Team, team_id)
    if team is None or not team.is_active:
        raise NotFound("Team not found")
    return team


def _member_team(db: Session, user, team_id: int, action: str) -> Team:
    team = get_team_or_404(db, team_id)
    if not is_team_member(team, user):
        raise Forbidden(f"Not authorized to {action} in this team")
    return team


def _log(team: Team, kind: TeamActivityKind, user_id: int, description: str) -> None:
    team.activity.append(TeamActivity(kind=kind, user_id=user_id, description=description))


def create_team(db: Session, creator, team_data) -> Team:
    if team_data.course_id is not None:
        get_course_or_404(db, team_data.course_id)

    team = Team(**team_data.model_dump(), creator_id=creator.id)
    team.members.append(TeamMember(user_id=creator.id, role=TeamRole.LEADER))
    for name, description, kind in DEFAULT_CHANNELS:
        team.channels.append(TeamChannel(name=name, description=description, kind=kind))
    _log(team, TeamActivityKind.MEMBER_JOINED, creator.id, "Created the team")

    db.add(team)
    db.commit()
    db.refresh(team)
    logger.info("Team id=%s created by user id=%s", team.id, creator.id)
    return team


def list_teams(
    db: Session,
    viewer,
    *,
    course_id: int | None = None,
    my: bool = False,
    search: str | None = None,
    page: int = 1,
    limit: int = 10,
):
    query = db.query(Team).filter(Team.is_active.is_(True))
    if course_id is not None:
        query = query.filter(Team.course_id == course_id)
    if my:
        member_of = select(TeamMember.team_id).where(TeamMember.user_id == viewer.id)
        query = query.filter(or_(Team.creator_id == viewer.id, Team.id.in_(member_of)))
    if search:
        pattern = search_pattern(search)
        query = query.filter(
            or_(
                Team.name.ilike(pattern, escape="\\"),
                Team.description.ilike(pattern, escape="\\"),
            )
        )
    query = query.order_by(Team.created_at.desc(), Team.id.desc())
    return paginate(query, page, limit)


def get_team_for_viewer(db: Session, viewer, team_id: int) -> Team:
    team = get_team_or_404(db, team_id)
    if not is_team_member(team, viewer) and not teaches_team_course(team, viewer):
        raise Forbidden("Not authorized to access this team")
    return team


def update_team(db: Session, actor, team_id: int, team_data) -> Team:
    team = get_team_or_404(db, team_id)
    if not is_team_leader(team, actor) and not teaches_team_course(team, actor):
        raise Forbidden("Not authorized to update this team")

    changes = team_data.model_dump(exclude_unset=True)
    for field in ("name", "max_members", "is_public", "allow_self_join"):
        if field in changes and changes[field] is None:
            raise ValidationError(f"{field} cannot be null")
    if changes.get("max_members") is not None and changes["max_members"] < len(team.members):
        raise ValidationError("max_members cannot be lower than the current member count")

    for field, value in changes.items():
        setattr(team, field, value)
    db.commit()
    db.refresh(team)
    return team


def delete_team(db: Session, actor, team_id: int) -> None:
    """Archive the team; archived teams are hidden from every lookup and listing."""
    team = get_team_or_404(db, team_id)
    if team.creator_id != actor.id and not teaches_team_course(team, actor):
        raise Forbidden("Not authorized to delete this team")
    team.is_active = False
    db.commit()
    logger.info("Team id=%s archived by user id=%s", team_id, actor.id)


def join_team(db: Session, user, team_id: int) -> Team:
    team = get_team_or_404(db, team_id)
    if not team.allow_self_join and not team.is_public:
        raise InvalidState("Team does not allow self-joining")
    if is_team_member(team, user):
        raise Conflict("Already a member of this team")
    if len(team.members) >= team.max_members:
        raise CapacityExceeded("Team is full")

    team.members.append(TeamMember(user_id=user.id, role=TeamRole.MEMBER))
    _log(team, TeamActivityKind.MEMBER_JOINED, user.id, "New member joined the team")
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Already a member of this team")
    db.refresh(team)
    logger.info("User id=%s joined team id=%s", user.id, team.id)
    return team


def leave_team(db: Session, user, team_id: int) -> None:
    team = get_team_or_404(db, team_id)
    member = team.member(user.id)
    if member is None:
        raise InvalidState("You are not a member of this team")

    team.members.remove(member)
    _log(team, TeamActivityKind.MEMBER_LEFT, user.id, "Member left the team")
    db.commit()
    logger.info("User id=%s left team id=%s", user.id, team.id)


def _get_project(team: Team, project_id: int) -> Project:
    for project in team.projects:
        if project.id == project_id:
            return project
    raise NotFound("Project not found")


def _get_task(project: Project, task_id: int) -> ProjectTask:
    for task in project.tasks:
        if task.id == task_id:
            return task
    raise NotFound("Task not found")


def add_project(db: Session, user, team_id: int, project_data) -> Team:
    team = _member_team(db, user, team_id, "add projects")

    values = project_data.model_dump()
    values["due_date"] = ensure_utc(values["due_date"])
    project = Project(**values)
    team.projects.append(project)
    _log(team, TeamActivityKind.PROJECT_CREATED, user.id, f"Created project: {project.title}")
    team.recompute_stats()
    db.commit()
    db.refresh(team)
    return team


def add_task(db: Session, user, team_id: int, project_id: int, task_data) -> Team:
    team = _member_team(db, user, team_id, "add tasks")
    project = _get_project(team, project_id)
    if task_data.assignee_id is not None:
        assignee = get_user_or_404(db, task_data.assignee_id)
        if not is_team_member(team, assignee):
            raise ValidationError("Tasks can only be assigned to team members")

    values = task_data.model_dump()
    values["due_date"] = ensure_utc(values["due_date"])
    project.tasks.append(ProjectTask(**values, status=TaskStatus.TODO))
    team.recompute_stats()
    db.commit()
    db.refresh(team)
    return team


def update_task_status(db: Session, user, team_id: int, project_id: int, task_id: int, status: TaskStatus) -> Team:
    team = _member_team(db, user, team_id, "update tasks")
    project = _get_project(team, project_id)
    task = _get_task(project, task_id)

    was_completed = task.status == TaskStatus.COMPLETED
    task.status = status
    if status == TaskStatus.COMPLETED and not was_completed:
        _log(team, TeamActivityKind.TASK_COMPLETED, user.id, f"Completed task: {task.title}")
    team.recompute_stats()
    db.commit()
    db.refresh(team)
    return team


def team_stats(db: Session, user) -> dict:
    member_of = select(TeamMember.team_id).where(TeamMember.user_id == user.id)
    teams = (
        db.query(Team)
        .filter(Team.is_active.is_(True))
        .filter(or_(Team.creator_id == user.id, Team.id.in_(member_of)))
        .all()
    )
    return {
        "total_teams": len(teams),
        "teams_as_leader": sum(1 for t in teams if is_team_leader(t, user)),
        "active_projects": sum(
            1 for t in teams for p in t.projects if p.status != ProjectStatus.COMPLETED
        ),
        "completed_tasks": sum(t.completed_tasks for t in teams),
    }
