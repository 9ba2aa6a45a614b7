from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import relationship

from app.core.enums import (
    ChannelKind,
    ProjectPriority,
    ProjectStatus,
    TaskStatus,
    TeamActivityKind,
    TeamRole,
)
from app.core.timeutils import utcnow
from app.db.base import Base, str_enum


class Team(Base):
    __tablename__ = "teams"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="SET NULL"), nullable=True, index=True)
    creator_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    max_members = Column(Integer, default=6, nullable=False)
    is_public = Column(Boolean, default=False, nullable=False)
    allow_self_join = Column(Boolean, default=True, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    # aggregates, recomputed after every project/task mutation
    total_projects = Column(Integer, default=0, nullable=False)
    completed_projects = Column(Integer, default=0, nullable=False)
    total_tasks = Column(Integer, default=0, nullable=False)
    completed_tasks = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    course = relationship("Course")
    creator = relationship("User")
    members = relationship(
        "TeamMember",
        back_populates="team",
        cascade="all, delete-orphan",
        order_by="TeamMember.id",
    )
    channels = relationship(
        "TeamChannel",
        back_populates="team",
        cascade="all, delete-orphan",
        order_by="TeamChannel.id",
    )
    projects = relationship(
        "Project",
        back_populates="team",
        cascade="all, delete-orphan",
        order_by="Project.position",
        collection_class=ordering_list("position"),
    )
    activity = relationship(
        "TeamActivity",
        back_populates="team",
        cascade="all, delete-orphan",
        order_by="TeamActivity.id",
    )

    def member(self, user_id: int) -> "TeamMember | None":
        for m in self.members:
            if m.user_id == user_id:
                return m
        return None

    def recompute_stats(self) -> None:
        self.total_projects = len(self.projects)
        self.completed_projects = sum(
            1 for p in self.projects if p.status == ProjectStatus.COMPLETED
        )
        self.total_tasks = sum(len(p.tasks) for p in self.projects)
        self.completed_tasks = sum(
            1 for p in self.projects for t in p.tasks if t.status == TaskStatus.COMPLETED
        )


class TeamMember(Base):
    __tablename__ = "team_members"

    id = Column(Integer, primary_key=True, index=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(str_enum(TeamRole, "team_role"), default=TeamRole.MEMBER, nullable=False)
    joined_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("team_id", "user_id", name="uq_team_members_team_user"),
    )

    team = relationship("Team", back_populates="members")
    user = relationship("User")


class TeamChannel(Base):
    __tablename__ = "team_channels"

    id = Column(Integer, primary_key=True, index=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(50), nullable=False)
    description = Column(String(255), nullable=True)
    kind = Column(str_enum(ChannelKind, "channel_kind"), default=ChannelKind.GENERAL, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    team = relationship("Team", back_populates="channels")


class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(
        str_enum(ProjectStatus, "project_status"), default=ProjectStatus.PLANNING, nullable=False
    )
    priority = Column(
        str_enum(ProjectPriority, "project_priority"), default=ProjectPriority.MEDIUM, nullable=False
    )
    due_date = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    team = relationship("Team", back_populates="projects")
    tasks = relationship(
        "ProjectTask",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="ProjectTask.position",
        collection_class=ordering_list("position"),
    )


class ProjectTask(Base):
    __tablename__ = "project_tasks"

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(str_enum(TaskStatus, "task_status"), default=TaskStatus.TODO, nullable=False)
    assignee_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    due_date = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    project = relationship("Project", back_populates="tasks")


class TeamActivity(Base):
    __tablename__ = "team_activity"

    id = Column(Integer, primary_key=True, index=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    kind = Column(str_enum(TeamActivityKind, "team_activity_kind"), nullable=False)
    description = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    team = relationship("Team", back_populates="activity")
