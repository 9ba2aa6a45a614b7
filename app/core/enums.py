# app/core/enums.py
import enum


class UserRole(str, enum.Enum):
    STUDENT = "student"
    TEACHER = "teacher"


class EnrollmentStatus(str, enum.Enum):
    ACTIVE = "active"
    DROPPED = "dropped"


class AssignmentStatus(str, enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    CLOSED = "closed"


class AssignmentAction(str, enum.Enum):
    PUBLISH = "publish"
    CLOSE = "close"


class SubmissionStatus(str, enum.Enum):
    PENDING = "pending"
    SUBMITTED = "submitted"
    GRADED = "graded"


class TeamRole(str, enum.Enum):
    LEADER = "leader"
    MEMBER = "member"


class ChannelKind(str, enum.Enum):
    GENERAL = "general"
    ANNOUNCEMENT = "announcement"
    DISCUSSION = "discussion"
    PROJECT = "project"


class ProjectStatus(str, enum.Enum):
    PLANNING = "planning"
    IN_PROGRESS = "in_progress"
    REVIEW = "review"
    COMPLETED = "completed"
    ON_HOLD = "on_hold"


class ProjectPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class TaskStatus(str, enum.Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TeamActivityKind(str, enum.Enum):
    MEMBER_JOINED = "member_joined"
    MEMBER_LEFT = "member_left"
    PROJECT_CREATED = "project_created"
    TASK_COMPLETED = "task_completed"


class ConversationStatus(str, enum.Enum):
    ACTIVE = "active"
    CLOSED = "closed"


class MessageSender(str, enum.Enum):
    USER = "user"
    BOT = "bot"


class ReactionKind(str, enum.Enum):
    LIKE = "like"
    DISLIKE = "dislike"
    HELPFUL = "helpful"
    NOT_HELPFUL = "not_helpful"
