# app/db/__init__.py
# Importing app.db guarantees every model is registered on Base.metadata

from app.db.base import Base
from app.db.models import (
    User,
    Course,
    Enrollment,
    Assignment,
    Submission,
    Team,
    TeamMember,
    TeamChannel,
    Project,
    ProjectTask,
    TeamActivity,
    ChatbotConversation,
    ChatbotMessage,
)

__all__ = [
    "Base",
    "User",
    "Course",
    "Enrollment",
    "Assignment",
    "Submission",
    "Team",
    "TeamMember",
    "TeamChannel",
    "Project",
    "ProjectTask",
    "TeamActivity",
    "ChatbotConversation",
    "ChatbotMessage",
]
