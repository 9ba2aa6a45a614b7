from app.db.base import Base
from app.db.models.user import User
from app.db.models.course import Course
from app.db.models.enrollment import Enrollment
from app.db.models.assignment import Assignment
from app.db.models.submission import Submission
from app.db.models.team import Team, TeamMember, TeamChannel, Project, ProjectTask, TeamActivity
from app.db.models.chatbot import ChatbotConversation, ChatbotMessage

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
