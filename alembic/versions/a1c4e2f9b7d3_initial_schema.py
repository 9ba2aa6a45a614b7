"""initial schema: users, courses, enrollments, assignments, submissions, teams, chatbot

Revision ID: a1c4e2f9b7d3
Revises:
Create Date: 2026-10-18 10:12:44.207311

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = 'a1c4e2f9b7d3'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


user_role = sa.Enum('student', 'teacher', name='user_role')
chatbot_user_role = sa.Enum('student', 'teacher', name='chatbot_user_role')
enrollment_status = sa.Enum('active', 'dropped', name='enrollment_status')
assignment_status = sa.Enum('draft', 'published', 'closed', name='assignment_status')
submission_status = sa.Enum('pending', 'submitted', 'graded', name='submission_status')
team_role = sa.Enum('leader', 'member', name='team_role')
channel_kind = sa.Enum('general', 'announcement', 'discussion', 'project', name='channel_kind')
project_status = sa.Enum('planning', 'in_progress', 'review', 'completed', 'on_hold', name='project_status')
project_priority = sa.Enum('low', 'medium', 'high', 'urgent', name='project_priority')
task_status = sa.Enum('todo', 'in_progress', 'completed', name='task_status')
team_activity_kind = sa.Enum(
    'member_joined', 'member_left', 'project_created', 'task_completed', name='team_activity_kind'
)
conversation_status = sa.Enum('active', 'closed', name='conversation_status')
message_sender = sa.Enum('user', 'bot', name='message_sender')
reaction_kind = sa.Enum('like', 'dislike', 'helpful', 'not_helpful', name='reaction_kind')


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('hashed_password', sa.String(), nullable=False),
        sa.Column('full_name', sa.String(length=100), nullable=False),
        sa.Column('role', user_role, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('avatar_url', sa.String(), nullable=True),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'courses',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('code', sa.String(length=10), nullable=False),
        sa.Column('teacher_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('is_published', sa.Boolean(), nullable=False),
        sa.Column('enrollment_limit', sa.Integer(), nullable=True),
        sa.Column('enrolled_count', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_courses_id', 'courses', ['id'])
    op.create_index('ix_courses_code', 'courses', ['code'], unique=True)
    op.create_index('ix_courses_teacher_id', 'courses', ['teacher_id'])

    op.create_table(
        'enrollments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('course_id', sa.Integer(), sa.ForeignKey('courses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('status', enrollment_status, nullable=False),
        sa.Column('enrolled_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('dropped_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('course_id', 'student_id', name='uq_enrollments_course_student'),
    )
    op.create_index('ix_enrollments_id', 'enrollments', ['id'])
    op.create_index('ix_enrollments_course_id', 'enrollments', ['course_id'])
    op.create_index('ix_enrollments_student_id', 'enrollments', ['student_id'])

    op.create_table(
        'assignments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('course_id', sa.Integer(), sa.ForeignKey('courses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('instructions', sa.Text(), nullable=True),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('total_points', sa.Integer(), nullable=False),
        sa.Column('late_penalty_per_day', sa.Float(), nullable=False),
        sa.Column('status', assignment_status, nullable=False),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_assignments_id', 'assignments', ['id'])
    op.create_index('ix_assignments_course_id', 'assignments', ['course_id'])
    op.create_index('ix_assignments_due_date', 'assignments', ['due_date'])
    op.create_index('ix_assignments_status', 'assignments', ['status'])

    op.create_table(
        'submissions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('assignment_id', sa.Integer(), sa.ForeignKey('assignments.id', ondelete='CASCADE'), nullable=False),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('attachments', sa.JSON(), nullable=False),
        sa.Column('status', submission_status, nullable=False),
        sa.Column('is_late', sa.Boolean(), nullable=False),
        sa.Column('late_penalty', sa.Float(), nullable=False),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('grade', sa.Float(), nullable=True),
        sa.Column('feedback', sa.Text(), nullable=True),
        sa.Column('graded_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('graded_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('assignment_id', 'student_id', name='uq_submissions_assignment_student'),
    )
    op.create_index('ix_submissions_id', 'submissions', ['id'])
    op.create_index('ix_submissions_assignment_id', 'submissions', ['assignment_id'])
    op.create_index('ix_submissions_student_id', 'submissions', ['student_id'])
    op.create_index('ix_submissions_status', 'submissions', ['status'])

    op.create_table(
        'teams',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('course_id', sa.Integer(), sa.ForeignKey('courses.id', ondelete='SET NULL'), nullable=True),
        sa.Column('creator_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('max_members', sa.Integer(), nullable=False),
        sa.Column('is_public', sa.Boolean(), nullable=False),
        sa.Column('allow_self_join', sa.Boolean(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('total_projects', sa.Integer(), nullable=False),
        sa.Column('completed_projects', sa.Integer(), nullable=False),
        sa.Column('total_tasks', sa.Integer(), nullable=False),
        sa.Column('completed_tasks', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_teams_id', 'teams', ['id'])
    op.create_index('ix_teams_course_id', 'teams', ['course_id'])
    op.create_index('ix_teams_creator_id', 'teams', ['creator_id'])

    op.create_table(
        'team_members',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('team_id', sa.Integer(), sa.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('role', team_role, nullable=False),
        sa.Column('joined_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('team_id', 'user_id', name='uq_team_members_team_user'),
    )
    op.create_index('ix_team_members_id', 'team_members', ['id'])
    op.create_index('ix_team_members_team_id', 'team_members', ['team_id'])
    op.create_index('ix_team_members_user_id', 'team_members', ['user_id'])

    op.create_table(
        'team_channels',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('team_id', sa.Integer(), sa.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=True),
        sa.Column('kind', channel_kind, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_team_channels_id', 'team_channels', ['id'])
    op.create_index('ix_team_channels_team_id', 'team_channels', ['team_id'])

    op.create_table(
        'projects',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('team_id', sa.Integer(), sa.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', project_status, nullable=False),
        sa.Column('priority', project_priority, nullable=False),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_projects_id', 'projects', ['id'])
    op.create_index('ix_projects_team_id', 'projects', ['team_id'])

    op.create_table(
        'project_tasks',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('project_id', sa.Integer(), sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', task_status, nullable=False),
        sa.Column('assignee_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_project_tasks_id', 'project_tasks', ['id'])
    op.create_index('ix_project_tasks_project_id', 'project_tasks', ['project_id'])

    op.create_table(
        'team_activity',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('team_id', sa.Integer(), sa.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('kind', team_activity_kind, nullable=False),
        sa.Column('description', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_team_activity_id', 'team_activity', ['id'])
    op.create_index('ix_team_activity_team_id', 'team_activity', ['team_id'])

    op.create_table(
        'chatbot_conversations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('conversation_id', sa.String(length=32), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('status', conversation_status, nullable=False),
        sa.Column('user_role', chatbot_user_role, nullable=True),
        sa.Column('total_messages', sa.Integer(), nullable=False),
        sa.Column('user_messages', sa.Integer(), nullable=False),
        sa.Column('bot_messages', sa.Integer(), nullable=False),
        sa.Column('satisfaction_rating', sa.Integer(), nullable=True),
        sa.Column('feedback_count', sa.Integer(), nullable=False),
        sa.Column('feedback_comment', sa.Text(), nullable=True),
        sa.Column('last_activity', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_chatbot_conversations_id', 'chatbot_conversations', ['id'])
    op.create_index(
        'ix_chatbot_conversations_conversation_id', 'chatbot_conversations', ['conversation_id'], unique=True
    )
    op.create_index('ix_chatbot_conversations_user_id', 'chatbot_conversations', ['user_id'])

    op.create_table(
        'chatbot_messages',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column(
            'conversation_id',
            sa.Integer(),
            sa.ForeignKey('chatbot_conversations.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('sender', message_sender, nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('intent', sa.String(length=50), nullable=True),
        sa.Column('reaction', reaction_kind, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_chatbot_messages_id', 'chatbot_messages', ['id'])
    op.create_index('ix_chatbot_messages_conversation_id', 'chatbot_messages', ['conversation_id'])


def downgrade() -> None:
    op.drop_table('chatbot_messages')
    op.drop_table('chatbot_conversations')
    op.drop_table('team_activity')
    op.drop_table('project_tasks')
    op.drop_table('projects')
    op.drop_table('team_channels')
    op.drop_table('team_members')
    op.drop_table('teams')
    op.drop_table('submissions')
    op.drop_table('assignments')
    op.drop_table('enrollments')
    op.drop_table('courses')
    op.drop_table('users')

    bind = op.get_bind()
    for enum_type in (
        reaction_kind, message_sender, conversation_status, team_activity_kind, task_status,
        project_priority, project_status, channel_kind, team_role, submission_status,
        assignment_status, enrollment_status, chatbot_user_role, user_role,
    ):
        enum_type.drop(bind, checkfirst=True)
