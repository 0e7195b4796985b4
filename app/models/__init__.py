"""SQLAlchemy ORM 모델 패키지 — 모든 도메인 모델의 중앙 임포트 지점.

SQLAlchemy ORM models package — Central import point for all domain models.
Importing from this package ensures all models are registered with the
SQLAlchemy metadata, which is required for Alembic migrations and
relationship resolution.

Modules:
    user: 사용자 (Users)
    project: 프로젝트 및 멤버 (Projects and memberships)
    task: 업무 (Tasks)
    comment: 코멘트 (Comments with mentions)
    notification: 인앱 알림 (In-app notifications)
    activity_log: 활동 로그 (Activity log)
    email_queue: 이메일 발송 큐 (Outbound email queue)
"""

from app.models.user import User
from app.models.project import Project, ProjectMember
from app.models.task import Task
from app.models.comment import Comment
from app.models.notification import Notification
from app.models.activity_log import ActivityLog
from app.models.email_queue import QueuedEmail

__all__ = [
    "User",
    "Project", "ProjectMember",
    "Task",
    "Comment",
    "Notification",
    "ActivityLog",
    "QueuedEmail",
]
