"""알림 서비스 — 알림 비즈니스 로직.

Notification Service — Business logic for in-app notifications.
Handles read/unread operations and the comment fan-out: one notification
plus one queued email per recipient, with each recipient reached at most
once per comment.
"""

from dataclasses import dataclass
from typing import Literal, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.comment import Comment
from app.models.notification import Notification
from app.models.project import Project
from app.models.task import Task
from app.models.user import User
from app.repositories.notification_repository import notification_repository
from app.repositories.user_repository import user_repository
from app.services.email_queue_service import email_queue_service

MENTION_TITLE: str = "You were mentioned in a comment"
TASK_COMMENT_TITLE: str = "New comment on your task"


@dataclass(frozen=True)
class PlannedRecipient:
    """코멘트 알림 수신자 (One recipient of a comment fan-out).

    Attributes:
        user_id: 수신자 UUID (Recipient)
        reason: 사유 (mention | assignee)
    """

    user_id: UUID
    reason: Literal["mention", "assignee"]


def plan_comment_recipients(
    author_id: UUID,
    mentioned_user_ids: Sequence[UUID],
    assignee_id: UUID | None = None,
) -> list[PlannedRecipient]:
    """코멘트 알림 수신자를 결정합니다.

    Decide who hears about a comment. Mentioned users come first in
    mention order, then the task assignee. One "already notified" set is
    shared by both rules, so nobody appears twice and the author never
    appears at all.

    Args:
        author_id: 작성자 UUID (Comment author)
        mentioned_user_ids: 멘션된 사용자 목록 (Resolved mentions, in order)
        assignee_id: 업무 담당자 UUID (Task assignee, None for project comments)

    Returns:
        list[PlannedRecipient]: 수신자 목록 (Recipients in delivery order)
    """
    notified: set[UUID] = {author_id}
    plan: list[PlannedRecipient] = []
    for user_id in mentioned_user_ids:
        if user_id in notified:
            continue
        notified.add(user_id)
        plan.append(PlannedRecipient(user_id, "mention"))
    if assignee_id is not None and assignee_id not in notified:
        plan.append(PlannedRecipient(assignee_id, "assignee"))
    return plan


def build_comment_link(comment: Comment, project_id: UUID) -> str:
    """코멘트 딥링크를 만듭니다 (In-app deep link to a comment)."""
    if comment.task_id is not None:
        return f"/projects/{project_id}/tasks/{comment.task_id}#comment-{comment.id}"
    return f"/projects/{project_id}#comment-{comment.id}"


class NotificationService:
    """알림 서비스.

    Notification service providing read/unread operations and the
    comment, task and project fan-outs.
    """

    # --- 공통 조회/읽음 처리 (Shared read/unread operations) ---

    async def list_notifications(
        self,
        db: AsyncSession,
        user_id: UUID,
        page: int = 1,
        per_page: int = 20,
        unread_only: bool = False,
    ) -> tuple[Sequence[Notification], int]:
        """사용자의 알림 목록을 페이지네이션하여 조회합니다.

        List paginated notifications for a user.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_id: 사용자 UUID (User UUID)
            page: 페이지 번호 (Page number)
            per_page: 페이지당 항목 수 (Items per page)
            unread_only: 미읽음만 (Only unread)

        Returns:
            tuple[Sequence[Notification], int]: (알림 목록, 전체 개수)
                                                 (List of notifications, total count)
        """
        return await notification_repository.get_user_notifications(
            db, user_id, page, per_page, unread_only
        )

    async def get_unread_count(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> int:
        """사용자의 읽지 않은 알림 수를 조회합니다."""
        return await notification_repository.get_unread_count(db, user_id)

    async def mark_read(
        self,
        db: AsyncSession,
        notification_id: UUID,
        user_id: UUID,
    ) -> bool:
        """단일 알림을 읽음 처리합니다.

        Mark a single notification as read.

        Returns:
            bool: 처리 성공 여부 (False when it does not exist or is someone else's)
        """
        return await notification_repository.mark_read(db, notification_id, user_id)

    async def mark_all_read(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> int:
        """사용자의 모든 읽지 않은 알림을 읽음 처리합니다."""
        return await notification_repository.mark_all_read(db, user_id)

    def build_response(self, notification: Notification) -> dict:
        """알림 ORM 객체를 응답 딕셔너리로 변환합니다."""
        return {
            "id": str(notification.id),
            "title": notification.title,
            "message": notification.message,
            "type": notification.type,
            "link_url": notification.link_url,
            "task_id": str(notification.task_id) if notification.task_id else None,
            "project_id": str(notification.project_id) if notification.project_id else None,
            "comment_id": str(notification.comment_id) if notification.comment_id else None,
            "created_by": str(notification.created_by) if notification.created_by else None,
            "is_read": notification.is_read,
            "created_at": notification.created_at,
        }

    # --- 자동 생성 (Fan-out) ---

    async def notify_comment(
        self,
        db: AsyncSession,
        comment: Comment,
        author: User,
        mentioned_user_ids: Sequence[UUID],
        project: Project,
        task: Task | None = None,
    ) -> list[Notification]:
        """코멘트 작성 시 알림과 이메일을 생성합니다.

        Fan a new comment out to its recipients: one notification and one
        queued email each, mentions first, then the task assignee. All
        writes join the caller's transaction.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            comment: 생성된 코멘트 (Created comment)
            author: 작성자 (Comment author)
            mentioned_user_ids: 멘션된 사용자 목록 (Resolved mentions)
            project: 소속 프로젝트 (Owning project, or the task's project)
            task: 대상 업무 (Owning task for task comments)

        Returns:
            list[Notification]: 생성된 알림 목록 (Created notifications, in order)
        """
        plan: list[PlannedRecipient] = plan_comment_recipients(
            author.id,
            mentioned_user_ids,
            task.assigned_to if task is not None else None,
        )
        if not plan:
            return []

        recipients: dict[UUID, User] = await user_repository.get_by_ids(db, [p.user_id for p in plan])
        link: str = build_comment_link(comment, project.id)
        action_url: str = f"{settings.APP_BASE_URL.rstrip('/')}{link}"

        notifications: list[Notification] = []
        for planned in plan:
            recipient: User | None = recipients.get(planned.user_id)
            if recipient is None:
                continue

            if planned.reason == "mention":
                where: str = f'task "{task.title}"' if task is not None else f'project "{project.name}"'
                title: str = MENTION_TITLE
                message: str = f"{author.full_name} mentioned you in a comment on {where}"
                template: str = "mention"
                data: dict = {
                    "mentionedBy": author.full_name,
                    "content": comment.content,
                    "taskTitle": task.title if task is not None else None,
                    "projectName": project.name,
                    "actionUrl": action_url,
                }
            else:
                title = TASK_COMMENT_TITLE
                message = f'{author.full_name} commented on your task "{task.title}"'
                template = "task_comment"
                data = {
                    "commenterName": author.full_name,
                    "taskTitle": task.title,
                    "projectName": project.name,
                    "content": comment.content,
                    "actionUrl": action_url,
                }

            notification: Notification = await notification_repository.create_notification(
                db,
                user_id=recipient.id,
                title=title,
                message=message,
                created_by=author.id,
                link_url=link,
                task_id=comment.task_id,
                project_id=project.id,
                comment_id=comment.id,
            )
            await email_queue_service.enqueue(
                db, recipient.email, recipient.full_name, template, data
            )
            notifications.append(notification)

        return notifications

    async def notify_task_assigned(
        self,
        db: AsyncSession,
        task: Task,
        project: Project,
        assignee: User,
        actor: User,
    ) -> Notification | None:
        """업무 배정 시 담당자에게 알림과 이메일을 생성합니다.

        Notify an assignee about a new task unless they assigned it to
        themselves.
        """
        if assignee.id == actor.id:
            return None
        link: str = f"/projects/{project.id}/tasks/{task.id}"
        notification: Notification = await notification_repository.create_notification(
            db,
            user_id=assignee.id,
            title="New task assigned",
            message=f'{actor.full_name} assigned you "{task.title}" in {project.name}',
            created_by=actor.id,
            link_url=link,
            task_id=task.id,
            project_id=project.id,
        )
        await email_queue_service.enqueue(
            db,
            assignee.email,
            assignee.full_name,
            "task_assigned",
            {
                "assigneeName": assignee.full_name,
                "taskTitle": task.title,
                "projectName": project.name,
                "priority": task.priority,
                "dueDate": task.due_date.isoformat() if task.due_date else None,
                "description": task.description,
                "actionUrl": f"{settings.APP_BASE_URL.rstrip('/')}{link}",
            },
        )
        return notification

    async def notify_project_member_added(
        self,
        db: AsyncSession,
        project: Project,
        member: User,
        role: str,
        actor: User,
    ) -> Notification | None:
        """프로젝트 멤버 추가 시 알림과 이메일을 생성합니다.

        Notify a user added to a project team unless they added themselves.
        """
        if member.id == actor.id:
            return None
        link: str = f"/projects/{project.id}"
        notification: Notification = await notification_repository.create_notification(
            db,
            user_id=member.id,
            title="Added to project",
            message=f'{actor.full_name} added you to "{project.name}" as {role}',
            created_by=actor.id,
            link_url=link,
            project_id=project.id,
        )
        await email_queue_service.enqueue(
            db,
            member.email,
            member.full_name,
            "project_assigned",
            {
                "memberName": member.full_name,
                "projectName": project.name,
                "role": role,
                "projectManager": actor.full_name,
                "description": project.description,
                "actionUrl": f"{settings.APP_BASE_URL.rstrip('/')}{link}",
            },
        )
        return notification


# 싱글턴 인스턴스 — Singleton instance
notification_service: NotificationService = NotificationService()
