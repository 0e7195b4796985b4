"""알림 레포지토리 — 알림 관련 DB 쿼리 담당.

Notification Repository — Handles all notification-related database queries.
Extends BaseRepository with user-specific notification operations.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.notification import Notification
from app.repositories.base import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    """알림 레포지토리.

    Notification repository with user-specific read/unread operations.

    Extends:
        BaseRepository[Notification]
    """

    def __init__(self) -> None:
        """레포지토리를 초기화합니다.

        Initialize the notification repository with Notification model.
        """
        super().__init__(Notification)

    async def get_user_notifications(
        self,
        db: AsyncSession,
        user_id: UUID,
        page: int = 1,
        per_page: int = 20,
        unread_only: bool = False,
    ) -> tuple[Sequence[Notification], int]:
        """사용자의 알림 목록을 페이지네이션하여 조회합니다.

        Retrieve paginated notifications for a user, newest first.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_id: 사용자 UUID (User UUID)
            page: 페이지 번호, 1부터 시작 (Page number, 1-based)
            per_page: 페이지당 항목 수 (Items per page)
            unread_only: 미읽음만 조회 (Only unread notifications)

        Returns:
            tuple[Sequence[Notification], int]: (알림 목록, 전체 개수)
                                                 (List of notifications, total count)
        """
        query: Select = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            query = query.where(Notification.is_read.is_(False))
        query = query.order_by(Notification.created_at.desc())
        return await self.get_paginated(db, query, page, per_page)

    async def get_unread_count(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> int:
        """사용자의 읽지 않은 알림 수를 조회합니다.

        Get the count of unread notifications for a user.
        """
        query: Select = (
            select(func.count())
            .select_from(Notification)
            .where(
                Notification.user_id == user_id,
                Notification.is_read.is_(False),
            )
        )
        count: int = (await db.execute(query)).scalar() or 0
        return count

    async def mark_read(
        self,
        db: AsyncSession,
        notification_id: UUID,
        user_id: UUID,
    ) -> bool:
        """단일 알림을 읽음 처리합니다.

        Mark a single notification as read. Only the recipient can do this.

        Returns:
            bool: 처리 성공 여부 (Whether a row was updated)
        """
        result = await db.execute(
            update(Notification)
            .where(
                Notification.id == notification_id,
                Notification.user_id == user_id,
            )
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
        await db.flush()
        return result.rowcount > 0

    async def mark_all_read(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> int:
        """사용자의 모든 읽지 않은 알림을 읽음 처리합니다.

        Mark all unread notifications as read for a user.

        Returns:
            int: 업데이트된 알림 수 (Count of updated notifications)
        """
        result = await db.execute(
            update(Notification)
            .where(
                Notification.user_id == user_id,
                Notification.is_read.is_(False),
            )
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
        await db.flush()
        return result.rowcount

    async def create_notification(
        self,
        db: AsyncSession,
        user_id: UUID,
        title: str,
        message: str,
        created_by: UUID | None,
        link_url: str | None = None,
        task_id: UUID | None = None,
        project_id: UUID | None = None,
        comment_id: UUID | None = None,
        notification_type: str = "info",
    ) -> Notification:
        """새 알림을 생성합니다.

        Create a new notification.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_id: 수신자 UUID (Recipient user UUID)
            title: 제목 (Notification title)
            message: 알림 메시지 (Notification message)
            created_by: 발생시킨 사용자 UUID (Originating user UUID)
            link_url: 딥링크, 선택 (Optional deep link)
            task_id / project_id / comment_id: 역참조, 선택 (Optional back-references)
            notification_type: 분류 태그 (Category tag)

        Returns:
            Notification: 생성된 알림 (Created notification)
        """
        notification: Notification = Notification(
            user_id=user_id,
            title=title,
            message=message,
            type=notification_type,
            link_url=link_url,
            task_id=task_id,
            project_id=project_id,
            comment_id=comment_id,
            created_by=created_by,
        )
        db.add(notification)
        await db.flush()
        await db.refresh(notification)
        return notification


# 싱글턴 인스턴스 — Singleton instance
notification_repository: NotificationRepository = NotificationRepository()
