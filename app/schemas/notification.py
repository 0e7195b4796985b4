"""알림 Pydantic 응답 스키마 정의.

Notification Pydantic response schema definitions.
"""

from datetime import datetime

from pydantic import BaseModel


class NotificationResponse(BaseModel):
    """알림 응답 스키마.

    Notification response schema. link_url is the in-app deep link.

    Attributes:
        id: 알림 UUID (Notification unique identifier)
        title: 제목 (Title)
        message: 알림 메시지 (Human-readable message)
        type: 분류 태그 (Category tag)
        link_url: 딥링크 (Deep link, nullable)
        task_id / project_id / comment_id: 역참조 (Back-references)
        is_read: 읽음 여부 (Read status flag)
        created_at: 생성 일시 (Creation timestamp)
    """

    id: str
    title: str
    message: str
    type: str
    link_url: str | None = None
    task_id: str | None = None
    project_id: str | None = None
    comment_id: str | None = None
    created_by: str | None = None
    is_read: bool
    created_at: datetime


class UnreadCountResponse(BaseModel):
    """읽지 않은 알림 수 응답 스키마 (Unread count response)."""

    unread_count: int
