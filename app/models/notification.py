"""알림 관련 SQLAlchemy ORM 모델 정의.

Notification SQLAlchemy ORM model definitions.

Tables:
    - notifications: 사용자 인앱 알림 (In-app notifications with task/project/comment back-references)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, Boolean, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Notification(Base):
    """알림 모델 — 한 명의 수신자에게 전달되는 인앱 알림.

    Notification model — One in-app alert delivered to one recipient.
    The recipient is never the user whose action produced the notification.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        user_id: 수신자 FK (Recipient)
        title: 제목 (Short title, e.g. "You were mentioned in a comment")
        message: 본문 (Human-readable message)
        type: 분류 태그 (Category tag, "info" for comment/task/project events)
        link_url: 딥링크 (Optional in-app deep link)
        task_id / project_id / comment_id: 역참조 (Optional back-references)
        created_by: 발생시킨 사용자 FK (Originating user)
        is_read: 읽음 여부 (Unread by default)
        created_at: 생성 일시 UTC (Creation timestamp)
    """

    __tablename__ = "notifications"

    # 알림 고유 식별자 — Notification unique identifier (UUID v4, auto-generated)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 수신자 FK — Target user who receives this notification
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(String(1000), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="info")
    link_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    # 역참조 — Back-references to the entity that triggered the notification
    task_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=True)
    project_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=True)
    comment_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("comments.id", ondelete="CASCADE"), nullable=True)
    # 발생시킨 사용자 — Originating user
    created_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    # 읽음 여부 — False=미읽음, True=읽음 (Unread by default)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
