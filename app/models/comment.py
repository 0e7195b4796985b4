"""코멘트 SQLAlchemy ORM 모델 정의.

Comment SQLAlchemy ORM model definitions.

Tables:
    - comments: 업무/프로젝트 코멘트 (Comments on exactly one task or one project)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import CheckConstraint, DateTime, Text, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base, JSONType


class Comment(Base):
    """코멘트 모델.

    Comment model — One message attached to exactly one task or project,
    optionally replying to another comment in the same scope.
    Comments are never edited or deleted by the comment pipeline.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        content: 본문 (Non-empty body text)
        task_id: 대상 업무 FK (Owning task, xor project_id)
        project_id: 대상 프로젝트 FK (Owning project, xor task_id)
        user_id: 작성자 FK (Author)
        parent_id: 부모 코멘트 FK (Optional parent for replies)
        mentioned_user_ids: 멘션된 사용자 ID 목록 (Ordered, de-duplicated UUID strings)
        created_at: 생성 일시 UTC (Creation timestamp)
    """

    __tablename__ = "comments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    task_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=True, index=True)
    project_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=True, index=True)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    parent_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("comments.id", ondelete="SET NULL"), nullable=True)
    # 멘션 목록 — JSON array of UUID strings, first-appearance order
    mentioned_user_ids: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        CheckConstraint(
            "(task_id IS NULL) <> (project_id IS NULL)",
            name="ck_comment_single_owner",
        ),
    )

    # 관계 — Relationships
    author = relationship("User", foreign_keys=[user_id])
    parent = relationship("Comment", remote_side=[id])
