"""업무(Task) SQLAlchemy ORM 모델 정의.

Task SQLAlchemy ORM model definitions.

Tables:
    - tasks: 프로젝트 업무 (Kanban tasks belonging to a project)
"""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from sqlalchemy import String, Date, DateTime, Numeric, Text, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base, JSONType

# 업무 상태 값 — Kanban columns in board order
TASK_STATUSES: tuple[str, ...] = ("backlog", "todo", "in_progress", "in_review", "testing", "done", "blocked")


class Task(Base):
    """업무 모델.

    Task model — A unit of work inside a project, optionally assigned to one user.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        project_id: 소속 프로젝트 FK (Owning project)
        title: 제목 (Task title)
        description: 설명 (Optional description, markdown)
        assigned_to: 담당자 FK (Optional assignee)
        created_by: 생성자 FK (Creator)
        parent_task_id: 상위 업무 FK (Optional parent task)
        priority: 우선순위 (low | medium | high | critical)
        status: 상태 (see TASK_STATUSES)
        tags: 태그 목록 (Optional list of tags)
    """

    __tablename__ = "tasks"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    assigned_to: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_by: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    parent_task_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("tasks.id", ondelete="SET NULL"), nullable=True)
    priority: Mapped[str] = mapped_column(String(20), default="medium")
    status: Mapped[str] = mapped_column(String(20), default="backlog")
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    estimated_hours: Mapped[Decimal | None] = mapped_column(Numeric(8, 2), nullable=True)
    actual_hours: Mapped[Decimal] = mapped_column(Numeric(8, 2), default=0)
    tags: Mapped[list | None] = mapped_column(JSONType, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # 관계 — Relationships
    project = relationship("Project")
    assignee = relationship("User", foreign_keys=[assigned_to])
