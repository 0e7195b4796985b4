"""프로젝트 관련 SQLAlchemy ORM 모델 정의.

Project SQLAlchemy ORM model definitions.

Tables:
    - projects: 프로젝트 (Projects owning tasks and comments)
    - project_members: 프로젝트 멤버 (Project-user membership with a project role)
"""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from sqlalchemy import String, Date, DateTime, Numeric, Text, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class Project(Base):
    """프로젝트 모델.

    Project model — Top-level container for tasks, comments and members.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        name: 프로젝트 이름 (Project name)
        description: 설명 (Optional description, markdown)
        project_code: 프로젝트 코드 (Unique code, generated as PROJ-<ms timestamp> when omitted)
        start_date / end_date: 기간 (Optional schedule)
        budget: 예산 (Optional budget)
        priority: 우선순위 (high | medium | low)
        type: 유형 (development | marketing | research | other)
        status: 상태 (planning | in_progress | on_hold | under_review | completed | cancelled)
        created_by: 생성자 FK (Creator user)
    """

    __tablename__ = "projects"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    project_code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    budget: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    priority: Mapped[str] = mapped_column(String(20), default="medium")
    type: Mapped[str] = mapped_column(String(30), default="other")
    status: Mapped[str] = mapped_column(String(30), default="planning")
    created_by: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # 관계 — Relationships
    members = relationship("ProjectMember", back_populates="project", cascade="all, delete-orphan")


class ProjectMember(Base):
    """프로젝트 멤버 모델 — 프로젝트와 사용자 연결.

    Project membership junction. A user appears at most once per project.
    """

    __tablename__ = "project_members"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # 프로젝트 내 역할 — project_manager | team_lead | member | viewer
    role: Mapped[str] = mapped_column(String(30), nullable=False, default="member")
    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("project_id", "user_id", name="uq_project_member"),
    )

    project = relationship("Project", back_populates="members")
