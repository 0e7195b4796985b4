"""활동 로그 SQLAlchemy ORM 모델 정의.

Activity log SQLAlchemy ORM model definitions.

Tables:
    - activity_logs: 활동 기록 (Append-only audit trail of project/task events)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, JSONType


class ActivityLog(Base):
    """활동 로그 모델.

    Activity log model — One row per recorded event.
    details/meta hold the JSON form of a tagged payload from
    app.schemas.activity; the action column is the tag.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        user_id: 행위자 FK (Actor)
        task_id / project_id: 대상 (Optional scope references)
        action: 이벤트 태그 (Event tag, e.g. "comment_added")
        details: 이벤트 상세 (Event details payload)
        meta: 부가 메타데이터 (Optional metadata payload; DB column "metadata")
        created_at: 생성 일시 UTC (Creation timestamp)
    """

    __tablename__ = "activity_logs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    task_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=True, index=True)
    project_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=True, index=True)
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    details: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)
    # "metadata"는 Declarative 예약어 — attribute renamed, column name kept
    meta: Mapped[dict | None] = mapped_column("metadata", JSONType, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
