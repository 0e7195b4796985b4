"""이메일 발송 큐 SQLAlchemy ORM 모델 정의.

Email queue SQLAlchemy ORM model definitions.

Tables:
    - email_queue: 발송 대기 이메일 (Durable outbound emails with retry bookkeeping)

Status transitions:
    pending -> sending            (claimed by a sweep)
    sending -> sent               (transport success, terminal)
    sending -> pending            (transport failure, attempts + 1 < max_attempts)
    sending -> failed             (transport failure, attempts + 1 >= max_attempts, terminal)
    sending -> pending            (claim older than EMAIL_CLAIM_TIMEOUT_SECONDS released)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, DateTime, Integer, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, JSONType

# 이메일 상태 값 — Email queue status values
EMAIL_STATUS_PENDING: str = "pending"
EMAIL_STATUS_SENDING: str = "sending"
EMAIL_STATUS_SENT: str = "sent"
EMAIL_STATUS_FAILED: str = "failed"


class QueuedEmail(Base):
    """발송 대기 이메일 모델.

    Queued email model — One durable outbound email.
    attempts only grows and never exceeds max_attempts; a record is
    "failed" exactly when attempts reached max_attempts without a send.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        to_email / to_name: 수신자 (Recipient address and display name)
        subject: 제목 (Subject line)
        html_content / text_content: 본문 (Rendered HTML and plain-text bodies)
        template_name / template_data: 템플릿 정보 (Template name and data snapshot)
        status: 상태 (pending | sending | sent | failed)
        attempts / max_attempts: 시도 횟수와 상한 (Attempt counter and bound)
        scheduled_at: 발송 예정 시각 (Not selected before this time)
        claimed_at: 선점 시각 (When the current sweep claimed the record)
        error_message: 마지막 오류 (Last transport error)
        sent_at: 발송 완료 시각 (Set on success)
        created_at: 생성 일시 UTC (Creation timestamp; FIFO order key)
    """

    __tablename__ = "email_queue"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    to_email: Mapped[str] = mapped_column(String(255), nullable=False)
    to_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    subject: Mapped[str] = mapped_column(String(500), nullable=False)
    html_content: Mapped[str] = mapped_column(Text, nullable=False)
    text_content: Mapped[str | None] = mapped_column(Text, nullable=True)
    template_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    template_data: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=EMAIL_STATUS_PENDING, index=True)
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    scheduled_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    claimed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True)
