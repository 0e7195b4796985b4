"""이메일 큐 Pydantic 응답 스키마 정의.

Email queue Pydantic response schema definitions (admin surface).
"""

from datetime import datetime

from pydantic import BaseModel


class QueuedEmailResponse(BaseModel):
    """큐 이메일 응답 스키마.

    Queued email response. Bodies are omitted; the list is for monitoring.
    """

    id: str
    to_email: str
    to_name: str | None = None
    subject: str
    template_name: str | None = None
    status: str
    attempts: int
    max_attempts: int
    scheduled_at: datetime
    error_message: str | None = None
    sent_at: datetime | None = None
    created_at: datetime


class DrainResultResponse(BaseModel):
    """큐 처리 결과 응답 스키마.

    Result of one sweep over the queue.

    Attributes:
        selected: 선택된 레코드 수 (Records selected)
        sent: 발송 성공 수 (Sent)
        retried: 재시도 대기로 돌아간 수 (Back to pending)
        failed: 최종 실패 수 (Terminally failed)
        skipped: 다른 처리가 진행 중이라 건너뜀 (Sweep skipped, lock held)
    """

    selected: int
    sent: int
    retried: int
    failed: int
    skipped: bool = False
