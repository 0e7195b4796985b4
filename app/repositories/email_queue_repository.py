"""이메일 큐 레포지토리 — 발송 대기 이메일 DB 쿼리 담당.

Email Queue Repository — Durable outbound email records.
Every state change is a conditional UPDATE guarded on the current
status, so two sweeps touching the same record cannot both win.
"""

from datetime import datetime
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import Select, case, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.email_queue import (
    EMAIL_STATUS_FAILED,
    EMAIL_STATUS_PENDING,
    EMAIL_STATUS_SENDING,
    EMAIL_STATUS_SENT,
    QueuedEmail,
)
from app.repositories.base import BaseRepository

# 해제된 선점에 기록되는 오류 (Error recorded on a released claim)
STALE_CLAIM_ERROR: str = "Claim expired before the delivery outcome was recorded"


class EmailQueueRepository(BaseRepository[QueuedEmail]):
    """이메일 큐 레포지토리.

    Email queue repository.

    Extends:
        BaseRepository[QueuedEmail]
    """

    def __init__(self) -> None:
        """레포지토리를 초기화합니다.

        Initialize the email queue repository with QueuedEmail model.
        """
        super().__init__(QueuedEmail)

    async def enqueue(
        self,
        db: AsyncSession,
        to_email: str,
        to_name: str | None,
        subject: str,
        html_content: str,
        text_content: str | None,
        template_name: str | None,
        template_data: dict[str, Any] | None,
        max_attempts: int,
    ) -> QueuedEmail:
        """pending 상태의 이메일을 큐에 추가합니다.

        Insert one pending record with zero attempts.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            to_email / to_name: 수신자 (Recipient address and display name)
            subject: 제목 (Subject)
            html_content / text_content: 렌더링된 본문 (Rendered bodies)
            template_name / template_data: 템플릿 정보 (Template name and data snapshot)
            max_attempts: 최대 시도 횟수 (Attempt bound)

        Returns:
            QueuedEmail: 생성된 레코드 (Created record)
        """
        email: QueuedEmail = QueuedEmail(
            to_email=to_email,
            to_name=to_name,
            subject=subject,
            html_content=html_content,
            text_content=text_content,
            template_name=template_name,
            template_data=template_data,
            status=EMAIL_STATUS_PENDING,
            attempts=0,
            max_attempts=max_attempts,
        )
        db.add(email)
        await db.flush()
        await db.refresh(email)
        return email

    async def release_stale_claims(
        self,
        db: AsyncSession,
        claimed_before: datetime,
    ) -> int:
        """오래된 sending 선점을 해제합니다.

        Release records stuck in "sending" since before claimed_before.
        Covers a sweep that died between claim and outcome. The lost
        delivery counts as an attempt: the record goes back to "pending",
        or to "failed" once the attempt bound is reached.

        Returns:
            int: 해제된 레코드 수 (Number of released records)
        """
        result = await db.execute(
            update(QueuedEmail)
            .where(
                QueuedEmail.status == EMAIL_STATUS_SENDING,
                QueuedEmail.claimed_at < claimed_before,
            )
            .values(
                attempts=QueuedEmail.attempts + 1,
                status=case(
                    (QueuedEmail.attempts + 1 >= QueuedEmail.max_attempts, EMAIL_STATUS_FAILED),
                    else_=EMAIL_STATUS_PENDING,
                ),
                error_message=STALE_CLAIM_ERROR,
                claimed_at=None,
            )
            .execution_options(synchronize_session=False)
        )
        await db.flush()
        return result.rowcount

    async def select_due(
        self,
        db: AsyncSession,
        limit: int,
        now: datetime,
    ) -> list[QueuedEmail]:
        """발송 대상 이메일을 오래된 순으로 최대 limit개 조회합니다.

        Select up to limit records that are pending, under their attempt
        bound and due, oldest-created first.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            limit: 최대 개수 (Batch bound)
            now: 기준 시각 (Due-time reference)

        Returns:
            list[QueuedEmail]: 발송 대상 목록 (Due records)
        """
        query: Select = (
            select(QueuedEmail)
            .where(
                QueuedEmail.status == EMAIL_STATUS_PENDING,
                QueuedEmail.attempts < QueuedEmail.max_attempts,
                QueuedEmail.scheduled_at <= now,
            )
            .order_by(QueuedEmail.created_at, QueuedEmail.id)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    async def claim(
        self,
        db: AsyncSession,
        email_id: UUID,
        now: datetime,
        attempts: int,
    ) -> bool:
        """pending -> sending 조건부 전이로 레코드를 선점합니다.

        Claim a record with a compare-and-set from pending to sending. The
        record must still be due and still carry the attempt count seen at
        selection time, so a record another sweep has touched since is left
        alone.

        Returns:
            bool: 선점 성공 여부 (False when another sweep got there first)
        """
        result = await db.execute(
            update(QueuedEmail)
            .where(
                QueuedEmail.id == email_id,
                QueuedEmail.status == EMAIL_STATUS_PENDING,
                QueuedEmail.attempts == attempts,
                QueuedEmail.attempts < QueuedEmail.max_attempts,
                QueuedEmail.scheduled_at <= now,
            )
            .values(status=EMAIL_STATUS_SENDING, claimed_at=now)
            .execution_options(synchronize_session=False)
        )
        await db.flush()
        return result.rowcount > 0

    async def mark_sent(
        self,
        db: AsyncSession,
        email_id: UUID,
        now: datetime,
    ) -> bool:
        """선점된 레코드를 sent로 전이합니다 (sending -> sent)."""
        result = await db.execute(
            update(QueuedEmail)
            .where(
                QueuedEmail.id == email_id,
                QueuedEmail.status == EMAIL_STATUS_SENDING,
            )
            .values(status=EMAIL_STATUS_SENT, sent_at=now, claimed_at=None)
            .execution_options(synchronize_session=False)
        )
        await db.flush()
        return result.rowcount > 0

    async def mark_attempt_failed(
        self,
        db: AsyncSession,
        email_id: UUID,
        error_message: str,
        terminal: bool,
        retry_at: datetime | None = None,
    ) -> bool:
        """발송 실패를 기록합니다.

        Record a failed attempt: attempts + 1, error message stored, status
        back to pending or, when terminal, to failed. A retry_at pushes the
        next due time out.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            email_id: 이메일 UUID (Email UUID)
            error_message: 오류 메시지 (Transport error)
            terminal: 최종 실패 여부 (True when the new attempt count reaches the bound)
            retry_at: 다음 발송 예정 시각 (Next due time for a retry)

        Returns:
            bool: 갱신 성공 여부 (Whether the record was updated)
        """
        values: dict[str, Any] = {
            "attempts": QueuedEmail.attempts + 1,
            "error_message": error_message,
            "status": EMAIL_STATUS_FAILED if terminal else EMAIL_STATUS_PENDING,
            "claimed_at": None,
        }
        if retry_at is not None and not terminal:
            values["scheduled_at"] = retry_at
        result = await db.execute(
            update(QueuedEmail)
            .where(
                QueuedEmail.id == email_id,
                QueuedEmail.status == EMAIL_STATUS_SENDING,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        await db.flush()
        return result.rowcount > 0

    async def list_by_status(
        self,
        db: AsyncSession,
        status: str | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[QueuedEmail], int]:
        """상태별 큐 레코드를 최신순으로 페이지네이션 조회합니다.

        List queue records, optionally filtered by status, newest first.
        """
        query: Select = select(QueuedEmail)
        if status is not None:
            query = query.where(QueuedEmail.status == status)
        query = query.order_by(QueuedEmail.created_at.desc())
        return await self.get_paginated(db, query, page, per_page)


# 싱글턴 인스턴스 — Singleton instance
email_queue_repository: EmailQueueRepository = EmailQueueRepository()
