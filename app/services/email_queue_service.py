"""이메일 큐 서비스 — 이메일 적재 및 주기적 발송 스윕.

Email Queue Service — Enqueues rendered emails and drains the queue.

A sweep releases stale claims, selects due records oldest first and then
handles them one at a time: claim (pending -> sending) and commit, send
with a bounded timeout, record the outcome and commit. A failing record
never aborts the rest of the batch. A process-local lock keeps sweeps
from overlapping.
"""

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config import settings
from app.database import async_session
from app.models.email_queue import QueuedEmail
from app.repositories.email_queue_repository import email_queue_repository
from app.utils.email import send_email
from app.utils.email_templates import RenderedEmail, render_email

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutboundEmail:
    """전송할 이메일 스냅샷 (Snapshot handed to the transport)."""

    id: UUID
    to_email: str
    to_name: str | None
    subject: str
    html: str
    text: str | None
    attempts: int
    max_attempts: int


# 전송 함수 타입 — Transport callable; raising means the send failed
Transport = Callable[[OutboundEmail], Awaitable[None]]


async def smtp_transport(email: OutboundEmail) -> None:
    """SMTP로 한 통을 발송합니다 (Send one email over SMTP)."""
    await send_email(
        to=email.to_email,
        subject=email.subject,
        html=email.html,
        text=email.text,
        to_name=email.to_name,
    )


@dataclass
class DrainResult:
    """스윕 결과 (Outcome counters for one sweep)."""

    selected: int = 0
    sent: int = 0
    retried: int = 0
    failed: int = 0
    skipped: bool = False


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EmailQueueService:
    """이메일 큐 서비스.

    Email queue service.

    Attributes:
        transport: 전송 함수 (Transport used by sweeps)
        session_factory: 스윕용 세션 팩토리 (Session factory for background sweeps)
    """

    def __init__(
        self,
        transport: Transport = smtp_transport,
        session_factory: async_sessionmaker[AsyncSession] = async_session,
    ) -> None:
        self.transport: Transport = transport
        self.session_factory: async_sessionmaker[AsyncSession] = session_factory
        self._lock: asyncio.Lock = asyncio.Lock()
        self._task: asyncio.Task | None = None

    async def enqueue(
        self,
        db: AsyncSession,
        to_email: str,
        to_name: str | None,
        template: str,
        data: dict[str, Any],
    ) -> QueuedEmail:
        """템플릿을 렌더링하여 pending 이메일로 적재합니다.

        Render a template and insert one pending record. Delivery happens
        later in a sweep; nothing is sent here.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            to_email: 수신자 이메일 (Recipient address)
            to_name: 수신자 이름 (Recipient display name)
            template: 템플릿 이름 (Template name)
            data: 템플릿 데이터 (Template data, stored as a snapshot)

        Returns:
            QueuedEmail: 적재된 레코드 (Queued record)

        Raises:
            EmailTemplateNotFoundError: 알 수 없는 템플릿 (Unknown template)
        """
        rendered: RenderedEmail = render_email(template, data)
        return await email_queue_repository.enqueue(
            db,
            to_email=to_email,
            to_name=to_name,
            subject=rendered.subject,
            html_content=rendered.html,
            text_content=rendered.text,
            template_name=template,
            template_data=data,
            max_attempts=settings.EMAIL_MAX_ATTEMPTS,
        )

    async def drain_batch(
        self,
        db: AsyncSession,
        limit: int | None = None,
        transport: Transport | None = None,
    ) -> DrainResult:
        """발송 대상 이메일을 최대 limit개 처리합니다.

        Process up to limit due records, one at a time: claim and commit,
        send, record the outcome and commit. A claim is taken right before
        its send, so its age never exceeds one send timeout while the
        sweep still owns it.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            limit: 최대 처리 수 (Batch bound, EMAIL_QUEUE_BATCH_SIZE by default)
            transport: 전송 함수 (Overrides self.transport)

        Returns:
            DrainResult: 처리 결과 (Outcome counters)
        """
        batch_size: int = limit if limit is not None else settings.EMAIL_QUEUE_BATCH_SIZE
        send: Transport = transport or self.transport
        now: datetime = _utcnow()

        released: int = await email_queue_repository.release_stale_claims(
            db, now - timedelta(seconds=settings.EMAIL_CLAIM_TIMEOUT_SECONDS)
        )
        if released:
            logger.warning("Released %d stale email claims", released)

        due: list[OutboundEmail] = [
            OutboundEmail(
                id=email.id,
                to_email=email.to_email,
                to_name=email.to_name,
                subject=email.subject,
                html=email.html_content,
                text=email.text_content,
                attempts=email.attempts,
                max_attempts=email.max_attempts,
            )
            for email in await email_queue_repository.select_due(db, batch_size, now)
        ]
        await db.commit()

        result: DrainResult = DrainResult(selected=len(due))
        for outbound in due:
            try:
                claimed: bool = await email_queue_repository.claim(
                    db, outbound.id, _utcnow(), outbound.attempts
                )
                await db.commit()
                if not claimed:
                    logger.info("Email %s was claimed elsewhere, skipping", outbound.id)
                    continue
                await self._deliver(db, outbound, send, result)
                await db.commit()
            except Exception:
                # 기록 실패 — 선점은 타임아웃 후 복구됨 (Claim is released after the lease)
                logger.exception("Failed to record outcome for email %s", outbound.id)
                await db.rollback()
        return result

    async def _deliver(
        self,
        db: AsyncSession,
        outbound: OutboundEmail,
        send: Transport,
        result: DrainResult,
    ) -> None:
        timeout: float = settings.EMAIL_SEND_TIMEOUT_SECONDS
        try:
            await asyncio.wait_for(send(outbound), timeout=timeout)
        except asyncio.TimeoutError:
            error: str = f"Send timed out after {timeout:g}s"
        except Exception as exc:
            error = str(exc) or exc.__class__.__name__
        else:
            if not await email_queue_repository.mark_sent(db, outbound.id, _utcnow()):
                logger.warning("Email %s was sent after its claim was released", outbound.id)
            result.sent += 1
            logger.info("Email sent to %s (%s)", outbound.to_email, outbound.id)
            return

        attempts: int = outbound.attempts + 1
        terminal: bool = attempts >= outbound.max_attempts
        retry_at: datetime = _utcnow() + timedelta(seconds=settings.EMAIL_RETRY_DELAY_SECONDS * attempts)
        recorded: bool = await email_queue_repository.mark_attempt_failed(
            db, outbound.id, error, terminal=terminal, retry_at=retry_at
        )
        if not recorded:
            logger.warning("Email %s failed after its claim was released: %s", outbound.id, error)
            return
        if terminal:
            result.failed += 1
            logger.warning(
                "Email to %s failed permanently after %d attempts: %s",
                outbound.to_email, attempts, error,
            )
        else:
            result.retried += 1
            logger.info(
                "Email to %s failed (attempt %d/%d): %s",
                outbound.to_email, attempts, outbound.max_attempts, error,
            )

    async def run_sweep(self, db: AsyncSession | None = None) -> DrainResult:
        """스윕을 한 번 실행합니다 — 이미 실행 중이면 건너뜁니다.

        Run one sweep unless another one holds the lock, in which case the
        call returns a skipped result right away.

        Args:
            db: 사용할 세션, 없으면 새로 생성 (Session to use; a fresh one otherwise)
        """
        if self._lock.locked():
            logger.info("Email sweep already running, skipping")
            return DrainResult(skipped=True)
        async with self._lock:
            if db is not None:
                return await self.drain_batch(db)
            async with self.session_factory() as session:
                return await self.drain_batch(session)

    async def process_now(self) -> None:
        """커밋 직후 즉시 한 번 처리합니다 (Best-effort pass after a commit).

        Used in production mode as a background task; the periodic sweep
        stays the reliable path, so failures here are only logged.
        """
        try:
            await self.run_sweep()
        except Exception:
            logger.exception("Immediate email queue pass failed")

    async def run_forever(self) -> None:
        """주기적으로 스윕을 실행합니다 (Periodic sweep loop)."""
        interval: int = settings.EMAIL_QUEUE_INTERVAL_SECONDS
        logger.info("Email queue processor started (every %ss)", interval)
        while True:
            try:
                result: DrainResult = await self.run_sweep()
                if result.selected:
                    logger.info(
                        "Email sweep: selected=%d sent=%d retried=%d failed=%d",
                        result.selected, result.sent, result.retried, result.failed,
                    )
            except Exception:
                logger.exception("Email sweep crashed")
            await asyncio.sleep(interval)

    def start(self) -> None:
        """백그라운드 루프를 시작합니다 (Start the background loop once)."""
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run_forever())

    async def stop(self) -> None:
        """백그라운드 루프를 중지합니다 (Cancel the loop and wait for it)."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None


# 싱글턴 인스턴스 — Singleton instance
email_queue_service: EmailQueueService = EmailQueueService()
