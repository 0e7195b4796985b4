"""이메일 큐 스윕 테스트.

Email queue tests — enqueue, claim-before-send drain, bounded retries,
timeouts, stale claim release, non-reentrant sweeps and the background
loop lifecycle.
"""

import asyncio
import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import pytest
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config import Settings, settings
from app.main import app
from app.models.email_queue import QueuedEmail
from app.services.email_queue_service import (
    DrainResult,
    EmailQueueService,
    OutboundEmail,
    email_queue_service,
)
from app.utils.email_templates import EmailTemplateNotFoundError


class FakeTransport:
    """전송 기록용 가짜 트랜스포트 (Records sends, fails for chosen addresses)."""

    def __init__(self, fail_for: set[str] | None = None) -> None:
        self.sent: list[OutboundEmail] = []
        self.fail_for: set[str] = fail_for or set()

    async def __call__(self, email: OutboundEmail) -> None:
        if email.to_email in self.fail_for:
            raise ConnectionError("SMTP connection refused")
        self.sent.append(email)


def _utc_naive(dt: datetime) -> datetime:
    return dt.astimezone(timezone.utc).replace(tzinfo=None) if dt.tzinfo else dt


async def _add_email(
    db: AsyncSession,
    to_email: str = "user@test.com",
    status: str = "pending",
    attempts: int = 0,
    max_attempts: int = 3,
    created_at: datetime | None = None,
    scheduled_at: datetime | None = None,
    claimed_at: datetime | None = None,
) -> QueuedEmail:
    now = datetime.now(timezone.utc)
    email = QueuedEmail(
        to_email=to_email,
        to_name=None,
        subject="Hello",
        html_content="<p>Hello</p>",
        text_content="Hello",
        template_name="mention",
        template_data={},
        status=status,
        attempts=attempts,
        max_attempts=max_attempts,
        created_at=created_at or now,
        scheduled_at=scheduled_at or now - timedelta(seconds=1),
        claimed_at=claimed_at,
    )
    db.add(email)
    await db.flush()
    await db.commit()
    return email


async def _reload(db: AsyncSession, email_id: uuid.UUID) -> QueuedEmail:
    return await db.get(QueuedEmail, email_id, populate_existing=True)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def service(transport: FakeTransport, session_factory: async_sessionmaker) -> EmailQueueService:
    return EmailQueueService(transport=transport, session_factory=session_factory)


class TestEnqueue:
    """이메일 적재 테스트."""

    async def test_enqueue_renders_and_stores_pending(self, db: AsyncSession, service: EmailQueueService):
        email = await service.enqueue(
            db,
            "carol@test.com",
            "carol",
            "mention",
            {"mentionedBy": "dave", "content": "Great work @carol!", "actionUrl": "http://x/1"},
        )
        assert email.status == "pending"
        assert email.attempts == 0
        assert email.max_attempts == settings.EMAIL_MAX_ATTEMPTS
        assert email.subject == "You were mentioned in a comment"
        assert "Great work @carol!" in email.text_content
        assert email.template_data["mentionedBy"] == "dave"

    async def test_unknown_template(self, db: AsyncSession, service: EmailQueueService):
        with pytest.raises(EmailTemplateNotFoundError):
            await service.enqueue(db, "a@test.com", None, "weekly_digest", {})


class TestDrainBatch:
    """큐 처리 테스트."""

    async def test_success_marks_sent(self, db: AsyncSession, service, transport):
        email = await _add_email(db)
        result = await service.drain_batch(db)

        assert (result.selected, result.sent, result.retried, result.failed) == (1, 1, 0, 0)
        assert [e.id for e in transport.sent] == [email.id]
        stored = await _reload(db, email.id)
        assert stored.status == "sent"
        assert stored.sent_at is not None
        assert stored.attempts == 0

    async def test_last_attempt_failure_is_terminal(self, db: AsyncSession, service, transport):
        email = await _add_email(db, to_email="down@test.com", attempts=2, max_attempts=3)
        transport.fail_for.add("down@test.com")

        result = await service.drain_batch(db)

        assert result.failed == 1
        stored = await _reload(db, email.id)
        assert stored.status == "failed"
        assert stored.attempts == 3
        assert stored.error_message == "SMTP connection refused"

    async def test_earlier_failure_requeues_with_backoff(self, db: AsyncSession, service, transport):
        email = await _add_email(db, to_email="down@test.com", attempts=0, max_attempts=3)
        transport.fail_for.add("down@test.com")
        before = datetime.now(timezone.utc)

        result = await service.drain_batch(db)

        assert result.retried == 1
        stored = await _reload(db, email.id)
        assert stored.status == "pending"
        assert stored.attempts == 1
        assert _utc_naive(stored.scheduled_at) >= _utc_naive(
            before + timedelta(seconds=settings.EMAIL_RETRY_DELAY_SECONDS - 1)
        )
        # 재시도 시각 전에는 다시 선택되지 않음 (not selected again before its retry time)
        again = await service.drain_batch(db)
        assert again.selected == 0

    async def test_batch_bounded_and_oldest_first(self, db: AsyncSession, service, transport):
        base = datetime.now(timezone.utc) - timedelta(hours=1)
        emails = [
            await _add_email(db, to_email=f"u{i}@test.com", created_at=base + timedelta(minutes=i))
            for i in range(12)
        ]

        result = await service.drain_batch(db, limit=10)

        assert result.selected == 10
        assert [e.to_email for e in transport.sent] == [e.to_email for e in emails[:10]]
        assert (await _reload(db, emails[10].id)).status == "pending"
        assert (await _reload(db, emails[11].id)).status == "pending"

    async def test_never_selects_ineligible_records(self, db: AsyncSession, service, transport):
        future = datetime.now(timezone.utc) + timedelta(hours=1)
        await _add_email(db, to_email="sent@test.com", status="sent")
        await _add_email(db, to_email="failed@test.com", status="failed", attempts=3)
        await _add_email(db, to_email="exhausted@test.com", attempts=3, max_attempts=3)
        await _add_email(db, to_email="later@test.com", scheduled_at=future)
        await _add_email(
            db, to_email="inflight@test.com", status="sending", claimed_at=datetime.now(timezone.utc)
        )

        result = await service.drain_batch(db)

        assert result.selected == 0
        assert transport.sent == []

    async def test_one_failure_does_not_abort_batch(self, db: AsyncSession, service, transport):
        base = datetime.now(timezone.utc) - timedelta(minutes=10)
        bad = await _add_email(db, to_email="down@test.com", created_at=base)
        good = await _add_email(db, to_email="ok@test.com", created_at=base + timedelta(minutes=1))
        transport.fail_for.add("down@test.com")

        result = await service.drain_batch(db)

        assert (result.sent, result.retried) == (1, 1)
        assert (await _reload(db, bad.id)).status == "pending"
        assert (await _reload(db, good.id)).status == "sent"

    async def test_timeout_counts_as_failure(self, db: AsyncSession, session_factory, monkeypatch):
        async def slow_transport(email: OutboundEmail) -> None:
            await asyncio.sleep(5)

        monkeypatch.setattr(settings, "EMAIL_SEND_TIMEOUT_SECONDS", 0.05)
        service = EmailQueueService(transport=slow_transport, session_factory=session_factory)
        email = await _add_email(db)

        result = await service.drain_batch(db)

        assert result.retried == 1
        stored = await _reload(db, email.id)
        assert stored.status == "pending"
        assert stored.attempts == 1
        assert "timed out" in stored.error_message

    async def test_stale_claim_released_counts_attempt_and_sent(self, db: AsyncSession, service, transport):
        long_ago = datetime.now(timezone.utc) - timedelta(seconds=settings.EMAIL_CLAIM_TIMEOUT_SECONDS + 60)
        email = await _add_email(db, status="sending", claimed_at=long_ago)

        result = await service.drain_batch(db)

        assert result.sent == 1
        reloaded = await _reload(db, email.id)
        assert reloaded.status == "sent"
        assert reloaded.attempts == 1

    async def test_stale_claim_on_last_attempt_fails(self, db: AsyncSession, service, transport):
        long_ago = datetime.now(timezone.utc) - timedelta(seconds=settings.EMAIL_CLAIM_TIMEOUT_SECONDS + 60)
        email = await _add_email(db, status="sending", attempts=2, max_attempts=3, claimed_at=long_ago)

        result = await service.drain_batch(db)

        assert result.selected == 0
        assert transport.sent == []
        reloaded = await _reload(db, email.id)
        assert reloaded.status == "failed"
        assert reloaded.attempts == 3
        assert reloaded.claimed_at is None
        assert "Claim expired" in reloaded.error_message

    async def test_claims_one_record_at_a_time(self, db: AsyncSession, session_factory):
        seen: list[str] = []
        first = await _add_email(db, "a@test.com", created_at=datetime.now(timezone.utc) - timedelta(seconds=10))
        second = await _add_email(db, "b@test.com")

        async def inspecting_transport(email: OutboundEmail) -> None:
            async with session_factory() as other:
                pending = await _reload(other, second.id)
                seen.append(pending.status)

        service = EmailQueueService(transport=inspecting_transport, session_factory=session_factory)
        await service.drain_batch(db)

        # 첫 번째 발송 중 두 번째는 아직 선점되지 않음 (Second is not claimed while the first sends)
        assert seen == ["pending", "sending"]
        assert (await _reload(db, first.id)).status == "sent"

    async def test_overlapping_workers_send_each_email_once(
        self, db: AsyncSession, session_factory, monkeypatch
    ):
        monkeypatch.setattr(settings, "EMAIL_SEND_TIMEOUT_SECONDS", 0.4)
        monkeypatch.setattr(settings, "EMAIL_CLAIM_TIMEOUT_SECONDS", 0.45)
        sends: list[tuple[str, uuid.UUID]] = []
        second_started = asyncio.Event()
        release = asyncio.Event()
        first = await _add_email(db, "a@test.com", created_at=datetime.now(timezone.utc) - timedelta(seconds=10))
        second = await _add_email(db, "b@test.com")

        async def worker_a_transport(email: OutboundEmail) -> None:
            if email.id == first.id:
                await asyncio.sleep(0.3)
            else:
                second_started.set()
                await release.wait()
            sends.append(("A", email.id))

        async def worker_b_transport(email: OutboundEmail) -> None:
            sends.append(("B", email.id))

        worker_a = EmailQueueService(transport=worker_a_transport, session_factory=session_factory)
        worker_b = EmailQueueService(transport=worker_b_transport, session_factory=session_factory)

        sweep_a = asyncio.create_task(worker_a.run_sweep())
        await asyncio.wait_for(second_started.wait(), timeout=5)
        # 배치 시작 기준으로는 선점 타임아웃을 넘긴 시점 (Past the lease if measured from batch start)
        await asyncio.sleep(0.2)
        result_b = await worker_b.run_sweep()
        release.set()
        result_a = await sweep_a

        assert result_b.selected == 0
        assert sends == [("A", first.id), ("A", second.id)]
        assert result_a.sent == 2
        assert (await _reload(db, second.id)).attempts == 0


class TestSettings:
    """이메일 큐 설정 검증 테스트."""

    def test_claim_timeout_must_exceed_send_timeout(self):
        with pytest.raises(ValidationError):
            Settings(EMAIL_SEND_TIMEOUT_SECONDS=30, EMAIL_CLAIM_TIMEOUT_SECONDS=30)

    def test_valid_timeouts(self):
        assert Settings(EMAIL_SEND_TIMEOUT_SECONDS=20, EMAIL_CLAIM_TIMEOUT_SECONDS=21).EMAIL_CLAIM_TIMEOUT_SECONDS == 21


class TestRunSweep:
    """스윕 실행 및 재진입 방지 테스트."""

    async def test_run_sweep_uses_own_session(self, db: AsyncSession, service, transport):
        email = await _add_email(db)
        result = await service.run_sweep()
        assert result.sent == 1
        assert (await _reload(db, email.id)).status == "sent"

    async def test_overlapping_sweep_is_skipped(self, db: AsyncSession, session_factory):
        release = asyncio.Event()
        started = asyncio.Event()
        sent: list[uuid.UUID] = []

        async def blocking_transport(email: OutboundEmail) -> None:
            started.set()
            await release.wait()
            sent.append(email.id)

        service = EmailQueueService(transport=blocking_transport, session_factory=session_factory)
        email = await _add_email(db)

        first = asyncio.create_task(service.run_sweep())
        await asyncio.wait_for(started.wait(), timeout=5)

        second = await service.run_sweep()
        assert second.skipped is True
        assert second.selected == 0

        release.set()
        result = await first
        assert result.sent == 1
        assert sent == [email.id]


class TestBackgroundLoop:
    """주기적 스윕 루프 시작/중지 테스트 (Periodic loop lifecycle)."""

    async def test_loop_survives_crashed_sweep(self, service: EmailQueueService, monkeypatch, caplog):
        monkeypatch.setattr(settings, "EMAIL_QUEUE_INTERVAL_SECONDS", 0)
        calls: list[int] = []

        async def flaky_sweep(db: AsyncSession | None = None) -> DrainResult:
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("database unavailable")
            return DrainResult()

        monkeypatch.setattr(service, "run_sweep", flaky_sweep)
        service.start()
        for _ in range(200):
            if len(calls) >= 3:
                break
            await asyncio.sleep(0.01)
        await service.stop()

        assert len(calls) >= 3
        assert "Email sweep crashed" in caplog.text
        assert service._task is None

    async def test_start_is_idempotent(self, service: EmailQueueService, monkeypatch):
        monkeypatch.setattr(settings, "EMAIL_QUEUE_INTERVAL_SECONDS", 60)
        monkeypatch.setattr(service, "run_sweep", AsyncMock(return_value=DrainResult()))
        service.start()
        task = service._task
        service.start()
        assert service._task is task
        await service.stop()
        assert task.cancelled()

    async def test_stop_without_start(self, service: EmailQueueService):
        await service.stop()
        assert service._task is None


class TestLifespan:
    """앱 수명주기와 스윕 연동 테스트 (Sweep wired to the app lifespan)."""

    async def test_lifespan_starts_and_stops_sweep(self, monkeypatch):
        monkeypatch.setattr(settings, "EMAIL_QUEUE_ENABLED", True)
        with patch.object(email_queue_service, "start") as start, \
                patch.object(email_queue_service, "stop", AsyncMock()) as stop:
            async with app.router.lifespan_context(app):
                start.assert_called_once()
                stop.assert_not_awaited()
        stop.assert_awaited_once()

    async def test_disabled_queue_is_not_started(self, monkeypatch):
        monkeypatch.setattr(settings, "EMAIL_QUEUE_ENABLED", False)
        with patch.object(email_queue_service, "start") as start, \
                patch.object(email_queue_service, "stop", AsyncMock()) as stop:
            async with app.router.lifespan_context(app):
                pass
        start.assert_not_called()
        stop.assert_awaited_once()
