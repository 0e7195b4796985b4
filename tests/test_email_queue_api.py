"""이메일 큐 관리자 API 테스트.

Email queue admin API tests.
"""

from unittest.mock import patch

from httpx import AsyncClient

from app.services.email_queue_service import OutboundEmail, email_queue_service
from tests.conftest import auth_header, make_token

QUEUE_URL = "/api/v1/email-queue"


class RecordingTransport:
    def __init__(self) -> None:
        self.sent: list[OutboundEmail] = []

    async def __call__(self, email: OutboundEmail) -> None:
        self.sent.append(email)


class TestEmailQueueApi:
    """이메일 큐 API 테스트."""

    async def test_non_admin_forbidden(self, client: AsyncClient, dave_token):
        res = await client.get(QUEUE_URL, headers=auth_header(dave_token))
        assert res.status_code == 403
        res = await client.post(f"{QUEUE_URL}/process", headers=auth_header(dave_token))
        assert res.status_code == 403

    async def test_process_sends_queued_mention(
        self, client: AsyncClient, admin_token, dave_token, task, alice
    ):
        await client.post(
            "/api/v1/comments",
            json={"content": "@alice please check", "task_id": str(task.id)},
            headers=auth_header(dave_token),
        )

        res = await client.get(QUEUE_URL, params={"status": "pending"}, headers=auth_header(admin_token))
        pending = res.json()["items"]
        assert {e["template_name"] for e in pending} == {"mention", "task_comment"}

        transport = RecordingTransport()
        with patch.object(email_queue_service, "transport", transport):
            res = await client.post(f"{QUEUE_URL}/process", headers=auth_header(admin_token))
        assert res.status_code == 200
        assert res.json() == {"selected": 2, "sent": 2, "retried": 0, "failed": 0, "skipped": False}
        assert sorted(e.to_email for e in transport.sent) == ["alice@test.com", "carol@test.com"]

        res = await client.get(QUEUE_URL, params={"status": "sent"}, headers=auth_header(admin_token))
        assert res.json()["total"] == 2

    async def test_invalid_status_filter(self, client: AsyncClient, admin_user):
        res = await client.get(
            QUEUE_URL, params={"status": "bounced"}, headers=auth_header(make_token(admin_user))
        )
        assert res.status_code == 422
