"""알림 API 테스트.

Notification API tests — list, unread count, mark read.
"""

import uuid

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.repositories.notification_repository import notification_repository
from tests.conftest import auth_header, make_token

NOTIFICATIONS_URL = "/api/v1/notifications"


async def _notify(db: AsyncSession, user, title: str = "Hello"):
    n = await notification_repository.create_notification(
        db, user_id=user.id, title=title, message=f"{title} message", created_by=None
    )
    await db.commit()
    return n


class TestListNotifications:
    """알림 목록 테스트."""

    async def test_only_own_notifications(self, client: AsyncClient, db: AsyncSession, alice, bob):
        await _notify(db, alice, "For alice")
        await _notify(db, bob, "For bob")

        res = await client.get(NOTIFICATIONS_URL, headers=auth_header(make_token(alice)))
        assert res.status_code == 200
        data = res.json()
        assert data["total"] == 1
        assert data["items"][0]["title"] == "For alice"
        assert data["items"][0]["is_read"] is False

    async def test_pagination_params_validated(self, client: AsyncClient, alice):
        res = await client.get(
            NOTIFICATIONS_URL, params={"per_page": 0}, headers=auth_header(make_token(alice))
        )
        assert res.status_code == 422

    async def test_comment_mention_creates_notification(
        self, client: AsyncClient, dave_token, project, alice
    ):
        await client.post(
            "/api/v1/comments",
            json={"content": "@alice can you review?", "project_id": str(project.id)},
            headers=auth_header(dave_token),
        )
        res = await client.get(NOTIFICATIONS_URL, headers=auth_header(make_token(alice)))
        item = res.json()["items"][0]
        assert item["title"] == "You were mentioned in a comment"
        assert item["link_url"].startswith(f"/projects/{project.id}#comment-")
        assert item["project_id"] == str(project.id)


class TestReadState:
    """읽음 처리 테스트."""

    async def test_unread_count_and_mark_read(self, client: AsyncClient, db: AsyncSession, alice):
        first = await _notify(db, alice, "One")
        await _notify(db, alice, "Two")
        headers = auth_header(make_token(alice))

        res = await client.get(f"{NOTIFICATIONS_URL}/unread-count", headers=headers)
        assert res.json() == {"unread_count": 2}

        res = await client.patch(f"{NOTIFICATIONS_URL}/{first.id}/read", headers=headers)
        assert res.status_code == 200

        res = await client.get(f"{NOTIFICATIONS_URL}/unread-count", headers=headers)
        assert res.json() == {"unread_count": 1}

        res = await client.get(NOTIFICATIONS_URL, params={"unread_only": True}, headers=headers)
        assert [n["title"] for n in res.json()["items"]] == ["Two"]

    async def test_mark_all_read(self, client: AsyncClient, db: AsyncSession, alice):
        await _notify(db, alice, "One")
        await _notify(db, alice, "Two")
        headers = auth_header(make_token(alice))

        res = await client.patch(f"{NOTIFICATIONS_URL}/read-all", headers=headers)
        assert res.status_code == 200
        assert "2" in res.json()["message"]

        res = await client.get(f"{NOTIFICATIONS_URL}/unread-count", headers=headers)
        assert res.json() == {"unread_count": 0}

    async def test_cannot_mark_someone_elses(self, client: AsyncClient, db: AsyncSession, alice, bob):
        n = await _notify(db, alice)
        res = await client.patch(
            f"{NOTIFICATIONS_URL}/{n.id}/read", headers=auth_header(make_token(bob))
        )
        assert res.status_code == 404

    async def test_unknown_notification(self, client: AsyncClient, alice):
        res = await client.patch(
            f"{NOTIFICATIONS_URL}/{uuid.uuid4()}/read", headers=auth_header(make_token(alice))
        )
        assert res.status_code == 404
