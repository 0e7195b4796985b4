"""업무 API 테스트.

Task API tests — creation with assignment notice, detail, status changes.
"""

from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.email_queue import QueuedEmail
from app.models.notification import Notification
from tests.conftest import auth_header, make_token

TASKS_URL = "/api/v1/tasks"


class TestCreateTask:
    """업무 생성 테스트."""

    async def test_assignee_notified(
        self, client: AsyncClient, db: AsyncSession, dave_token, project, bob
    ):
        res = await client.post(
            TASKS_URL,
            json={
                "project_id": str(project.id),
                "title": "Write copy",
                "assigned_to": str(bob.id),
                "priority": "high",
                "due_date": "2026-11-01",
            },
            headers=auth_header(dave_token),
        )
        assert res.status_code == 201
        data = res.json()
        assert data["assignee_name"] == "bob"
        assert data["status"] == "backlog"

        notification = (await db.execute(select(Notification))).scalar_one()
        assert notification.user_id == bob.id
        assert notification.link_url == f"/projects/{project.id}/tasks/{data['id']}"
        email = (await db.execute(select(QueuedEmail))).scalar_one()
        assert email.template_name == "task_assigned"
        assert email.subject == "Task assigned: Write copy"
        assert "Due: 2026-11-01" in email.text_content

    async def test_self_assignment_not_notified(
        self, client: AsyncClient, db: AsyncSession, dave, dave_token, project
    ):
        res = await client.post(
            TASKS_URL,
            json={"project_id": str(project.id), "title": "Mine", "assigned_to": str(dave.id)},
            headers=auth_header(dave_token),
        )
        assert res.status_code == 201
        count = (await db.execute(select(func.count()).select_from(Notification))).scalar()
        assert count == 0

    async def test_inactive_assignee(self, client: AsyncClient, db: AsyncSession, dave_token, project):
        from tests.conftest import make_user
        gone = await make_user(db, "gone", is_active=False)
        await db.commit()
        res = await client.post(
            TASKS_URL,
            json={"project_id": str(project.id), "title": "X", "assigned_to": str(gone.id)},
            headers=auth_header(dave_token),
        )
        assert res.status_code == 404


class TestTaskDetail:
    """업무 상세 및 상태 변경 테스트."""

    async def test_detail_includes_comments(self, client: AsyncClient, dave_token, task):
        await client.post(
            "/api/v1/comments",
            json={"content": "First pass done", "task_id": str(task.id)},
            headers=auth_header(dave_token),
        )
        res = await client.get(f"{TASKS_URL}/{task.id}", headers=auth_header(dave_token))
        assert res.status_code == 200
        data = res.json()
        assert data["assignee_name"] == "carol"
        assert [c["content"] for c in data["comments"]] == ["First pass done"]

    async def test_status_update_records_activity(self, client: AsyncClient, carol, task):
        headers = auth_header(make_token(carol))
        res = await client.patch(
            f"{TASKS_URL}/{task.id}/status", json={"status": "in_progress"}, headers=headers
        )
        assert res.status_code == 200
        assert res.json()["status"] == "in_progress"

        res = await client.get(f"{TASKS_URL}/{task.id}/activity", headers=headers)
        event = res.json()[0]["event"]
        assert event["action"] == "task_status_updated"
        assert event["details"] == {"old_status": "backlog", "new_status": "in_progress"}
        assert "meta" not in event

    async def test_invalid_status(self, client: AsyncClient, dave_token, task):
        res = await client.patch(
            f"{TASKS_URL}/{task.id}/status", json={"status": "archived"}, headers=auth_header(dave_token)
        )
        assert res.status_code == 422

    async def test_project_task_filter(self, client: AsyncClient, dave_token, project, task):
        res = await client.get(
            f"/api/v1/projects/{project.id}/tasks",
            params={"status": "done"},
            headers=auth_header(dave_token),
        )
        assert res.json() == []
        res = await client.get(f"/api/v1/projects/{project.id}/tasks", headers=auth_header(dave_token))
        assert [t["title"] for t in res.json()] == ["Landing page"]
