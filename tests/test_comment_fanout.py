"""코멘트 알림 팬아웃 테스트.

Comment fan-out tests — recipient planning, the persisted notifications,
queued emails and activity row of a comment, and validation.
"""

import uuid

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.activity_log import ActivityLog
from app.models.comment import Comment
from app.models.email_queue import QueuedEmail
from app.models.notification import Notification
from app.schemas.comment import CommentCreate
from app.services.comment_service import comment_service
from app.services.notification_service import (
    MENTION_TITLE,
    TASK_COMMENT_TITLE,
    PlannedRecipient,
    plan_comment_recipients,
)
from app.utils.exceptions import BadRequestError, NotFoundError


class TestPlanCommentRecipients:
    """수신자 결정 로직 테스트."""

    def test_author_self_mention_excluded(self):
        author = uuid.uuid4()
        other = uuid.uuid4()
        plan = plan_comment_recipients(author, [author, other])
        assert plan == [PlannedRecipient(other, "mention")]

    def test_assignee_equal_to_author_not_notified(self):
        author = uuid.uuid4()
        assert plan_comment_recipients(author, [], assignee_id=author) == []

    def test_assignee_already_mentioned_notified_once(self):
        author, assignee = uuid.uuid4(), uuid.uuid4()
        plan = plan_comment_recipients(author, [assignee], assignee_id=assignee)
        assert plan == [PlannedRecipient(assignee, "mention")]

    def test_mentions_first_then_assignee(self):
        author, a, b, assignee = (uuid.uuid4() for _ in range(4))
        plan = plan_comment_recipients(author, [b, a], assignee_id=assignee)
        assert [p.user_id for p in plan] == [b, a, assignee]
        assert [p.reason for p in plan] == ["mention", "mention", "assignee"]

    def test_duplicate_mentions_collapse(self):
        author, a = uuid.uuid4(), uuid.uuid4()
        assert plan_comment_recipients(author, [a, a]) == [PlannedRecipient(a, "mention")]


async def _count(db: AsyncSession, model) -> int:
    return (await db.execute(select(func.count()).select_from(model))).scalar()


class TestCreateComment:
    """코멘트 작성 및 팬아웃 테스트."""

    async def test_mentioned_assignee_gets_single_mention(self, db: AsyncSession, task, carol, dave):
        """dave가 carol 담당 업무에 "Great work @carol!" 작성 — carol에게 멘션 알림 1건."""
        result = await comment_service.create_comment(
            db, CommentCreate(content="Great work @carol!", task_id=str(task.id)), dave
        )
        await db.commit()

        assert result.mentioned_user_ids == [str(carol.id)]

        notifications = (await db.execute(select(Notification))).scalars().all()
        assert len(notifications) == 1
        assert notifications[0].user_id == carol.id
        assert notifications[0].title == MENTION_TITLE
        assert notifications[0].type == "info"
        assert notifications[0].created_by == dave.id
        assert str(notifications[0].comment_id) == result.id

        emails = (await db.execute(select(QueuedEmail))).scalars().all()
        assert len(emails) == 1
        assert emails[0].to_email == "carol@test.com"
        assert emails[0].template_name == "mention"
        assert emails[0].status == "pending"
        assert emails[0].attempts == 0
        assert emails[0].template_data["mentionedBy"] == "dave"

    async def test_assignee_gets_task_comment(self, db: AsyncSession, task, carol, dave):
        await comment_service.create_comment(
            db, CommentCreate(content="Pushed a fix", task_id=str(task.id)), dave
        )
        notification = (await db.execute(select(Notification))).scalar_one()
        assert notification.user_id == carol.id
        assert notification.title == TASK_COMMENT_TITLE
        email = (await db.execute(select(QueuedEmail))).scalar_one()
        assert email.template_name == "task_comment"
        assert email.subject == 'New comment on "Landing page"'

    async def test_mentions_then_assignee_order(self, db: AsyncSession, task, alice, bob, carol, dave):
        await comment_service.create_comment(
            db, CommentCreate(content="@bob @alice please review", task_id=str(task.id)), dave
        )
        notifications = (
            await db.execute(select(Notification).order_by(Notification.created_at, Notification.id))
        ).scalars().all()
        assert [n.user_id for n in notifications] == [bob.id, alice.id, carol.id]
        assert [n.title for n in notifications] == [MENTION_TITLE, MENTION_TITLE, TASK_COMMENT_TITLE]

    async def test_author_is_assignee_and_self_mention(self, db: AsyncSession, task, carol):
        await comment_service.create_comment(
            db, CommentCreate(content="note to self @carol", task_id=str(task.id)), carol
        )
        assert await _count(db, Notification) == 0
        assert await _count(db, QueuedEmail) == 0
        assert await _count(db, Comment) == 1

    async def test_project_comment_deep_link(self, db: AsyncSession, project, alice, dave):
        result = await comment_service.create_comment(
            db, CommentCreate(content="Kickoff notes for @alice", project_id=str(project.id)), dave
        )
        notification = (await db.execute(select(Notification))).scalar_one()
        assert notification.link_url == f"/projects/{project.id}#comment-{result.id}"
        assert notification.project_id == project.id
        assert notification.task_id is None
        email = (await db.execute(select(QueuedEmail))).scalar_one()
        assert email.template_data["actionUrl"].endswith(notification.link_url)
        assert email.template_data["taskTitle"] is None

    async def test_task_comment_deep_link(self, db: AsyncSession, task, project, dave):
        result = await comment_service.create_comment(
            db, CommentCreate(content="ok", task_id=str(task.id)), dave
        )
        notification = (await db.execute(select(Notification))).scalar_one()
        assert notification.link_url == f"/projects/{project.id}/tasks/{task.id}#comment-{result.id}"

    async def test_activity_row_recorded(self, db: AsyncSession, task, carol, dave):
        parent = await comment_service.create_comment(
            db, CommentCreate(content="first", task_id=str(task.id)), carol
        )
        await comment_service.create_comment(
            db,
            CommentCreate(content="@carol agreed", task_id=str(task.id), parent_id=parent.id),
            dave,
        )
        logs = (
            await db.execute(select(ActivityLog).order_by(ActivityLog.created_at, ActivityLog.id))
        ).scalars().all()
        assert [log.action for log in logs] == ["comment_added", "comment_added"]
        assert logs[1].meta == {
            "mention_count": 1,
            "is_reply": True,
            "mentioned_user_ids": [str(carol.id)],
        }
        assert logs[1].details["comment_preview"] == "@carol agreed"
        assert logs[1].task_id == task.id

    async def test_reply_response_has_parent_fields(self, db: AsyncSession, task, carol, dave):
        parent = await comment_service.create_comment(
            db, CommentCreate(content="Can we ship Friday?", task_id=str(task.id)), carol
        )
        reply = await comment_service.create_comment(
            db, CommentCreate(content="Yes", task_id=str(task.id), parent_id=parent.id), dave
        )
        assert reply.parent_id == parent.id
        assert reply.parent_user_name == "carol"
        assert reply.parent_content == "Can we ship Friday?"
        assert reply.user_name == "dave"


class TestCreateCommentValidation:
    """코멘트 검증 테스트 — 실패 시 아무것도 기록되지 않음."""

    async def test_blank_content(self, db: AsyncSession, task, dave):
        with pytest.raises(BadRequestError):
            await comment_service.create_comment(
                db, CommentCreate(content="   ", task_id=str(task.id)), dave
            )
        assert await _count(db, Comment) == 0

    async def test_no_owner(self, db: AsyncSession, dave):
        with pytest.raises(BadRequestError):
            await comment_service.create_comment(db, CommentCreate(content="hi"), dave)

    async def test_both_owners(self, db: AsyncSession, task, project, dave):
        with pytest.raises(BadRequestError):
            await comment_service.create_comment(
                db,
                CommentCreate(content="hi", task_id=str(task.id), project_id=str(project.id)),
                dave,
            )

    async def test_unknown_task(self, db: AsyncSession, dave):
        with pytest.raises(NotFoundError):
            await comment_service.create_comment(
                db, CommentCreate(content="hi", task_id=str(uuid.uuid4())), dave
            )

    async def test_malformed_id(self, db: AsyncSession, dave):
        with pytest.raises(BadRequestError):
            await comment_service.create_comment(
                db, CommentCreate(content="hi", task_id="not-a-uuid"), dave
            )

    async def test_parent_in_other_scope(self, db: AsyncSession, task, project, dave):
        project_comment = await comment_service.create_comment(
            db, CommentCreate(content="project level", project_id=str(project.id)), dave
        )
        with pytest.raises(BadRequestError):
            await comment_service.create_comment(
                db,
                CommentCreate(content="reply", task_id=str(task.id), parent_id=project_comment.id),
                dave,
            )
        assert await _count(db, Comment) == 1
