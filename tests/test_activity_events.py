"""활동 이벤트 스키마 테스트.

Activity event schema tests — tag dispatch and which variants carry meta.
"""

import pytest
from pydantic import ValidationError

from app.schemas.activity import (
    CommentAddedEvent,
    ProjectCreatedEvent,
    ProjectMemberAddedEvent,
    TaskCreatedEvent,
    TaskStatusUpdatedEvent,
    activity_event_adapter,
)


class TestActivityEvents:
    """태그된 활동 이벤트 테스트."""

    @pytest.mark.parametrize(
        "event_cls",
        [TaskCreatedEvent, TaskStatusUpdatedEvent, ProjectCreatedEvent, ProjectMemberAddedEvent],
    )
    def test_only_comment_events_carry_meta(self, event_cls):
        assert "meta" not in event_cls.model_fields
        assert "meta" in CommentAddedEvent.model_fields

    def test_stored_row_without_meta_parses(self):
        event = activity_event_adapter.validate_python(
            {
                "action": "task_status_updated",
                "details": {"old_status": "todo", "new_status": "done"},
                "meta": None,
            }
        )
        assert isinstance(event, TaskStatusUpdatedEvent)
        assert event.details.new_status == "done"
        assert "meta" not in event.model_dump()

    def test_comment_meta_is_typed(self):
        event = activity_event_adapter.validate_python(
            {
                "action": "comment_added",
                "details": {"comment_id": "c1", "comment_preview": "hi"},
                "meta": {"mention_count": 1, "is_reply": False, "mentioned_user_ids": ["u1"]},
            }
        )
        assert isinstance(event, CommentAddedEvent)
        assert event.meta.mention_count == 1

        with pytest.raises(ValidationError):
            activity_event_adapter.validate_python(
                {
                    "action": "comment_added",
                    "details": {"comment_id": "c1", "comment_preview": "hi"},
                    "meta": {"mention_count": "several", "is_reply": False},
                }
            )

    def test_unknown_action_rejected(self):
        with pytest.raises(ValidationError):
            activity_event_adapter.validate_python({"action": "task_deleted", "details": {}})
