"""활동 로그 이벤트 스키마 정의.

Activity log event schemas. Each event kind is a tagged variant with a
typed details part, discriminated by action. Comment events also carry
a typed meta part. The action tag is stored in activity_logs.action;
details and meta go into the JSON columns.
"""

from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter


# === 코멘트 (Comment) ===

class CommentAddedDetails(BaseModel):
    """코멘트 작성 상세 (Comment-added details)."""

    comment_id: str  # 코멘트 UUID 문자열 (Comment UUID)
    comment_preview: str  # 본문 앞 50자 (First 50 characters of the body)


class CommentAddedMeta(BaseModel):
    """코멘트 작성 메타 정보.

    Attributes:
        mention_count: 해결된 멘션 수 (Resolved mention count)
        is_reply: 답글 여부 (Whether the comment has a parent)
        mentioned_user_ids: 멘션된 사용자 ID (Resolved mention ids, in order)
    """

    mention_count: int
    is_reply: bool
    mentioned_user_ids: list[str] = []


class CommentAddedEvent(BaseModel):
    action: Literal["comment_added"] = "comment_added"
    details: CommentAddedDetails
    meta: CommentAddedMeta | None = None


# === 업무 (Task) ===

class TaskCreatedDetails(BaseModel):
    title: str
    assigned_to: str | None = None


class TaskCreatedEvent(BaseModel):
    action: Literal["task_created"] = "task_created"
    details: TaskCreatedDetails


class TaskStatusUpdatedDetails(BaseModel):
    old_status: str
    new_status: str


class TaskStatusUpdatedEvent(BaseModel):
    action: Literal["task_status_updated"] = "task_status_updated"
    details: TaskStatusUpdatedDetails


# === 프로젝트 (Project) ===

class ProjectCreatedDetails(BaseModel):
    project_name: str
    project_code: str


class ProjectCreatedEvent(BaseModel):
    action: Literal["project_created"] = "project_created"
    details: ProjectCreatedDetails


class ProjectMemberAddedDetails(BaseModel):
    user_id: str
    role: str


class ProjectMemberAddedEvent(BaseModel):
    action: Literal["project_member_added"] = "project_member_added"
    details: ProjectMemberAddedDetails


# 태그 기반 유니온 — Union discriminated on the action tag
ActivityEvent = Annotated[
    Union[
        CommentAddedEvent,
        TaskCreatedEvent,
        TaskStatusUpdatedEvent,
        ProjectCreatedEvent,
        ProjectMemberAddedEvent,
    ],
    Field(discriminator="action"),
]

activity_event_adapter: TypeAdapter[ActivityEvent] = TypeAdapter(ActivityEvent)


class ActivityResponse(BaseModel):
    """활동 로그 응답 스키마.

    Activity log response schema. event is the parsed tagged payload.

    Attributes:
        id: 로그 UUID (Log identifier)
        user_id: 행위자 UUID (Actor)
        task_id / project_id: 대상 범위 (Scope)
        event: 태그된 이벤트 (Tagged payload)
        created_at: 생성 일시 (Creation timestamp)
    """

    id: str
    user_id: str | None
    task_id: str | None = None
    project_id: str | None = None
    event: ActivityEvent
    created_at: datetime
