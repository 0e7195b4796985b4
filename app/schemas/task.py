"""업무 Pydantic 요청/응답 스키마 정의.

Task Pydantic request/response schema definitions.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from app.schemas.comment import CommentResponse


class TaskCreate(BaseModel):
    """업무 생성 요청 스키마.

    Task creation request.

    Attributes:
        project_id: 소속 프로젝트 UUID (Owning project)
        title: 제목 (Title)
        description: 설명 (Optional description)
        assigned_to: 담당자 UUID (Optional assignee)
        parent_task_id: 상위 업무 UUID (Optional parent task)
        priority: 우선순위 (low | medium | high | critical)
        status: 상태 (backlog | todo | in_progress | review | done)
        start_date / due_date: 일정 (Optional schedule)
        estimated_hours: 예상 시간 (Optional estimate)
        tags: 태그 목록 (Free-form tags)
    """

    project_id: str
    title: str = Field(..., min_length=1, max_length=500)
    description: str | None = None
    assigned_to: str | None = None
    parent_task_id: str | None = None
    priority: str = Field("medium", pattern=r"^(low|medium|high|critical)$")
    status: str = Field("backlog", pattern=r"^(backlog|todo|in_progress|review|done)$")
    start_date: date | None = None
    due_date: date | None = None
    estimated_hours: Decimal | None = None
    tags: list[str] = []


class TaskStatusUpdate(BaseModel):
    """업무 상태 변경 요청 스키마 (Status change request)."""

    status: str = Field(..., pattern=r"^(backlog|todo|in_progress|review|done)$")


class TaskResponse(BaseModel):
    """업무 응답 스키마 (Task response)."""

    id: str
    project_id: str
    title: str
    description: str | None = None
    assigned_to: str | None = None
    assignee_name: str | None = None  # 담당자 이름 (Assignee display name)
    created_by: str | None = None
    parent_task_id: str | None = None
    priority: str
    status: str
    start_date: date | None = None
    due_date: date | None = None
    estimated_hours: Decimal | None = None
    actual_hours: Decimal | None = None
    tags: list[str] = []
    created_at: datetime
    updated_at: datetime


class TaskDetailResponse(TaskResponse):
    """업무 상세 응답 스키마 — 코멘트 포함 (Task with its comments)."""

    comments: list[CommentResponse] = []
