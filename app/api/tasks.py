"""업무 라우터 — 업무 생성/조회/상태 변경.

Tasks Router — Task creation, detail, status change, and the task's
comments and activity.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.config import settings
from app.database import get_db
from app.models.user import User
from app.schemas.activity import ActivityResponse
from app.schemas.comment import CommentResponse
from app.schemas.task import TaskCreate, TaskDetailResponse, TaskResponse, TaskStatusUpdate
from app.services.activity_service import activity_service
from app.services.comment_service import comment_service
from app.services.email_queue_service import email_queue_service
from app.services.task_service import task_service

router: APIRouter = APIRouter()


@router.post("", response_model=TaskResponse, status_code=201)
async def create_task(
    data: TaskCreate,
    background_tasks: BackgroundTasks,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> TaskResponse:
    """업무를 생성합니다.

    Create a task. The assignee, when not the creator, is notified and emailed.
    """
    result: TaskResponse = await task_service.create_task(db, data, current_user)
    await db.commit()
    if settings.APP_ENV == "production":
        background_tasks.add_task(email_queue_service.process_now)
    return result


@router.get("/{task_id}", response_model=TaskDetailResponse)
async def get_task(
    task_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> TaskDetailResponse:
    """업무 상세를 코멘트와 함께 조회합니다 (Task detail with comments)."""
    return await task_service.get_task(db, task_id)


@router.patch("/{task_id}/status", response_model=TaskResponse)
async def update_task_status(
    task_id: UUID,
    data: TaskStatusUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> TaskResponse:
    """업무 상태를 변경합니다 (Change a task's status)."""
    result: TaskResponse = await task_service.update_status(db, task_id, data.status, current_user)
    await db.commit()
    return result


@router.get("/{task_id}/comments", response_model=list[CommentResponse])
async def list_task_comments(
    task_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> list[CommentResponse]:
    """업무 코멘트를 작성순으로 조회합니다 (Task comments, oldest first)."""
    return await comment_service.list_comments(db, task_id=task_id)


@router.get("/{task_id}/activity", response_model=list[ActivityResponse])
async def list_task_activity(
    task_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> list[ActivityResponse]:
    """업무 활동 로그를 조회합니다 (Task activity, newest first)."""
    return await activity_service.list_activity(db, task_id=task_id)
