"""프로젝트 라우터 — 프로젝트 생성/조회 및 멤버 관리.

Projects Router — Project creation, listing, detail, member management,
and the project's tasks, comments and activity.
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
from app.schemas.project import ProjectCreate, ProjectMemberAdd, ProjectMemberResponse, ProjectResponse
from app.schemas.task import TaskResponse
from app.services.activity_service import activity_service
from app.services.comment_service import comment_service
from app.services.email_queue_service import email_queue_service
from app.services.project_service import project_service
from app.services.task_service import task_service

router: APIRouter = APIRouter()


@router.get("", response_model=list[ProjectResponse])
async def list_projects(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> list[ProjectResponse]:
    """내가 생성했거나 멤버인 프로젝트 목록을 조회합니다.

    List projects the current user created or is a member of.
    """
    return await project_service.list_projects(db, current_user)


@router.post("", response_model=ProjectResponse, status_code=201)
async def create_project(
    data: ProjectCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> ProjectResponse:
    """프로젝트를 생성합니다 (Create a project)."""
    result: ProjectResponse = await project_service.create_project(db, data, current_user)
    await db.commit()
    return result


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> ProjectResponse:
    """프로젝트를 조회합니다 (Retrieve a project)."""
    return await project_service.get_project(db, project_id)


@router.post("/{project_id}/members", response_model=ProjectMemberResponse, status_code=201)
async def add_member(
    project_id: UUID,
    data: ProjectMemberAdd,
    background_tasks: BackgroundTasks,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> ProjectMemberResponse:
    """프로젝트에 멤버를 추가합니다.

    Add a member; they are notified and emailed unless they added themselves.
    """
    result: ProjectMemberResponse = await project_service.add_member(db, project_id, data, current_user)
    await db.commit()
    if settings.APP_ENV == "production":
        background_tasks.add_task(email_queue_service.process_now)
    return result


@router.get("/{project_id}/tasks", response_model=list[TaskResponse])
async def list_project_tasks(
    project_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    status: str | None = None,
) -> list[TaskResponse]:
    """프로젝트의 업무 목록을 조회합니다 (List a project's tasks)."""
    return await task_service.list_project_tasks(db, project_id, status)


@router.get("/{project_id}/comments", response_model=list[CommentResponse])
async def list_project_comments(
    project_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> list[CommentResponse]:
    """프로젝트 코멘트를 작성순으로 조회합니다 (Project comments, oldest first)."""
    return await comment_service.list_comments(db, project_id=project_id)


@router.get("/{project_id}/activity", response_model=list[ActivityResponse])
async def list_project_activity(
    project_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> list[ActivityResponse]:
    """프로젝트 활동 로그를 조회합니다 (Project activity, newest first)."""
    return await activity_service.list_activity(db, project_id=project_id)
