"""코멘트 라우터 — 코멘트 작성.

Comments Router — Comment submission. The comment, its notifications,
its queued emails and its activity row commit together.
"""

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.config import settings
from app.database import get_db
from app.models.user import User
from app.schemas.comment import CommentCreate, CommentResponse
from app.services.comment_service import comment_service
from app.services.email_queue_service import email_queue_service

router: APIRouter = APIRouter()


@router.post("", response_model=CommentResponse, status_code=201)
async def create_comment(
    data: CommentCreate,
    background_tasks: BackgroundTasks,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> CommentResponse:
    """코멘트를 작성합니다.

    Create a comment on a task or a project. @mentions are resolved and
    each recipient gets one notification and one queued email. In
    production one queue pass is attempted right after the commit.
    """
    result: CommentResponse = await comment_service.create_comment(db, data, current_user)
    await db.commit()
    if settings.APP_ENV == "production":
        background_tasks.add_task(email_queue_service.process_now)
    return result
