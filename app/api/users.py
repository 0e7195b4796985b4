"""사용자 라우터 — 활성 사용자 목록.

Users Router — Active user directory (mention autocomplete source).
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.database import get_db
from app.models.user import User
from app.schemas.user import UserResponse
from app.services.user_service import user_service

router: APIRouter = APIRouter()


@router.get("", response_model=list[UserResponse])
async def list_users(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> list[UserResponse]:
    """활성 사용자 목록을 이름순으로 조회합니다.

    List active users ordered by display name.
    """
    return await user_service.list_active_users(db)
