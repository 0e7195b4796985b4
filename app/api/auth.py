"""인증 라우터 — 로그인, 내 정보.

Auth Router — Login and current user endpoints.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.database import get_db
from app.models.user import User
from app.schemas.auth import LoginRequest, TokenResponse
from app.schemas.user import UserResponse
from app.services.auth_service import auth_service
from app.services.user_service import user_service

router: APIRouter = APIRouter()


@router.post("/login", response_model=TokenResponse)
async def login(
    data: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """이메일/비밀번호 로그인.

    Email + password login returning a bearer access token.
    """
    return await auth_service.login(db, data)


@router.get("/me", response_model=UserResponse)
async def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
) -> UserResponse:
    """현재 로그인한 사용자 정보를 조회합니다 (Current user)."""
    return user_service.to_response(current_user)
