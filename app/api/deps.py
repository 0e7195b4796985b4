"""FastAPI 의존성 주입 모듈 — 인증 및 권한 검사.

FastAPI dependency injection module — Authentication and authorization.
Provides reusable dependencies for extracting the current user from JWT
and enforcing system roles on API endpoints.

Authentication Flow:
    1. 클라이언트가 Authorization: Bearer <token> 헤더를 전송
       (Client sends Authorization: Bearer <token> header)
    2. HTTPBearer가 토큰을 추출 (HTTPBearer extracts the token)
    3. decode_token()이 JWT를 검증하고 페이로드를 반환
       (decode_token verifies JWT and returns payload)
    4. 페이로드의 "sub" 필드로 DB에서 사용자를 조회
       (User is fetched from DB using payload "sub" field)
    5. 사용자 활성 상태를 확인 (User active status is verified)
"""

from typing import Annotated, Awaitable, Callable
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.user import User
from app.repositories.user_repository import user_repository
from app.utils.jwt import decode_token

# HTTP Bearer 토큰 추출기 — Authorization 헤더에서 JWT 토큰 추출
# (Extracts JWT token from Authorization: Bearer <token> header)
security: HTTPBearer = HTTPBearer()


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """JWT 토큰에서 현재 인증된 사용자를 추출합니다.

    Decode JWT from the Authorization header and return the authenticated user.
    The user is passed explicitly into every service call.

    Args:
        credentials: HTTP Bearer 토큰 자격 증명 (Bearer token credentials from header)
        db: 비동기 DB 세션 (Async database session)

    Returns:
        User: 인증된 사용자 ORM 인스턴스 (Authenticated user ORM instance)

    Raises:
        HTTPException(401): 토큰이 유효하지 않거나 만료됨 (Invalid or expired token)
        HTTPException(401): 사용자를 찾을 수 없거나 비활성 (User not found or inactive)
    """
    try:
        payload: dict = decode_token(credentials.credentials)
        if payload.get("type") != "access":
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token type")
        user_id: str | None = payload.get("sub")
        if user_id is None:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
        user_uuid: UUID = UUID(user_id)
    except HTTPException:
        raise
    except (jwt.ExpiredSignatureError, jwt.InvalidTokenError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")

    user: User | None = await user_repository.get_by_id(db, user_uuid)

    if user is None or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found or inactive")

    return user


def require_role(*roles: str) -> Callable[..., Awaitable[User]]:
    """시스템 역할 기반 권한 검사 의존성 팩토리.

    Dependency factory enforcing that the current user holds one of the
    given system roles.

    Args:
        roles: 허용되는 역할 (Allowed roles: admin | project_manager | member)

    Returns:
        FastAPI 의존성 함수 — 인증된 사용자 반환 또는 403 발생
        (FastAPI dependency function that returns User or raises 403)
    """
    async def _check(
        current_user: Annotated[User, Depends(get_current_user)],
    ) -> User:
        if current_user.role not in roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return current_user
    return _check


# 편의 의존성 — Admin only
require_admin = require_role("admin")
