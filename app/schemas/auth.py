"""인증 관련 Pydantic 요청/응답 스키마 정의.

Authentication-related Pydantic request/response schema definitions.
Covers login and current user info.
"""

from pydantic import BaseModel

from app.schemas.user import UserResponse


class LoginRequest(BaseModel):
    """로그인 요청 스키마.

    Login request schema.

    Attributes:
        email: 이메일 (Login email, compared case-insensitively)
        password: 비밀번호 (Plain text password, verified against bcrypt hash)
    """

    email: str  # 로그인 이메일 (Login email)
    password: str  # 비밀번호 — 평문, 서버에서 bcrypt 해시와 비교 (Plain text, compared to bcrypt hash)


class TokenResponse(BaseModel):
    """JWT 토큰 발급 응답 스키마.

    JWT token issuance response schema.

    Attributes:
        access_token: JWT 액세스 토큰 (Access token)
        token_type: 토큰 유형 (Always "bearer" for Authorization header)
        user: 로그인한 사용자 (Logged-in user)
    """

    access_token: str  # JWT 액세스 토큰 (Access token)
    token_type: str = "bearer"  # 토큰 유형 — 항상 "bearer" (Token type for Authorization header)
    user: UserResponse
