"""인증 서비스 — 로그인 비즈니스 로직.

Auth Service — Business logic for login and JWT issuance.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.repositories.user_repository import user_repository
from app.schemas.auth import LoginRequest, TokenResponse
from app.services.user_service import user_service
from app.utils.exceptions import UnauthorizedError
from app.utils.jwt import create_access_token
from app.utils.password import verify_password


class AuthService:
    """인증 관련 비즈니스 로직을 처리하는 서비스.

    Service handling authentication business logic.
    """

    def _build_jwt_payload(self, user: User) -> dict[str, str]:
        """JWT 토큰 페이로드를 생성합니다 (Build the JWT payload)."""
        return {
            "sub": str(user.id),
            "role": user.role,
        }

    async def login(
        self,
        db: AsyncSession,
        data: LoginRequest,
    ) -> TokenResponse:
        """이메일/비밀번호 로그인을 처리합니다.

        Process email + password login.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            data: 로그인 요청 데이터 (Login request data)

        Returns:
            TokenResponse: 토큰 응답 (Token response)

        Raises:
            UnauthorizedError: 잘못된 인증 정보이거나 비활성 계정일 때
                               (Invalid credentials or deactivated account)
        """
        user: User | None = await user_repository.get_by_email(db, data.email)
        if user is None or not verify_password(data.password, user.password_hash):
            raise UnauthorizedError("Invalid email or password")

        if not user.is_active:
            raise UnauthorizedError("Account is deactivated")

        return TokenResponse(
            access_token=create_access_token(self._build_jwt_payload(user)),
            user=user_service.to_response(user),
        )


# 싱글턴 인스턴스 — Singleton instance
auth_service: AuthService = AuthService()
