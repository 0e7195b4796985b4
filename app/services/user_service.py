"""사용자 서비스 — 사용자 조회 비즈니스 로직.

User Service — Read-side user operations (directory and mention autocomplete).
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.repositories.user_repository import user_repository
from app.schemas.user import UserResponse


class UserService:
    """사용자 관련 비즈니스 로직을 처리하는 서비스.

    Service handling user business logic.
    """

    def to_response(self, user: User) -> UserResponse:
        """사용자 모델을 응답 스키마로 변환합니다.

        Convert a User model instance to a UserResponse schema.

        Args:
            user: 사용자 모델 (User model)

        Returns:
            UserResponse: 사용자 응답 (User response)
        """
        return UserResponse(
            id=str(user.id),
            username=user.username,
            full_name=user.full_name,
            email=user.email,
            role=user.role,
            avatar_url=user.avatar_url,
            is_active=user.is_active,
            created_at=user.created_at,
        )

    async def list_active_users(self, db: AsyncSession) -> list[UserResponse]:
        """활성 사용자 목록을 이름순으로 조회합니다.

        List active users ordered by display name; this is the source for
        mention autocomplete in the client.
        """
        users: list[User] = await user_repository.get_active_users(db)
        return [self.to_response(u) for u in users]


# 싱글턴 인스턴스 — Singleton instance
user_service: UserService = UserService()
